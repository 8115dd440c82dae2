"""
User directory endpoint tests
"""

import pytest


class TestListUsers:

    @pytest.mark.asyncio
    async def test_lists_users_without_credentials(self, client, store):
        store.add_user("ana", "pw-ana")
        store.add_user("luis", "pw-luis")

        response = await client.get("/usuarios")

        assert response.status_code == 200
        assert response.json() == [{"id": 1, "name": "ana"}, {"id": 2, "name": "luis"}]
        assert "clave" not in response.text

    @pytest.mark.asyncio
    async def test_empty_directory_is_an_empty_list(self, client):
        response = await client.get("/usuarios")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, client, store):
        store.fail_with = OSError("connection reset")

        response = await client.get("/usuarios")

        assert response.status_code == 500


class TestAuthenticate:

    @pytest.mark.asyncio
    async def test_correct_credentials(self, client, store):
        store.add_user("ana", "s3cret")

        response = await client.post("/usuarios", json={"username": "ana", "password": "s3cret"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User authenticated"
        assert body["user"] == {"id": 1, "name": "ana"}

    @pytest.mark.asyncio
    async def test_success_payload_never_contains_credential(self, client, store):
        store.add_user("ana", "s3cret")

        response = await client.post("/usuarios", json={"username": "ana", "password": "s3cret"})

        assert "clave" not in response.text
        assert "s3cret" not in response.text
        assert store.usuarios[1]["clave"] not in response.text

    @pytest.mark.asyncio
    async def test_wrong_password_is_unauthorized_not_not_found(self, client, store):
        store.add_user("ana", "s3cret")

        response = await client.post("/usuarios", json={"username": "ana", "password": "guess"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self, client):
        response = await client.post("/usuarios", json={"username": "nobody", "password": "x"})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_plaintext_stored_credential_does_not_authenticate(self, client, store):
        store.usuarios[1] = {"id": 1, "nombre": "legacy", "clave": "plain"}

        response = await client.post("/usuarios", json={"username": "legacy", "password": "plain"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored", [
        "pa$$word",
        "$2b$10$N9qo8uLOickgx2ZMRZoMyeIjZAgcfl7p92ldGxad68LJZdL17lhWy",
        "scrypt:notanumber$salt$hash",
    ])
    async def test_foreign_credential_format_is_unauthorized(self, client, store, stored):
        store.usuarios[1] = {"id": 1, "nombre": "legacy", "clave": stored}

        response = await client.post("/usuarios", json={"username": "legacy", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"username": "ana"},
        {"password": "s3cret"},
        {"username": "", "password": "s3cret"},
        {},
    ])
    async def test_missing_fields_are_bad_request(self, client, store, body):
        response = await client.post("/usuarios", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation Error"
        assert store.statements == []
