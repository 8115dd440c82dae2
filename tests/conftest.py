"""
pytest configuration and fixtures for the Market API test suite
The asyncpg pool is replaced by an in-memory store injected into the app
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from werkzeug.security import generate_password_hash

from market_api.app import create_app


def _normalize(query: str) -> str:
    return " ".join(query.split())


class FakeStore:
    """In-memory stand-in for the `usuarios` and `productos` tables"""

    def __init__(self):
        self.productos: Dict[int, Dict[str, Any]] = {}
        self.usuarios: Dict[int, Dict[str, Any]] = {}
        self.statements: List[str] = []
        self.fail_with: Optional[BaseException] = None
        self.locks_taken = 0
        # Failure modes a real store can produce mid-operation
        self.insert_returns_nothing = False
        self.update_affects_nothing = False
        self.delete_after_update = False

    def add_product(self, product_id: int, name: str = "Widget", **overrides) -> Dict[str, Any]:
        row = {
            "id": product_id,
            "nombre": name,
            "descripcion": f"{name} description",
            "precio_costo": 10.0,
            "precio_venta": 15.0,
            "cantidad": 3,
            "fototgrafia": "",
        }
        row.update(overrides)
        self.productos[product_id] = row
        return row

    def add_user(self, name: str, password: str) -> Dict[str, Any]:
        user_id = max(self.usuarios, default=0) + 1
        row = {"id": user_id, "nombre": name, "clave": generate_password_hash(password)}
        self.usuarios[user_id] = row
        return row

    def mutating_statements(self) -> List[str]:
        return [s for s in self.statements if s.split()[0] in ("INSERT", "UPDATE", "DELETE")]


class FakeConnection:
    """Implements the subset of asyncpg.Connection the services use"""

    def __init__(self, store: FakeStore):
        self.store = store

    def _record(self, query: str) -> str:
        if self.store.fail_with is not None:
            raise self.store.fail_with
        sql = _normalize(query)
        self.store.statements.append(sql)
        return sql

    @asynccontextmanager
    async def transaction(self):
        yield

    async def fetch(self, query: str, *args):
        sql = self._record(query)
        if sql == "SELECT * FROM productos ORDER BY id":
            return [dict(self.store.productos[k]) for k in sorted(self.store.productos)]
        if sql == "SELECT id, nombre FROM usuarios ORDER BY id":
            return [
                {"id": row["id"], "nombre": row["nombre"]}
                for _, row in sorted(self.store.usuarios.items())
            ]
        raise AssertionError(f"Unexpected fetch: {sql}")

    async def fetchrow(self, query: str, *args):
        sql = self._record(query)
        if sql == "SELECT * FROM productos WHERE id = $1":
            row = self.store.productos.get(args[0])
            return dict(row) if row else None
        if sql == "SELECT * FROM usuarios WHERE id = $1":
            row = self.store.usuarios.get(args[0])
            return dict(row) if row else None
        if sql == "SELECT id, nombre, clave FROM usuarios WHERE nombre = $1":
            for row in self.store.usuarios.values():
                if row["nombre"] == args[0]:
                    return dict(row)
            return None
        if sql.startswith("INSERT INTO productos"):
            if self.store.insert_returns_nothing:
                return None
            new_id, name, description, cost, sale, quantity, image = args
            return dict(self.store.add_product(
                new_id, name,
                descripcion=description,
                precio_costo=cost,
                precio_venta=sale,
                cantidad=quantity,
                fototgrafia=image,
            ))
        if sql.startswith("INSERT INTO usuarios"):
            name, password_hash = args
            user_id = max(self.store.usuarios, default=0) + 1
            self.store.usuarios[user_id] = {"id": user_id, "nombre": name, "clave": password_hash}
            return {"id": user_id, "nombre": name}
        raise AssertionError(f"Unexpected fetchrow: {sql}")

    async def fetchval(self, query: str, *args):
        sql = self._record(query)
        if sql == "SELECT 1":
            return 1
        if sql == "SELECT COALESCE(MAX(id), 0) + 1 FROM productos":
            return max(self.store.productos, default=0) + 1
        if sql == "SELECT id FROM productos WHERE id = $1":
            return args[0] if args[0] in self.store.productos else None
        raise AssertionError(f"Unexpected fetchval: {sql}")

    async def execute(self, query: str, *args):
        sql = self._record(query)
        if sql.startswith("LOCK TABLE productos"):
            self.store.locks_taken += 1
            return "LOCK TABLE"
        if sql.startswith("UPDATE productos"):
            name, description, cost, sale, quantity, image, product_id = args
            row = self.store.productos.get(product_id)
            if row is None or self.store.update_affects_nothing:
                return "UPDATE 0"
            row.update(
                nombre=name,
                descripcion=description,
                precio_costo=cost,
                precio_venta=sale,
                cantidad=quantity,
                fototgrafia=image,
            )
            if self.store.delete_after_update:
                del self.store.productos[product_id]
            return "UPDATE 1"
        if sql == "DELETE FROM productos WHERE id = $1":
            removed = self.store.productos.pop(args[0], None)
            return f"DELETE {1 if removed else 0}"
        raise AssertionError(f"Unexpected execute: {sql}")


class FakePool:
    """Implements asyncpg.Pool.acquire() over a FakeStore"""

    def __init__(self, store: FakeStore):
        self.store = store
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        try:
            yield FakeConnection(self.store)
        finally:
            self.released += 1


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def db_pool(store) -> FakePool:
    return FakePool(store)


@pytest.fixture
def app(db_pool):
    return create_app(db_pool=db_pool)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client bound to the app in-process"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture
def product_payload() -> Dict[str, Any]:
    return {
        "name": "Coffee",
        "description": "Ground arabica, 500g",
        "price_cost": 4.5,
        "price_sale": 7.25,
        "quantity": 12,
        "image": "coffee.png",
    }


@pytest_asyncio.fixture
async def tolerant_client(app):
    """Client that receives the 500 response instead of the re-raised app exception"""
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
