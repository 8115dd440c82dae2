"""
Users service - user directory and credential verification
"""

import logging

import asyncpg
from fastapi import Depends
from werkzeug.security import check_password_hash, generate_password_hash

from market_api.database.connection import get_db_pool
from market_api.models.enums import ErrorType
from market_api.services.base_service import BaseService, ServiceResult, STORE_ERRORS

logger = logging.getLogger(__name__)


class UsersService(BaseService):
    """Service for user lookup and authentication"""

    def __init__(self, db_pool: asyncpg.Pool):
        super().__init__(db_pool, "usuarios")

    async def list_users(self) -> ServiceResult:
        """List users without their credential column"""
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch("SELECT id, nombre FROM usuarios ORDER BY id")
        except STORE_ERRORS as e:
            return self.store_failure("list_users", e)

        return ServiceResult.ok([dict(row) for row in rows])

    async def authenticate(self, name: str, password: str) -> ServiceResult:
        """
        Verify a password against the stored salted hash

        Args:
            name: Login handle (usuarios.nombre)
            password: Plain-text password supplied by the client

        Returns:
            ServiceResult with the user row minus `clave`. Fails with
            RESOURCE_NOT_FOUND for an unknown name and UNAUTHORIZED when the
            hash does not match.
        """
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, nombre, clave FROM usuarios WHERE nombre = $1", name
                )
        except STORE_ERRORS as e:
            return self.store_failure("authenticate", e)

        if row is None:
            logger.info(f"Authentication failed: unknown user '{name}'")
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, "User not found")

        user = dict(row)
        stored_hash = user.pop("clave", None) or ""
        try:
            verified = check_password_hash(stored_hash, password)
        except ValueError:
            # Stored value is not a werkzeug hash (legacy plaintext, bcrypt)
            logger.warning(f"Unrecognized credential format for user '{name}'")
            verified = False

        if not verified:
            logger.info(f"Authentication failed: bad credential for user '{name}'")
            return ServiceResult.fail(ErrorType.UNAUTHORIZED, "Invalid credentials")

        logger.info(f"User '{name}' authenticated")
        return ServiceResult.ok([user])

    async def create_user(self, name: str, password: str) -> ServiceResult:
        """Insert a user, storing only the salted hash of the password"""
        password_hash = generate_password_hash(password)
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "INSERT INTO usuarios (nombre, clave) VALUES ($1, $2) RETURNING id, nombre",
                    name, password_hash
                )
        except asyncpg.UniqueViolationError:
            return ServiceResult.fail(ErrorType.CONFLICT, f"User '{name}' already exists")
        except STORE_ERRORS as e:
            return self.store_failure("create_user", e)

        if row is None:
            return ServiceResult.fail(ErrorType.INSERT_FAILED, "User could not be added")

        logger.info(f"Created user '{name}'")
        return ServiceResult.ok([dict(row)])


def get_users_service(db_pool: asyncpg.Pool = Depends(get_db_pool)) -> UsersService:
    """Per-request users service bound to the application pool"""
    return UsersService(db_pool)
