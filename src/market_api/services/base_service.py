"""
Base service layer for parameterized store access
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

import asyncpg

from market_api.config import settings
from market_api.models.enums import ErrorType

logger = logging.getLogger(__name__)

# Failures raised by the driver or the network underneath it
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None

    @classmethod
    def ok(cls, rows: List[Dict[str, Any]]) -> "ServiceResult":
        return cls(success=True, data=rows, count=len(rows))

    @classmethod
    def fail(cls, error_type: ErrorType, error: str) -> "ServiceResult":
        return cls(success=False, error=error, error_type=error_type)


class BaseService:
    """Shared plumbing for services bound to one table of the store"""

    def __init__(self, db_pool: asyncpg.Pool, table_name: str):
        self.db_pool = db_pool
        self.table_name = table_name

    def store_failure(self, operation: str, exc: BaseException) -> ServiceResult:
        """Log a driver failure and turn it into a DATABASE_ERROR result"""
        logger.error(f"{operation} failed for {self.table_name}: {type(exc).__name__}", exc_info=True)

        message = f"Database operation failed: {operation}"
        if settings.EXPOSE_ERROR_DETAILS:
            message = f"{message}: {exc}"
        return ServiceResult.fail(ErrorType.DATABASE_ERROR, message)

    async def get_by_id(self, record_id: int) -> ServiceResult:
        """
        Fetch a single row by primary key

        Args:
            record_id: Value of the `id` column

        Returns:
            ServiceResult with a one-element data list, or RESOURCE_NOT_FOUND
        """
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(f"SELECT * FROM {self.table_name} WHERE id = $1", record_id)
        except STORE_ERRORS as e:
            return self.store_failure("get_by_id", e)

        if row is None:
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, f"Record {record_id} not found")
        return ServiceResult.ok([dict(row)])
