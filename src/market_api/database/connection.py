"""
Database connection and pool management
"""

import asyncpg
import logging
from fastapi import Request

from market_api.config import settings

logger = logging.getLogger(__name__)


async def init_database(dsn: str = None) -> asyncpg.Pool:
    """Create the connection pool and verify the store is reachable"""
    dsn = dsn or settings.DATABASE_URL
    if not dsn:
        raise ValueError("DATABASE_URL environment variable is required")

    db_pool = await asyncpg.create_pool(
        dsn,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: asyncpg.Pool):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")


def get_db_pool(request: Request) -> asyncpg.Pool:
    """FastAPI dependency returning the pool owned by the running application"""
    db_pool = getattr(request.app.state, "db_pool", None)
    if db_pool is None:
        raise RuntimeError("Database pool is not initialized")
    return db_pool


def affected_rows(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 1' or 'INSERT 0 1'"""
    if not status:
        return 0
    try:
        return int(status.split()[-1])
    except ValueError:
        return 0
