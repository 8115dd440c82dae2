"""
Health check API route
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends

from market_api.database.connection import get_db_pool
from market_api.services.base_service import STORE_ERRORS

router = APIRouter()


@router.get("/")
async def health_check(db_pool=Depends(get_db_pool)):
    """Report whether the store answers a trivial query"""
    try:
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except STORE_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {type(e).__name__}")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "connected"
    }
