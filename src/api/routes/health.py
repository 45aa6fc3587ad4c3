"""
Health check API route
"""

from fastapi import APIRouter, HTTPException
from database.connection import get_db_pool
from services.base_service import DATABASE_EXCEPTIONS
from utils.helpers import isoformat_utc, utc_now

router = APIRouter()

@router.get("/health")
async def health_check():
    """
    Health check - verifies the database pool can serve a query
    """
    try:
        db_pool = get_db_pool()
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except DATABASE_EXCEPTIONS as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": isoformat_utc(utc_now()),
        "database": "connected"
    }
