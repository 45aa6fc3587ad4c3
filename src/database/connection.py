"""
Database connection and pool management
"""

import asyncpg
import logging
from config.settings import (
    DATABASE_URL,
    DB_POOL_MIN_SIZE,
    DB_POOL_MAX_SIZE,
    DB_COMMAND_TIMEOUT,
    DB_STATEMENT_CACHE_SIZE,
)

logger = logging.getLogger(__name__)

# Global database pool
db_pool = None

async def init_database():
    """Initialize database connection pool"""
    global db_pool
    db_pool = await asyncpg.create_pool(
        DATABASE_URL,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        statement_cache_size=DB_STATEMENT_CACHE_SIZE
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")

    logger.info("Database initialized successfully")
    return db_pool


async def close_database():
    """Close database connection pool"""
    global db_pool
    if db_pool:
        await db_pool.close()
        db_pool = None
    logger.info("Database connections closed")

def get_db_pool():
    """Get the database pool instance"""
    if db_pool is None:
        raise RuntimeError("Database pool is not initialized")
    return db_pool
