"""
Configuration settings for the Phone Book Backend
"""

import os
import logging
from pathlib import Path

# Environment configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", 3000))

# Connection pool
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 1))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 5))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))
DB_STATEMENT_CACHE_SIZE = int(os.getenv("DB_STATEMENT_CACHE_SIZE", 0))  # 0 keeps pgbouncer happy

# Schema migrations
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "true").lower() in ("1", "true", "yes")
MIGRATIONS_DIR = Path(os.getenv(
    "MIGRATIONS_DIR",
    Path(__file__).resolve().parent.parent.parent / "migrations"
))

# Validate required environment variables
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")

if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
    logger.warning(
        f"DB_POOL_MIN_SIZE ({DB_POOL_MIN_SIZE}) exceeds DB_POOL_MAX_SIZE ({DB_POOL_MAX_SIZE}); "
        f"using {DB_POOL_MAX_SIZE} for both"
    )
    DB_POOL_MIN_SIZE = DB_POOL_MAX_SIZE

# CORS settings - permissive unless origins are listed explicitly
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

logger.info(f"Database pool: min={DB_POOL_MIN_SIZE} max={DB_POOL_MAX_SIZE}, migrations on startup: {RUN_MIGRATIONS}")
