"""
Phone Book Backend API Server
Core functionality: contact create, list, update and phone search over PostgreSQL
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, RUN_MIGRATIONS, MIGRATIONS_DIR
from database.connection import init_database, close_database
from database.migrations import run_migrations
from api.routes import health, contacts
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    db_pool = await init_database()
    try:
        if RUN_MIGRATIONS:
            await run_migrations(db_pool, MIGRATIONS_DIR)
        yield
    finally:
        await close_database()

# FastAPI app initialization
app = FastAPI(
    title="Phone Book Backend",
    description="Backend API for creating, listing, updating and searching contacts",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    # Browsers reject credentials with a wildcard origin
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Trace-ID"],
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(contacts.router, prefix="/contacts", tags=["Contacts"])

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
