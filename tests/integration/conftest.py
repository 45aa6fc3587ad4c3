"""
pytest fixtures for the PostgreSQL integration suite
Runs only when TEST_DATABASE_URL points at a disposable database.
"""

import os

import asyncpg
import httpx
import pytest
import pytest_asyncio

import database.connection as connection
from app import app
from config.settings import MIGRATIONS_DIR
from database.migrations import run_migrations

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


def pytest_collection_modifyitems(config, items):
    if TEST_DATABASE_URL:
        return
    skip = pytest.mark.skip(reason="TEST_DATABASE_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest_asyncio.fixture
async def db_pool(monkeypatch):
    """Migrated, emptied database installed as the global pool"""
    pool = await asyncpg.create_pool(TEST_DATABASE_URL, min_size=1, max_size=2)
    try:
        await run_migrations(pool, MIGRATIONS_DIR)
        async with pool.acquire() as conn:
            await conn.execute("TRUNCATE contacts")
        monkeypatch.setattr(connection, "db_pool", pool)
        yield pool
    finally:
        await pool.close()


@pytest_asyncio.fixture
async def api(db_pool):
    """Async HTTP client bound to the application in-process"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://phonebook.test") as client:
        yield client
