"""
Versioned SQL schema migrations

Migration files live in MIGRATIONS_DIR and are named
``NNNN_description.up.sql`` / ``NNNN_description.down.sql``. A bare
``NNNN_description.sql`` is treated as an up-only migration.
"""

import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

import asyncpg

logger = logging.getLogger(__name__)

MIGRATIONS_TABLE = "schema_migrations"

# Arbitrary constant shared by every process running migrations
MIGRATION_LOCK_ID = 7_340_021

_FILENAME_PATTERN = re.compile(r"^(?P<version>\d+)_(?P<name>[\w-]+?)(?:\.(?P<direction>up|down))?\.sql$")


class MigrationError(Exception):
    """Raised when migration files are inconsistent or cannot be applied"""


@dataclass
class Migration:
    """A single versioned schema change"""
    version: int
    name: str
    up_sql: str
    down_sql: Optional[str] = None


def discover_migrations(directory: Union[str, Path]) -> List[Migration]:
    """
    Load migrations from a directory, ordered by version

    Args:
        directory: Folder containing the ``.sql`` migration files

    Returns:
        List of Migration objects sorted by version

    Raises:
        MigrationError: If versions collide or a down script has no up script
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MigrationError(f"Migrations directory not found: {directory}")

    ups: Dict[int, Migration] = {}
    downs: Dict[int, str] = {}

    for path in sorted(directory.iterdir()):
        match = _FILENAME_PATTERN.match(path.name)
        if not match:
            continue

        version = int(match.group("version"))
        name = match.group("name")
        sql = path.read_text(encoding="utf-8")

        if match.group("direction") == "down":
            if version in downs:
                raise MigrationError(f"Duplicate down migration for version {version}")
            downs[version] = sql
            continue

        if version in ups:
            raise MigrationError(
                f"Duplicate migration version {version}: {ups[version].name} and {name}"
            )
        ups[version] = Migration(version=version, name=name, up_sql=sql)

    orphans = sorted(set(downs) - set(ups))
    if orphans:
        raise MigrationError(f"Down migrations without matching up migration: {orphans}")

    for version, sql in downs.items():
        ups[version].down_sql = sql

    return [ups[version] for version in sorted(ups)]


async def _ensure_migrations_table(conn: asyncpg.Connection):
    await conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {MIGRATIONS_TABLE} (
            version BIGINT PRIMARY KEY,
            name TEXT NOT NULL,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


async def _applied_versions(conn: asyncpg.Connection) -> List[int]:
    rows = await conn.fetch(f"SELECT version FROM {MIGRATIONS_TABLE} ORDER BY version")
    return [row["version"] for row in rows]


async def apply_migrations(conn: asyncpg.Connection, migrations: List[Migration]) -> List[int]:
    """
    Apply every pending migration, each inside its own transaction

    Holds a session-level advisory lock so concurrent service instances
    do not race on startup.

    Returns:
        Versions applied by this call (empty when already up to date)
    """
    applied_now = []

    await conn.execute("SELECT pg_advisory_lock($1)", MIGRATION_LOCK_ID)
    try:
        await _ensure_migrations_table(conn)
        applied = set(await _applied_versions(conn))

        for migration in migrations:
            if migration.version in applied:
                continue

            logger.info(f"Applying migration {migration.version:04d}_{migration.name}")
            async with conn.transaction():
                await conn.execute(migration.up_sql)
                await conn.execute(
                    f"INSERT INTO {MIGRATIONS_TABLE} (version, name) VALUES ($1, $2)",
                    migration.version, migration.name
                )
            applied_now.append(migration.version)
    finally:
        await conn.execute("SELECT pg_advisory_unlock($1)", MIGRATION_LOCK_ID)

    if applied_now:
        logger.info(f"Applied {len(applied_now)} migration(s): {applied_now}")
    else:
        logger.info("Database schema is up to date")

    return applied_now


async def revert_last_migration(conn: asyncpg.Connection, migrations: List[Migration]) -> Optional[int]:
    """
    Revert the most recently applied migration

    Returns:
        The reverted version, or None if nothing has been applied

    Raises:
        MigrationError: If the migration is unknown locally or has no down script
    """
    by_version = {migration.version: migration for migration in migrations}

    await conn.execute("SELECT pg_advisory_lock($1)", MIGRATION_LOCK_ID)
    try:
        await _ensure_migrations_table(conn)
        applied = await _applied_versions(conn)
        if not applied:
            logger.info("No applied migrations to revert")
            return None

        version = applied[-1]
        migration = by_version.get(version)
        if migration is None:
            raise MigrationError(f"Applied migration {version} not found in migrations directory")
        if migration.down_sql is None:
            raise MigrationError(f"Migration {version:04d}_{migration.name} has no down script")

        logger.info(f"Reverting migration {version:04d}_{migration.name}")
        async with conn.transaction():
            await conn.execute(migration.down_sql)
            await conn.execute(f"DELETE FROM {MIGRATIONS_TABLE} WHERE version = $1", version)
    finally:
        await conn.execute("SELECT pg_advisory_unlock($1)", MIGRATION_LOCK_ID)

    return version


async def migration_status(conn: asyncpg.Connection, migrations: List[Migration]) -> List[Dict[str, object]]:
    """Report whether each known migration has been applied"""
    await _ensure_migrations_table(conn)
    applied = set(await _applied_versions(conn))
    return [
        {
            "version": migration.version,
            "name": migration.name,
            "applied": migration.version in applied,
        }
        for migration in migrations
    ]


async def run_migrations(pool: asyncpg.Pool, directory: Union[str, Path]) -> List[int]:
    """Discover and apply pending migrations using a pooled connection"""
    migrations = discover_migrations(directory)
    async with pool.acquire() as conn:
        return await apply_migrations(conn, migrations)
