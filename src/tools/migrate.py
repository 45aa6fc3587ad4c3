#!/usr/bin/env python3
"""
Schema migration tool for applying, reverting and inspecting migrations
"""

import os
import sys
import asyncio
import argparse
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import asyncpg

from config.settings import DATABASE_URL, MIGRATIONS_DIR
from database.migrations import (
    MigrationError,
    apply_migrations,
    discover_migrations,
    migration_status,
    revert_last_migration,
)


async def run_command(command: str, directory: Path, database_url: str) -> int:
    """
    Execute a migration command against the database

    Returns:
        Process exit code
    """
    migrations = discover_migrations(directory)
    conn = await asyncpg.connect(database_url)
    try:
        if command == "up":
            applied = await apply_migrations(conn, migrations)
            if applied:
                print(f"✅ Applied migrations: {', '.join(f'{v:04d}' for v in applied)}")
            else:
                print("✅ Database schema is up to date")

        elif command == "down":
            reverted = await revert_last_migration(conn, migrations)
            if reverted is None:
                print("ℹ️  No applied migrations to revert")
            else:
                print(f"↩️  Reverted migration {reverted:04d}")

        elif command == "status":
            for entry in await migration_status(conn, migrations):
                marker = "applied" if entry["applied"] else "pending"
                print(f"{entry['version']:04d}_{entry['name']:<30} {marker}")
    finally:
        await conn.close()

    return 0


def main():
    """Main CLI interface"""
    parser = argparse.ArgumentParser(description="Manage the contacts database schema")
    parser.add_argument(
        "command",
        choices=["up", "down", "status"],
        help="up: apply pending migrations, down: revert the latest, status: list migrations"
    )
    parser.add_argument(
        "--dir",
        default=str(MIGRATIONS_DIR),
        help=f"Migrations directory (default: {MIGRATIONS_DIR})"
    )
    parser.add_argument(
        "--database-url",
        default=DATABASE_URL,
        help="PostgreSQL connection string (default: DATABASE_URL)"
    )

    args = parser.parse_args()

    try:
        exit_code = asyncio.run(run_command(args.command, Path(args.dir), args.database_url))
    except MigrationError as e:
        print(f"❌ Migration error: {e}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
