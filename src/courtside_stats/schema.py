"""
Database schema management for the stats snapshot tables.

Handles migrations and schema version tracking.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from .core.types import META_TABLE

if TYPE_CHECKING:
    from .pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def get_migration_files() -> list[Path]:
    """Get all SQL migration files in order."""
    if not MIGRATIONS_DIR.exists():
        return []

    return sorted(MIGRATIONS_DIR.glob("*.sql"))


async def _meta_table_exists(db: "AsyncPostgresDB") -> bool:
    row = await db.fetchone("SELECT to_regclass(%s) AS oid", (META_TABLE,))
    return bool(row and row["oid"])


async def run_migrations(db: "AsyncPostgresDB", force: bool = False) -> int:
    """
    Run all pending migrations.

    Each migration runs in its own transaction together with the row that
    records it in the meta table.

    Args:
        db: Database connection
        force: If True, run all migrations even if already applied

    Returns:
        Number of migrations applied
    """
    migration_files = get_migration_files()
    if not migration_files:
        logger.warning("No migration files found in %s", MIGRATIONS_DIR)
        return 0

    applied = 0

    for migration_file in migration_files:
        migration_name = migration_file.stem

        # Check if already applied (unless force)
        if not force and await _meta_table_exists(db):
            existing = await db.fetchone(
                f"SELECT value FROM {META_TABLE} WHERE key = %s",
                (f"migration_{migration_name}",),
            )
            if existing:
                logger.debug("Skipping already applied migration: %s", migration_name)
                continue

        logger.info("Applying migration: %s", migration_name)
        sql = migration_file.read_text()

        try:
            async with db.transaction() as conn:
                await conn.execute(sql)
                await conn.execute(
                    f"""
                    INSERT INTO {META_TABLE} (key, value, updated_at)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (f"migration_{migration_name}", "applied", int(time.time())),
                )
        except Exception as e:
            logger.error("Failed to apply migration %s: %s", migration_name, e)
            raise

        applied += 1
        logger.info("Successfully applied migration: %s", migration_name)

    return applied


async def get_schema_version(db: "AsyncPostgresDB") -> str:
    """Name of the latest applied migration, or "0" when none."""
    if not await _meta_table_exists(db):
        return "0"

    row = await db.fetchone(
        f"""
        SELECT key FROM {META_TABLE}
        WHERE key LIKE 'migration_%%'
        ORDER BY key DESC
        LIMIT 1
        """,
    )
    return row["key"].removeprefix("migration_") if row else "0"
