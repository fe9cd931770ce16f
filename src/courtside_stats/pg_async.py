"""
Async PostgreSQL connection manager.

Uses psycopg3's native async support with a connection pool so the stats
service can issue independent reads concurrently. Every psycopg error is
re-raised as StoreError so callers only deal with the stats error taxonomy.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .core.config import get_settings
from .core.errors import StoreError

logger = logging.getLogger(__name__)


class AsyncPostgresDB:
    """
    Async PostgreSQL database connection manager.

    Provides non-blocking database operations using psycopg3's async API
    with connection pooling.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_pool_size: Optional[int] = None,
        max_pool_size: Optional[int] = None,
    ):
        """
        Initialize the async PostgreSQL connection manager.

        Args:
            connection_string: PostgreSQL connection URL. Defaults to the
                configured DATABASE_URL / NEON_DATABASE_URL.
            min_pool_size: Minimum connections to keep in pool.
            max_pool_size: Maximum connections in pool.
        """
        settings = get_settings()
        self.connection_string = connection_string or settings.db_url
        if not self.connection_string:
            raise ValueError(
                "DATABASE_URL or NEON_DATABASE_URL environment variable required or connection_string must be provided"
            )

        self._min_pool_size = min_pool_size or settings.database_min_pool_size
        self._max_pool_size = max_pool_size or settings.database_pool_size
        self._pool: Optional[AsyncConnectionPool] = None

    async def initialize(self) -> None:
        """Open the connection pool."""
        if self._pool is None:
            self._pool = AsyncConnectionPool(
                self.connection_string,
                min_size=self._min_pool_size,
                max_size=max(self._max_pool_size, self._min_pool_size),
                kwargs={"row_factory": dict_row},
                open=False,
            )
            await self._pool.open()
            logger.debug(
                "Opened connection pool (min=%d, max=%d)",
                self._min_pool_size,
                self._max_pool_size,
            )

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """Get a connection from the pool."""
        if self._pool is None:
            await self.initialize()
        async with self._pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """
        Run a block of statements atomically.

        Commits when the block exits normally and rolls back on any
        exception. psycopg errors surface as StoreError.

        Usage:
            async with db.transaction() as conn:
                await conn.execute("DELETE ...", params)
                await conn.execute("INSERT ...", params)
        """
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    yield conn
        except psycopg.Error as e:
            raise StoreError(f"Transaction failed: {e}", operation="transaction") from e

    async def execute(self, query: str, params: Sequence[Any] = ()) -> None:
        """Execute a single query without returning results."""
        try:
            async with self.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                await conn.commit()
        except psycopg.Error as e:
            raise StoreError(f"Query failed: {e}", operation="execute") from e

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[dict[str, Any]]:
        """Execute a query and fetch one result as a dict."""
        try:
            async with self.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    row = await cur.fetchone()
                    return dict(row) if row else None
        except psycopg.Error as e:
            raise StoreError(f"Query failed: {e}", operation="fetchone") from e

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and fetch all results as dicts."""
        try:
            async with self.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    rows = await cur.fetchall()
                    return [dict(row) for row in rows]
        except psycopg.Error as e:
            raise StoreError(f"Query failed: {e}", operation="fetchall") from e


# Global async instance
_async_db: Optional[AsyncPostgresDB] = None


async def get_async_db() -> AsyncPostgresDB:
    """
    Get the global async PostgreSQL database instance.

    Returns:
        AsyncPostgresDB instance
    """
    global _async_db

    if _async_db is None:
        _async_db = AsyncPostgresDB()
        await _async_db.initialize()

    return _async_db


async def close_async_db() -> None:
    """Close the global async PostgreSQL database connection."""
    global _async_db
    if _async_db is not None:
        await _async_db.close()
        _async_db = None
