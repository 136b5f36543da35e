"""
SQLite bootstrap and connection helpers
=======================================

- ``schema.sql`` lives next to this module and is applied on first use.
- WAL + pragmatic PRAGMAs for decent concurrent read perf.
- :class:`DatabaseManager` owns the single process-wide connection and the
  lock that serializes access to it.
"""

from __future__ import annotations

import asyncio
import logging
import os
import pathlib
import sqlite3
from typing import Any, Dict, Optional

from issue_relay.errors import DatabaseError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def connect(path: str) -> sqlite3.Connection:
    if path != MEMORY_PATH:
        pathlib.Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Autocommit; we use explicit `with conn:` blocks in worker threads.
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=False,
    )

    # Pragmas: order matters a bit; set WAL first, then tuning.
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA temp_store=MEMORY;")
    conn.execute("PRAGMA cache_size=10000;")
    # Reduce SQLITE_BUSY errors under contention
    conn.execute("PRAGMA busy_timeout=3000;")    # 3s

    # dict-like rows
    conn.row_factory = sqlite3.Row

    return conn


def migrate(conn: sqlite3.Connection) -> None:
    """
    Execute schema.sql (idempotent). Every statement in it must use
    IF NOT EXISTS.
    """
    schema_file = pathlib.Path(__file__).with_name("schema.sql")
    sql = schema_file.read_text(encoding="utf-8")
    with conn:  # single transaction for the whole migration
        conn.executescript(sql)


def wal_checkpoint_truncate(conn: sqlite3.Connection) -> None:
    """Run a WAL checkpoint + truncate to keep WAL from growing unbounded."""
    conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")


class DatabaseManager:
    """Lazily opened SQLite connection shared by every repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.lock = asyncio.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def connection(self) -> sqlite3.Connection:
        """
        Return the live connection, opening it and applying the schema on
        first use.

        :raises DatabaseError: if the store cannot be opened or migrated.
        """
        if self._conn is not None:
            return self._conn

        async with self._open_lock:
            if self._conn is None:
                self._conn = await asyncio.to_thread(self._open)
        return self._conn

    def _open(self) -> sqlite3.Connection:
        try:
            conn = connect(self.path)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to open database %s: %s", self.path, exc)
            raise DatabaseError(f"Failed to open database {self.path}", {"path": self.path}) from exc

        try:
            migrate(conn)
        except sqlite3.Error as exc:
            conn.close()
            logger.error("Schema migration failed for %s: %s", self.path, exc)
            raise DatabaseError("Failed to initialize database schema", {"path": self.path}) from exc

        logger.info("Database connected: %s", self.path)
        return conn

    async def close(self) -> None:
        """Checkpoint and close the connection if it was ever opened."""

        if self._conn is None:
            return

        conn = self._conn
        self._conn = None

        def _run() -> None:
            try:
                if self.path != MEMORY_PATH:
                    wal_checkpoint_truncate(conn)
            finally:
                conn.close()

        async with self.lock:
            await asyncio.to_thread(_run)
        logger.info("Database connection closed")

    async def health_check(self) -> bool:
        """Return ``True`` when the connection is open and answers a trivial query."""

        if self._conn is None:
            return False
        conn = self._conn

        def _query() -> bool:
            row = conn.execute("SELECT 1 AS test").fetchone()
            return row is not None and row["test"] == 1

        try:
            async with self.lock:
                return await asyncio.to_thread(_query)
        except sqlite3.Error:
            logger.exception("Database health check failed")
            return False

    async def vacuum(self) -> None:
        conn = await self.connection()

        def _run() -> None:
            conn.execute("VACUUM")
            conn.execute("ANALYZE")

        try:
            async with self.lock:
                await asyncio.to_thread(_run)
        except sqlite3.Error as exc:
            raise DatabaseError("Failed to vacuum database") from exc
        logger.info("Database vacuum completed")

    async def stats(self) -> Dict[str, Any]:
        """Return file size, table/index counts and connection status."""

        conn = await self.connection()

        def _query() -> tuple[int, int]:
            tables = conn.execute(
                "SELECT COUNT(*) FROM sqlite_master WHERE type='table'"
            ).fetchone()[0]
            indexes = conn.execute(
                "SELECT COUNT(*) FROM sqlite_master WHERE type='index'"
            ).fetchone()[0]
            return tables, indexes

        try:
            async with self.lock:
                tables, indexes = await asyncio.to_thread(_query)
        except sqlite3.Error as exc:
            raise DatabaseError("Failed to get database statistics") from exc

        size = 0 if self.path == MEMORY_PATH or not os.path.exists(self.path) else os.path.getsize(self.path)
        return {
            "db_size": size,
            "table_count": tables,
            "index_count": indexes,
            "connection_status": await self.health_check(),
        }
