"""
Repositories (SQL-only)
=======================
- Pure CRUD and selects over the ``issues`` cache table.
- Read helpers degrade to "absent" when the store misbehaves; write helpers
  raise :class:`~issue_relay.errors.DatabaseError`.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from typing import Callable, Optional

from issue_relay.errors import DatabaseError
from issue_relay.models import CachedIssue

from .db import DatabaseManager

logger = logging.getLogger(__name__)

_STORE_FAULTS = (sqlite3.Error, DatabaseError, OSError, ValueError, KeyError)

_COLUMNS = (
    "owner", "repo", "number", "id", "title", "body", "state", "draft",
    "user_login", "user_avatar_url", "labels", "comments", "html_url",
    "created_at", "updated_at",
)


class IssueCacheRepo:
    """Async helpers for the ``issues`` cache table."""

    def __init__(self, manager: DatabaseManager, clock: Callable[[], float] = time.time):
        self.manager = manager
        self._clock = clock

    async def _run(self, fn):
        conn = await self.manager.connection()
        async with self.manager.lock:
            return await asyncio.to_thread(fn, conn)  # blocking sqlite call

    async def get_live(self, owner: str, repo: str, number: int) -> Optional[CachedIssue]:
        """
        Return the cached issue when a non-expired row exists, else ``None``.

        Expired rows are filtered by the query; they stay on disk until
        :meth:`purge_expired` runs.
        """
        sql = f"""
            SELECT {", ".join(_COLUMNS)} FROM issues
            WHERE owner=? AND repo=? AND number=? AND expires_at>?
        """
        now = self._clock()

        def _query(conn: sqlite3.Connection) -> Optional[CachedIssue]:
            row = conn.execute(sql, (owner, repo, number, now)).fetchone()
            return CachedIssue.from_row(row) if row else None

        try:
            return await self._run(_query)
        except _STORE_FAULTS as exc:
            logger.error("Issue cache read failed for %s/%s#%s: %s", owner, repo, number, exc)
            return None

    async def upsert(self, issue: CachedIssue, expires_at: float) -> None:
        """
        Insert or replace the row keyed by the issue's (owner, repo, number).

        :param issue: Complete record; rows are never partially updated.
        :param expires_at: Absolute unix timestamp after which the row is dead.
        :raises DatabaseError: if the write fails.
        """
        row = issue.to_row()
        row["cached_at"] = self._clock()
        row["expires_at"] = expires_at
        columns = (*_COLUMNS, "cached_at", "expires_at")
        updates = ",\n              ".join(
            f"{c}=excluded.{c}" for c in columns if c not in ("owner", "repo", "number")
        )
        sql = f"""
            INSERT INTO issues ({", ".join(columns)})
            VALUES ({", ".join(":" + c for c in columns)})
            ON CONFLICT(owner, repo, number) DO UPDATE SET
              {updates}
        """

        def _write(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute(sql, row)

        try:
            await self._run(_write)
        except (sqlite3.Error, OSError) as exc:
            raise DatabaseError(
                f"Failed to store {issue.full_name}#{issue.number}",
                {"owner": issue.owner, "repo": issue.repo, "number": issue.number},
            ) from exc

    async def delete(self, owner: str, repo: str, number: int) -> bool:
        """Delete one row; returns ``True`` if it existed."""
        sql = "DELETE FROM issues WHERE owner=? AND repo=? AND number=?"

        def _write(conn: sqlite3.Connection) -> bool:
            with conn:
                cur = conn.execute(sql, (owner, repo, number))
            return cur.rowcount > 0

        try:
            return await self._run(_write)
        except (sqlite3.Error, OSError) as exc:
            raise DatabaseError(
                f"Failed to delete {owner}/{repo}#{number}",
                {"owner": owner, "repo": repo, "number": number},
            ) from exc

    async def delete_all(self) -> int:
        """Delete every cached row and return how many were removed."""

        def _write(conn: sqlite3.Connection) -> int:
            with conn:
                cur = conn.execute("DELETE FROM issues")
            return cur.rowcount

        try:
            return await self._run(_write)
        except (sqlite3.Error, OSError) as exc:
            raise DatabaseError("Failed to clear issue cache") from exc

    async def count_live(self) -> int:
        """Return the number of non-expired rows (``0`` if the store is unavailable)."""
        now = self._clock()

        def _query(conn: sqlite3.Connection) -> int:
            return conn.execute(
                "SELECT COUNT(*) FROM issues WHERE expires_at>?", (now,)
            ).fetchone()[0]

        try:
            return await self._run(_query)
        except _STORE_FAULTS as exc:
            logger.error("Issue cache count failed: %s", exc)
            return 0

    async def purge_expired(self) -> int:
        """
        Delete rows whose ``expires_at`` has passed.

        Idempotent; returns the number of rows removed, ``0`` when nothing was
        expired or the store is unavailable.
        """
        now = self._clock()

        def _write(conn: sqlite3.Connection) -> int:
            with conn:
                cur = conn.execute("DELETE FROM issues WHERE expires_at<?", (now,))
            return cur.rowcount

        try:
            removed = await self._run(_write)
        except _STORE_FAULTS as exc:
            logger.error("Issue cache purge failed: %s", exc)
            return 0

        if removed:
            logger.info("Purged %d expired issue cache rows", removed)
        return removed
