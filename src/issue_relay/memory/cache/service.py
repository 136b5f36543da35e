"""Two-tier issue cache: in-process TTL map in front of the SQLite issue table."""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, Callable, Mapping

from issue_relay import maintenance
from issue_relay.errors import CacheError
from issue_relay.memory.sql.repositories import IssueCacheRepo
from issue_relay.models import CachedIssue, CacheStats

from .keys import IssueIdentity, issue_key, parse_issue_key
from .memory import MISSING, MemoryCache

logger = logging.getLogger(__name__)


class CacheService:
    """
    Read-through, write-through cache over two tiers.

    Reads check the fast tier first and only touch SQLite on a miss; a live
    SQLite row is promoted back into the fast tier with the *default* TTL, not
    its remaining lifetime. Writes go to the fast tier, then SQLite. The two
    writes are not atomic: a failure between them leaves the tiers out of
    step until the TTL runs out.

    Reads never raise. ``set``/``delete``/``clear`` raise :class:`CacheError`
    when SQLite rejects the operation; the fast-tier copy is left in place.

    Only issue keys (see :mod:`.keys`) are persisted. Any other key lives in
    the fast tier only.
    """

    def __init__(
        self,
        store: IssueCacheRepo,
        default_ttl: float,
        *,
        check_period_ratio: float = 0.2,
        clock: Callable[[], float] = time.time,
        memory_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        self.default_ttl = default_ttl
        self._store = store
        self._clock = clock
        self._memory = MemoryCache(
            default_ttl,
            check_period=default_ttl * check_period_ratio,
            clock=memory_clock,
        )
        self._stats = CacheStats()
        self._purge_task = None
        self._setup_listeners()
        logger.info("Cache service initialized with TTL: %ss", default_ttl)

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    @property
    def store(self) -> IssueCacheRepo:
        return self._store

    def _setup_listeners(self) -> None:
        self._memory.on("expired", lambda key, _value: logger.debug("Memory cache expired: %s", key))
        self._memory.on("del", lambda key, _value: logger.debug("Memory cache deleted: %s", key))
        self._memory.on("set", lambda key, _value: logger.debug("Memory cache set: %s", key))

    # ------------------------------------------------------------------ #
    # Generic key/value API
    # ------------------------------------------------------------------ #

    async def get(self, key: str) -> Any | None:
        """Return the cached value for ``key`` or ``None`` on a miss."""

        try:
            value = self._memory.get(key)
            if value is not MISSING:
                self._stats.hits += 1
                self._stats.memory_hits += 1
                logger.debug("Memory cache hit: %s", key)
                return value

            ident = parse_issue_key(key)
            if ident is not None:
                issue = await self._store.get_live(*ident)
                if issue is not None:
                    self._memory.set(key, issue)
                    self._stats.hits += 1
                    self._stats.store_hits += 1
                    logger.debug("Database cache hit: %s", key)
                    return issue
        except Exception:
            logger.exception("Cache get error for key %s", key)

        self._stats.misses += 1
        logger.debug("Cache miss: %s", key)
        return None

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store ``value`` under ``key`` in both tiers.

        :param ttl: Lifetime in seconds; ``None`` uses the default TTL.
        :raises ValueError: if ``ttl`` is not positive.
        :raises CacheError: if ``value`` is not a :class:`CachedIssue` for an
            issue key, or the persistent write fails.
        """
        cache_ttl = self.default_ttl if ttl is None else ttl
        if cache_ttl <= 0:
            raise ValueError("ttl must be > 0")

        ident = parse_issue_key(key)
        if ident is not None:
            if not isinstance(value, CachedIssue):
                raise CacheError(
                    f"Issue key {key} requires a CachedIssue, got {type(value).__name__}",
                    key=key,
                    operation="set",
                    value=value,
                )
            value = _stamp_identity(value, ident)

        self._memory.set(key, value, cache_ttl)

        if ident is not None:
            try:
                await self._store.upsert(value, self._clock() + cache_ttl)
            except Exception as exc:
                logger.error("Cache set error for key %s: %s", key, exc)
                raise CacheError(
                    f"Failed to set cache: {exc}", key=key, operation="set", value=value
                ) from exc

        self._stats.sets += 1
        logger.debug("Cache set: %s (TTL: %ss)", key, cache_ttl)

    async def delete(self, key: str) -> None:
        """Remove ``key`` from both tiers; absent keys are not an error."""

        self._memory.delete(key)

        ident = parse_issue_key(key)
        if ident is not None:
            try:
                await self._store.delete(*ident)
            except Exception as exc:
                logger.error("Cache delete error for key %s: %s", key, exc)
                raise CacheError(
                    f"Failed to delete cache: {exc}", key=key, operation="delete"
                ) from exc

        self._stats.deletes += 1
        logger.debug("Cache deleted: %s", key)

    async def clear(self) -> None:
        """
        Flush the fast tier and delete every persisted row.

        Counters are kept; they only reset with the process.
        """
        self._memory.flush_all()
        try:
            removed = await self._store.delete_all()
        except Exception as exc:
            logger.error("Cache clear error: %s", exc)
            raise CacheError(f"Failed to clear cache: {exc}", operation="clear") from exc
        logger.info("All cache cleared (%d persisted rows removed)", removed)

    async def get_stats(self) -> CacheStats:
        """Return a snapshot of the counters with a ``size`` estimate."""

        memory_size = len(self._memory)
        try:
            store_size = await self._store.count_live()
        except Exception:
            logger.exception("Cache size lookup failed")
            store_size = 0
        # The tiers are not always in lockstep; report the larger.
        return dataclasses.replace(self._stats, size=max(memory_size, store_size))

    # ------------------------------------------------------------------ #
    # Issue helpers
    # ------------------------------------------------------------------ #

    async def get_issue(self, owner: str, repo: str, number: int) -> CachedIssue | None:
        return await self.get(issue_key(owner, repo, number))

    async def set_issue(
        self,
        owner: str,
        repo: str,
        number: int,
        issue: CachedIssue | Mapping[str, Any],
        ttl: float | None = None,
    ) -> None:
        """
        Cache ``issue`` for ``owner/repo#number``.

        ``issue`` may be a :class:`CachedIssue` or a raw GitHub REST payload.
        """
        if not isinstance(issue, CachedIssue):
            try:
                issue = CachedIssue.from_github(issue, owner, repo)
            except (KeyError, TypeError, ValueError) as exc:
                key = issue_key(owner, repo, number)
                raise CacheError(
                    f"Invalid issue payload for {key}: {exc}", key=key, operation="set", value=issue
                ) from exc
        await self.set(issue_key(owner, repo, number), issue, ttl)

    async def delete_issue(self, owner: str, repo: str, number: int) -> None:
        await self.delete(issue_key(owner, repo, number))

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    async def purge_expired(self) -> int:
        """Delete expired rows from SQLite; never raises."""

        try:
            return await self._store.purge_expired()
        except Exception:
            logger.exception("Cache cleanup error")
            return 0

    async def start(self, purge_interval: float) -> None:
        """Start the fast-tier sweeper and the periodic SQLite purge."""

        await self._memory.start_sweeper()
        if not self._purge_task or self._purge_task.done():
            self._purge_task = await maintenance.startup(
                self.purge_expired,
                purge_interval,
                name="issue-cache-purge",
                run_immediately=True,
            )
        logger.info(
            "Cache maintenance started (sweep=%ss, purge=%ss)",
            self._memory.check_period,
            purge_interval,
        )

    async def stop(self) -> None:
        await self._memory.stop_sweeper()
        await maintenance.shutdown(self._purge_task)
        self._purge_task = None


def _stamp_identity(issue: CachedIssue, ident: IssueIdentity) -> CachedIssue:
    """Return ``issue`` carrying the key's identity (the same object if it already does)."""

    if (issue.owner, issue.repo, issue.number) == tuple(ident):
        return issue
    return dataclasses.replace(issue, owner=ident.owner, repo=ident.repo, number=ident.number)


__all__ = ["CacheService"]
