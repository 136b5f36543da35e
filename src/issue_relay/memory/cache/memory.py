"""
In-process TTL cache.

``MemoryCache`` is the fast tier of the issue cache: a plain dict of
``key -> (expires_at, value)`` with an independent expiry clock per entry.
Reads never return a dead entry, whether or not the periodic sweep has
evicted it yet; the sweep only frees memory.

Values are stored and returned by reference. Callers must treat them as
read-only.

Listeners registered with :meth:`MemoryCache.on` observe ``set``, ``del``,
``expired`` and ``flush`` events for diagnostics. A failing listener is
logged and otherwise ignored.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Tuple

from issue_relay import maintenance

logger = logging.getLogger(__name__)

EVENTS = ("set", "del", "expired", "flush")

Listener = Callable[[str, Any], None]


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class MemoryCache:
    """Volatile key/value map with per-entry TTL."""

    def __init__(
        self,
        default_ttl: float,
        *,
        check_period: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        self.default_ttl = default_ttl
        self.check_period = check_period if check_period is not None else default_ttl * 0.2
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._listeners: Dict[str, List[Listener]] = {event: [] for event in EVENTS}
        self._sweeper: asyncio.Task | None = None

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    def on(self, event: str, callback: Listener) -> None:
        """Register ``callback(key, value)`` for ``event``."""

        if event not in self._listeners:
            raise ValueError(f"Unknown cache event {event!r}; expected one of {EVENTS}")
        self._listeners[event].append(callback)

    def _emit(self, event: str, key: str, value: Any) -> None:
        for callback in self._listeners[event]:
            try:
                callback(key, value)
            except Exception:
                logger.exception("Memory cache %s listener failed for %s", event, key)

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    def get(self, key: str) -> Any:
        """Return the live value for ``key`` or :data:`MISSING`."""

        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        expires_at, value = entry
        if self._clock() >= expires_at:
            # Dead but not yet swept.
            del self._entries[key]
            self._emit("expired", key, value)
            return MISSING
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (default TTL if ``None``)."""

        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self._entries[key] = (self._clock() + ttl, value)
        self._emit("set", key, value)

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns ``True`` if an entry was present."""

        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._emit("del", key, entry[1])
        return True

    def flush_all(self) -> None:
        """Drop every entry."""

        count = len(self._entries)
        self._entries.clear()
        self._emit("flush", "*", count)

    def ttl_remaining(self, key: str) -> float | None:
        """Seconds until ``key`` expires, or ``None`` if it is not live."""

        entry = self._entries.get(key)
        if entry is None:
            return None
        remaining = entry[0] - self._clock()
        return remaining if remaining > 0 else None

    def keys(self) -> List[str]:
        """Return keys of live entries."""

        now = self._clock()
        return [k for k, (expires_at, _) in self._entries.items() if now < expires_at]

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not MISSING

    # ------------------------------------------------------------------ #
    # Sweeping
    # ------------------------------------------------------------------ #

    def sweep(self) -> int:
        """Evict dead entries and return how many were removed."""

        now = self._clock()
        dead = [(k, v) for k, (expires_at, v) in self._entries.items() if now >= expires_at]
        for key, value in dead:
            del self._entries[key]
            self._emit("expired", key, value)
        return len(dead)

    async def start_sweeper(self) -> None:
        """Run :meth:`sweep` every ``check_period`` seconds in the background."""

        if self._sweeper and not self._sweeper.done():
            return

        async def _sweep() -> None:
            removed = self.sweep()
            if removed:
                logger.debug("Memory cache sweep evicted %d entries", removed)

        self._sweeper = await maintenance.startup(
            _sweep, self.check_period, name="memory-cache-sweep"
        )

    async def stop_sweeper(self) -> None:
        await maintenance.shutdown(self._sweeper)
        self._sweeper = None


__all__ = ["MemoryCache", "MISSING", "EVENTS"]
