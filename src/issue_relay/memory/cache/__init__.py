"""
Two-tier issue cache package.

Modules
=======

``service``
    Defines :class:`~issue_relay.memory.cache.service.CacheService`, the
    orchestrator that composes the fast tier with the SQLite issue table.
``memory``
    Provides :class:`~issue_relay.memory.cache.memory.MemoryCache`, the
    in-process map with per-entry TTL, sweeping and event listeners.
``keys``
    Canonical issue key derivation and parsing.
"""

from .keys import issue_key
from .memory import MISSING, MemoryCache
from .service import CacheService

__all__ = ["CacheService", "MemoryCache", "MISSING", "issue_key"]
