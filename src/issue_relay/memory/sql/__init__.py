"""SQLite persistence for cached issues."""

from .db import DatabaseManager
from .repositories import IssueCacheRepo

__all__ = ["DatabaseManager", "IssueCacheRepo"]
