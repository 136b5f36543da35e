"""
Exception hierarchy shared by the bot.

Every error carries a short machine-readable ``code`` and an optional
``details`` mapping so handlers can log context without parsing messages.
:class:`CacheError` (storing failed) and :class:`GitHubAPIError` (fetching
failed) never share a base below :class:`BotError`.
"""

from __future__ import annotations

from typing import Any, Mapping


class BotError(Exception):
    """Base class for bot-level failures."""

    code = "BOT_ERROR"

    def __init__(self, message: str, details: Mapping[str, Any] | None = None):
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class GitHubAPIError(BotError):
    """The GitHub REST API rejected a request or was unreachable."""

    code = "GITHUB_API_ERROR"

    def __init__(
        self, message: str, status: int, details: Mapping[str, Any] | None = None
    ):
        super().__init__(message, details)
        self.status = status


class DatabaseError(BotError):
    """The SQLite store could not be opened, queried or written."""

    code = "DATABASE_ERROR"


class CacheError(BotError):
    """A cache write, delete or clear could not be completed."""

    code = "CACHE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        operation: str | None = None,
        value: Any = None,
    ):
        super().__init__(message, {"key": key, "operation": operation})
        self.key = key
        self.operation = operation
        self.value = value


__all__ = ["BotError", "GitHubAPIError", "DatabaseError", "CacheError"]
