"""Cache-first issue lookup shared by the message hook and slash commands."""

from __future__ import annotations

import logging
from typing import Protocol

from issue_relay.errors import CacheError
from issue_relay.memory.cache import CacheService
from issue_relay.models import CachedIssue

logger = logging.getLogger(__name__)


class _IssueFetcher(Protocol):
    async def get_issue(self, owner: str, repo: str, number: int) -> CachedIssue: ...


class IssueLookup:
    """Serve issues from the cache, falling back to GitHub on a miss."""

    def __init__(self, cache: CacheService, github: _IssueFetcher) -> None:
        self.cache = cache
        self.github = github

    async def get(self, owner: str, repo: str, number: int) -> CachedIssue:
        """
        Return ``owner/repo#number``.

        :raises GitHubAPIError: when the issue is not cached and GitHub fails.
        """
        cached = await self.cache.get_issue(owner, repo, number)
        if cached is not None:
            logger.debug("Issue found in cache: %s/%s#%s", owner, repo, number)
            return cached

        logger.info("Fetching issue from GitHub API: %s/%s#%s", owner, repo, number)
        issue = await self.github.get_issue(owner, repo, number)

        try:
            await self.cache.set_issue(owner, repo, number, issue)
        except CacheError as exc:
            # The fetched issue is still usable; only the cache write is lost.
            logger.warning("Could not cache %s/%s#%s: %s", owner, repo, number, exc)

        return issue


def describe_failure(exc: Exception, number: int | None = None) -> str:
    """Return the user-facing text for a failed lookup."""

    status = getattr(exc, "status", None)
    if status == 404:
        return "Issue not found. Check the issue number and repository."
    if status == 403:
        return "GitHub API rate limit reached. Please try again later."
    if status == 401:
        return "GitHub authentication failed. Ask an administrator to check the token."
    return f"Could not fetch issue #{number if number is not None else '?'}."


def parse_issue_number(raw: str) -> int | None:
    """Parse ``"#123"`` or ``"123"``; ``None`` unless it is a positive integer."""

    text = raw.strip().removeprefix("#")
    if not text.isdigit():
        return None
    number = int(text)
    return number if number >= 1 else None


def split_repository(full_name: str) -> tuple[str, str]:
    """Split ``"owner/repo"``; raises ``ValueError`` on anything else."""

    owner, sep, repo = full_name.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Repository must look like 'owner/repo', got {full_name!r}")
    return owner, repo


__all__ = ["IssueLookup", "describe_failure", "parse_issue_number", "split_repository"]
