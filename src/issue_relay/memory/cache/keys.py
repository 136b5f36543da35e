"""
Cache key derivation.

``issue:{owner}:{repo}:{number}`` is the only issue key format in the bot.
Everything outside this module obtains keys through :func:`issue_key`; the
cache service uses :func:`parse_issue_key` to route a key to the persistent
table. Owner and repo are used verbatim: case and whitespace normalization is
the caller's job.
"""

from __future__ import annotations

from typing import NamedTuple

ISSUE_NAMESPACE = "issue"


class IssueIdentity(NamedTuple):
    owner: str
    repo: str
    number: int


def issue_key(owner: str, repo: str, number: int) -> str:
    """Return the cache key for ``owner/repo#number``."""

    if not owner or not repo:
        raise ValueError("owner and repo must be non-empty")
    if ":" in owner or ":" in repo:
        raise ValueError(f"owner/repo may not contain ':' ({owner!r}, {repo!r})")
    if isinstance(number, bool) or not isinstance(number, int) or number < 1:
        raise ValueError(f"issue number must be a positive integer, got {number!r}")
    return f"{ISSUE_NAMESPACE}:{owner}:{repo}:{number}"


def parse_issue_key(key: str) -> IssueIdentity | None:
    """Split an issue key back into its identity, or ``None`` for other keys."""

    parts = key.split(":")
    if len(parts) != 4 or parts[0] != ISSUE_NAMESPACE:
        return None
    _, owner, repo, raw_number = parts
    # ASCII digits in canonical form only, so one issue maps to one key.
    if not owner or not repo or not (raw_number.isascii() and raw_number.isdigit()):
        return None
    number = int(raw_number)
    if number < 1 or str(number) != raw_number:
        return None
    return IssueIdentity(owner, repo, number)


__all__ = ["IssueIdentity", "issue_key", "parse_issue_key", "ISSUE_NAMESPACE"]
