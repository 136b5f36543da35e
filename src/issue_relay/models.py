"""Dataclass models for cached GitHub data.

Row schema of the ``issues`` cache table (see :meth:`CachedIssue.to_row`)::

    owner, repo, number, id, title, body, state, draft,
    user_login, user_avatar_url, labels, comments, html_url,
    created_at, updated_at

``labels`` is stored as a JSON array of ``{"name", "color"}`` objects. The
``cached_at``/``expires_at`` bookkeeping columns belong to the store, not the
record.

Instances are shared by reference between the fast cache and its callers.
Treat them as read-only; mutating a returned record mutates the cached copy.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

IssueState = Literal["open", "closed"]
_STATES = ("open", "closed")


@dataclass(slots=True)
class IssueLabel:
    name: str
    color: str = "000000"

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "color": self.color}


@dataclass(slots=True)
class IssueAuthor:
    login: str
    avatar_url: str = ""


@dataclass(slots=True)
class CachedIssue:
    """One GitHub issue as cached by the bot."""

    owner: str
    repo: str
    number: int
    title: str
    state: IssueState
    html_url: str
    created_at: str
    updated_at: str
    author: IssueAuthor = field(default_factory=lambda: IssueAuthor("unknown"))
    body: Optional[str] = None
    draft: bool = False
    labels: Tuple[IssueLabel, ...] = ()
    comments: int = 0
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int) or self.number < 1:
            raise ValueError(f"issue number must be a positive integer, got {self.number!r}")
        if self.state not in _STATES:
            raise ValueError(f"issue state must be one of {_STATES}, got {self.state!r}")
        if self.comments < 0:
            raise ValueError(f"comment count must be >= 0, got {self.comments!r}")
        # ISO-8601 strings from GitHub share one format, so they order lexically.
        if self.created_at and self.updated_at and self.created_at > self.updated_at:
            raise ValueError(
                f"created_at {self.created_at!r} is later than updated_at {self.updated_at!r}"
            )
        self.labels = tuple(self.labels)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    # ------------------------------------------------------------------ #
    # GitHub REST payloads
    # ------------------------------------------------------------------ #

    @classmethod
    def from_github(cls, payload: Mapping[str, Any], owner: str, repo: str) -> "CachedIssue":
        """
        Build a record from a GitHub REST issue payload.

        :param payload: JSON object returned by ``GET /repos/{owner}/{repo}/issues/{n}``.
        :param owner: Repository owner the issue was requested from.
        :param repo: Repository name the issue was requested from.
        """
        user = payload.get("user") or {}
        labels = []
        for label in payload.get("labels") or []:
            # The API may return bare label names on some endpoints.
            if isinstance(label, str):
                labels.append(IssueLabel(label))
            else:
                labels.append(IssueLabel(label.get("name", ""), label.get("color") or "000000"))

        return cls(
            owner=owner,
            repo=repo,
            number=int(payload["number"]),
            id=payload.get("id"),
            title=payload.get("title") or "",
            body=payload.get("body") or None,
            state=payload.get("state", "open"),
            draft=bool(payload.get("draft", False)),
            author=IssueAuthor(user.get("login") or "unknown", user.get("avatar_url") or ""),
            labels=tuple(labels),
            comments=int(payload.get("comments") or 0),
            html_url=payload.get("html_url") or "",
            created_at=payload.get("created_at") or "",
            updated_at=payload.get("updated_at") or "",
        )

    # ------------------------------------------------------------------ #
    # SQLite rows
    # ------------------------------------------------------------------ #

    def to_row(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "repo": self.repo,
            "number": self.number,
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "state": self.state,
            "draft": 1 if self.draft else 0,
            "user_login": self.author.login,
            "user_avatar_url": self.author.avatar_url,
            "labels": json.dumps([label.to_dict() for label in self.labels]),
            "comments": self.comments,
            "html_url": self.html_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CachedIssue":
        raw_labels = json.loads(row["labels"]) if row["labels"] else []
        return cls(
            owner=row["owner"],
            repo=row["repo"],
            number=int(row["number"]),
            id=row["id"],
            title=row["title"],
            body=row["body"],
            state=row["state"],
            draft=bool(row["draft"]),
            author=IssueAuthor(row["user_login"], row["user_avatar_url"] or ""),
            labels=tuple(IssueLabel(d["name"], d.get("color", "000000")) for d in raw_labels),
            comments=int(row["comments"] or 0),
            html_url=row["html_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass(slots=True)
class RateLimitInfo:
    limit: int
    remaining: int
    reset_at: int
    resource: str = "core"


@dataclass(slots=True)
class CacheStats:
    """Process-lifetime cache counters plus a size estimate."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    memory_hits: int = 0
    store_hits: int = 0
    size: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "memory_hits": self.memory_hits,
            "store_hits": self.store_hits,
            "size": self.size,
        }


__all__ = ["IssueLabel", "IssueAuthor", "CachedIssue", "RateLimitInfo", "CacheStats"]
