"""Render cached issues as Discord embeds."""

from __future__ import annotations

import datetime

import discord

from issue_relay.models import CachedIssue

COLOR_OPEN = 0x28A745
COLOR_CLOSED = 0xDC3545
COLOR_DRAFT = 0xFFC107
COLOR_ERROR = 0x6C757D

MAX_LABELS = 10
DEFAULT_AVATAR = "https://github.com/github.png"


def status_text(issue: CachedIssue) -> str:
    if issue.state == "closed":
        return "🔴 Closed"
    if issue.draft:
        return "🟡 Draft"
    return "🟢 Open"


def status_color(issue: CachedIssue) -> int:
    if issue.state == "closed":
        return COLOR_CLOSED
    if issue.draft:
        return COLOR_DRAFT
    return COLOR_OPEN


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def _parse_ts(raw: str) -> datetime.datetime | None:
    try:
        return datetime.datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        return None


def build_issue_embed(issue: CachedIssue, *, max_description: int = 2048) -> discord.Embed:
    """Build the notification embed for ``issue``."""

    created = _parse_ts(issue.created_at)
    updated = _parse_ts(issue.updated_at)

    embed = discord.Embed(
        title=truncate(f"Issue #{issue.number}: {issue.title}", 256),
        url=issue.html_url or None,
        description=truncate(issue.body or "No description provided", max_description),
        color=status_color(issue),
        timestamp=created,
    )
    embed.add_field(name="Status", value=status_text(issue), inline=True)
    embed.add_field(
        name="Author",
        value=f"[@{issue.author.login}](https://github.com/{issue.author.login})",
        inline=True,
    )
    embed.add_field(name="Comments", value=f"💬 {issue.comments}", inline=True)

    if issue.labels:
        labels_text = " ".join(f"`{label.name}`" for label in issue.labels[:MAX_LABELS])
        embed.add_field(name="Labels", value=truncate(labels_text, 1024), inline=False)

    if created is not None:
        embed.add_field(name="Created", value=created.strftime("%Y-%m-%d"), inline=True)
    if updated is not None and issue.updated_at != issue.created_at:
        embed.add_field(name="Updated", value=updated.strftime("%Y-%m-%d"), inline=True)

    embed.set_footer(
        text=f"{issue.full_name} Issue",
        icon_url=issue.author.avatar_url or DEFAULT_AVATAR,
    )
    return embed


def error_embed(message: str) -> discord.Embed:
    return discord.Embed(description=message, color=COLOR_ERROR)


__all__ = ["build_issue_embed", "error_embed", "status_text", "status_color", "truncate"]
