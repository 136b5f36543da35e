from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...config import core as core_cfg
from ...embeds import build_issue_embed
from ...errors import GitHubAPIError
from ...lookup import describe_failure, parse_issue_number, split_repository

logger = logging.getLogger(__name__)


def _resolve_target(number: str, repo: str | None) -> tuple[str, str, int]:
    """Validate slash-command input; raises ``ValueError`` with a user-facing message."""

    issue_number = parse_issue_number(number)
    if issue_number is None:
        raise ValueError("Enter a valid issue number (e.g. #123 or 123).")
    try:
        owner, name = split_repository(repo or core_cfg.DEFAULT_REPOSITORY)
    except ValueError:
        raise ValueError('Repository must be given as "owner/repo".') from None
    return owner, name, issue_number


@register_cog
class Issues(commands.Cog):
    """
    Slash commands that look up GitHub issues.

    Both commands go through the bot's :class:`~issue_relay.lookup.IssueLookup`
    so cached issues are served without touching the GitHub API.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="issue", description="Show a GitHub issue (e.g. /issue 123).")
    @app_commands.describe(
        number="Issue number (#123 or 123)",
        repo="Repository as owner/repo (defaults to the configured repository)",
    )
    async def issue(
        self, interaction: discord.Interaction, number: str, repo: str | None = None
    ) -> None:
        """Reply in place with the issue embed."""

        try:
            owner, name, issue_number = _resolve_target(number, repo)
        except ValueError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return

        await interaction.response.defer()
        try:
            issue = await self.bot.lookup.get(owner, name, issue_number)
        except GitHubAPIError as exc:
            logger.warning("Issue command failed for %s/%s#%s: %s", owner, name, issue_number, exc)
            await interaction.followup.send(f"❌ {describe_failure(exc, issue_number)}", ephemeral=True)
            return
        except Exception as exc:
            logger.exception("Issue command crashed for %s/%s#%s", owner, name, issue_number)
            await interaction.followup.send(f"❌ {describe_failure(exc, issue_number)}", ephemeral=True)
            return

        await interaction.followup.send(
            embed=build_issue_embed(issue, max_description=core_cfg.MAX_EMBED_DESCRIPTION_LENGTH)
        )

    @app_commands.command(
        name="send", description="Post a GitHub issue to the announcement channel (e.g. /send #123)."
    )
    @app_commands.describe(
        number="Issue number (#123 or 123)",
        repo="Repository as owner/repo (defaults to the configured repository)",
    )
    async def send(
        self, interaction: discord.Interaction, number: str, repo: str | None = None
    ) -> None:
        """Post the issue embed to ``TARGET_CHANNEL_ID`` and confirm privately."""

        await interaction.response.defer(ephemeral=True)

        try:
            owner, name, issue_number = _resolve_target(number, repo)
        except ValueError as exc:
            await interaction.followup.send(f"❌ {exc}", ephemeral=True)
            return

        target_id = core_cfg.TARGET_CHANNEL_ID
        if target_id is None:
            await interaction.followup.send(
                "❌ No target channel is configured. Please contact an administrator.",
                ephemeral=True,
            )
            return

        logger.info("Send command: issue #%s from %s/%s to channel %s", issue_number, owner, name, target_id)

        try:
            issue = await self.bot.lookup.get(owner, name, issue_number)
            channel = self.bot.get_channel(target_id) or await self.bot.fetch_channel(target_id)
            await channel.send(
                embed=build_issue_embed(issue, max_description=core_cfg.MAX_EMBED_DESCRIPTION_LENGTH)
            )
        except GitHubAPIError as exc:
            logger.warning("Send command failed: %s", exc)
            await interaction.followup.send(f"❌ {describe_failure(exc, issue_number)}", ephemeral=True)
            return
        except discord.Forbidden:
            logger.warning("Missing permissions to post in channel %s", target_id)
            await interaction.followup.send(
                "❌ The bot is not allowed to post in the target channel.", ephemeral=True
            )
            return
        except discord.HTTPException:
            logger.exception("Could not reach target channel %s", target_id)
            await interaction.followup.send("❌ The target channel is not accessible.", ephemeral=True)
            return
        except Exception as exc:
            logger.exception("Send command crashed for %s/%s#%s", owner, name, issue_number)
            await interaction.followup.send(f"❌ {describe_failure(exc, issue_number)}", ephemeral=True)
            return

        await interaction.followup.send(
            f"✅ Sent issue #{issue_number} to <#{target_id}>.", ephemeral=True
        )
        logger.info("Successfully sent issue #%s to channel %s", issue_number, target_id)
