from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...errors import CacheError

logger = logging.getLogger(__name__)


def format_stats(stats) -> str:
    lookups = stats.hits + stats.misses
    ratio = f"{stats.hits / lookups:.0%}" if lookups else "n/a"
    return (
        f"Entries: {stats.size} | Hits: {stats.hits} "
        f"(memory {stats.memory_hits}, database {stats.store_hits}) | "
        f"Misses: {stats.misses} | Hit rate: {ratio} | "
        f"Sets: {stats.sets} | Deletes: {stats.deletes}"
    )


@register_cog
class CacheAdmin(commands.Cog):
    """Administrative inspection and reset of the issue cache."""

    cache_group = app_commands.Group(
        name="cache",
        description="Inspect or reset the issue cache.",
        default_permissions=discord.Permissions(administrator=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @cache_group.command(name="stats", description="Show issue cache statistics.")
    async def stats(self, interaction: discord.Interaction) -> None:
        stats = await self.bot.issue_cache.get_stats()
        await interaction.response.send_message(format_stats(stats), ephemeral=True)

    @cache_group.command(name="clear", description="Drop every cached issue.")
    async def clear(self, interaction: discord.Interaction) -> None:
        try:
            await self.bot.issue_cache.clear()
        except CacheError as exc:
            logger.error("Cache clear requested by %s failed: %s", interaction.user, exc)
            await interaction.response.send_message(
                "Cache could not be fully cleared; see logs.", ephemeral=True
            )
            return
        logger.info("Issue cache cleared by %s", interaction.user)
        await interaction.response.send_message("Issue cache cleared.", ephemeral=True)
