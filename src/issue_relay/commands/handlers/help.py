from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...embeds import COLOR_OPEN


def describe_commands(tree_commands) -> list[str]:
    """Flatten the command tree into ``/name - description`` lines, groups expanded."""

    lines = []
    for cmd in sorted(tree_commands, key=lambda c: c.name):
        if isinstance(cmd, app_commands.Group):
            for sub in sorted(cmd.commands, key=lambda c: c.name):
                lines.append(f"`/{cmd.name} {sub.name}` - {sub.description}")
        else:
            lines.append(f"`/{cmd.name}` - {cmd.description}")
    return lines


@register_cog
class Help(commands.Cog):
    """Usage overview for chat references and slash commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="Show how to look up GitHub issues.")
    async def help(self, interaction: discord.Interaction) -> None:
        embed = discord.Embed(
            title="Issue Relay",
            description="Mention `#123` or `git#123` in a watched channel to preview an issue.",
            color=COLOR_OPEN,
        )
        lines = describe_commands(self.bot.tree.get_commands())
        embed.add_field(
            name="Commands",
            value="\n".join(lines) if lines else "None registered",
            inline=False,
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)
