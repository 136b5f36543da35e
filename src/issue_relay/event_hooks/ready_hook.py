import logging

import discord

logger = logging.getLogger(__name__)


async def handle(client: discord.Client):
    """Log identity and guild membership once the gateway session is ready."""
    logger.info(f"Logged in as {client.user.name} (ID: {client.user.id})")

    await client.change_presence(
        activity=discord.Activity(type=discord.ActivityType.watching, name="GitHub Issues")
    )

    logger.info("Bot is ready! Serving %d servers", len(client.guilds))
    for guild in client.guilds:
        logger.info("Connected to guild: %s (%s)", guild.name, guild.id)
