"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging

import discord
from discord.ext import commands as discord_commands

from issue_relay import commands as ir_commands
from issue_relay.clients.github import GitHubClient
from issue_relay.config import cache as cache_cfg
from issue_relay.config import core, github as github_cfg
from issue_relay.event_hooks import message_hook, ready_hook
from issue_relay.lookup import IssueLookup
from issue_relay.memory.cache import CacheService
from issue_relay.memory.sql import DatabaseManager, IssueCacheRepo

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.message_content = True


class IssueRelayBot(discord_commands.Bot):
    """
    Primary Discord bot implementation with slash command support.

    Owns the process-wide database handle, issue cache and GitHub client and
    hands them to hooks and cogs through attributes (``issue_cache``,
    ``lookup``) rather than module globals.
    """

    def __init__(
        self,
        *,
        database: DatabaseManager | None = None,
        github: GitHubClient | None = None,
        cache_ttl: float | None = None,
    ) -> None:
        super().__init__(command_prefix=discord_commands.when_mentioned, intents=intents)
        self.database = database or DatabaseManager(cache_cfg.DATABASE_PATH)
        self.issue_cache = CacheService(
            IssueCacheRepo(self.database),
            cache_ttl or cache_cfg.CACHE_TTL,
            check_period_ratio=cache_cfg.CHECK_PERIOD_RATIO,
        )
        self.github = github or GitHubClient(
            core.GITHUB_TOKEN,
            api_url=github_cfg.API_URL,
            user_agent=github_cfg.USER_AGENT,
            timeout=github_cfg.TIMEOUT,
        )
        self.lookup = IssueLookup(self.issue_cache, self.github)

    async def setup_hook(self) -> None:
        """Register slash commands, start cache maintenance and sync with Discord."""

        await ir_commands.setup(self)
        await self.issue_cache.start(cache_cfg.PURGE_INTERVAL)

        try:
            synced = await self.tree.sync()
            logger.info("Synced %d application command(s)", len(synced))
        except Exception:
            logger.exception("Failed to sync application commands")

    async def on_ready(self) -> None:
        await ready_hook.handle(self)

    async def on_message(self, message: discord.Message) -> None:
        await message_hook.handle(self, self.lookup, message)

    async def close(self) -> None:
        await self.issue_cache.stop()
        await self.github.close()
        await self.database.close()
        await super().close()


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    missing = core.missing_secrets()
    if missing:
        logger.error("Missing required settings: %s. Cannot run client.", ", ".join(missing))
        return

    bot = IssueRelayBot()
    try:
        bot.run(core.DISCORD_BOT_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:
        logger.exception("Unexpected error while running client: %s", exc)
