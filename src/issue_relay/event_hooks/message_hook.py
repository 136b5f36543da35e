import logging

import discord

from issue_relay.config import core
from issue_relay.embeds import build_issue_embed, error_embed
from issue_relay.errors import GitHubAPIError
from issue_relay.lookup import IssueLookup, describe_failure, split_repository
from issue_relay.references import detect_issue_references

logger = logging.getLogger(__name__)


async def handle(client: discord.Client, lookup: IssueLookup, message: discord.Message):
    """Reply with issue embeds for every ``#123`` / ``git#123`` in ``message``."""

    # Bots (including ourselves) and DMs are never answered.
    if message.author.bot or message.guild is None:
        return

    # Empty allow-list means every channel is watched.
    if core.CHANNEL_IDS and message.channel.id not in core.CHANNEL_IDS:
        return

    references = detect_issue_references(message.content or "")
    if not references:
        return

    logger.info("Detected %d issue reference(s) in message %s", len(references), message.id)
    if len(references) > core.MAX_ISSUES_PER_MESSAGE:
        logger.warning(
            "Message %s contains %d issues, limited to %d",
            message.id,
            len(references),
            core.MAX_ISSUES_PER_MESSAGE,
        )

    try:
        owner, repo = split_repository(core.DEFAULT_REPOSITORY)
    except ValueError:
        logger.error("Invalid DEFAULT_REPOSITORY: %s", core.DEFAULT_REPOSITORY)
        await message.reply("The repository setting is invalid. Please ask an administrator.")
        return

    for ref in references[: core.MAX_ISSUES_PER_MESSAGE]:
        await _reply_with_issue(message, lookup, owner, repo, ref.number)


async def _reply_with_issue(
    message: discord.Message, lookup: IssueLookup, owner: str, repo: str, number: int
) -> None:
    """Answer one reference; a failure is reported in chat and never stops the next one."""

    try:
        issue = await lookup.get(owner, repo, number)
    except GitHubAPIError as exc:
        logger.warning("Lookup failed for %s/%s#%s: %s", owner, repo, number, exc)
        await _reply_failure(message, describe_failure(exc, number))
        return
    except Exception as exc:
        logger.exception("Unexpected error looking up %s/%s#%s", owner, repo, number)
        await _reply_failure(message, describe_failure(exc, number))
        return

    try:
        await message.reply(
            embed=build_issue_embed(issue, max_description=core.MAX_EMBED_DESCRIPTION_LENGTH),
            mention_author=False,
        )
        logger.info("Issue embed sent for #%s in %s/%s", number, owner, repo)
    except discord.HTTPException:
        logger.exception("Failed to send issue embed for #%s", number)


async def _reply_failure(message: discord.Message, text: str) -> None:
    try:
        await message.reply(embed=error_embed(text), mention_author=False)
    except discord.HTTPException:
        logger.exception("Failed to send error reply")
