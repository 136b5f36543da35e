import logging
import os
from typing import List

from .loader import section

logger = logging.getLogger(__name__)


def _split_ids(raw: str) -> List[int]:
    return [int(cid.strip()) for cid in raw.split(",") if cid.strip()]


def _optional_int(raw) -> int | None:
    if raw in (None, ""):
        return None
    return int(raw)


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = section(config)
        discord_cfg = section(config, "discord")
        limits_cfg = section(config, "limits")

        token_env = str(discord_cfg.get("token_env", "DISCORD_BOT_TOKEN"))
        github_env = str(discord_cfg.get("github_token_env", "GITHUB_TOKEN"))

        self.DISCORD_BOT_TOKEN: str | None = os.getenv(token_env)
        self.GITHUB_TOKEN: str | None = os.getenv(github_env)

        self.DEFAULT_REPOSITORY: str = str(
            cfg.get("default_repository", os.getenv("DEFAULT_REPOSITORY", "microsoft/vscode"))
        )
        self.TARGET_CHANNEL_ID: int | None = _optional_int(
            discord_cfg.get("target_channel_id", os.getenv("TARGET_CHANNEL_ID"))
        )

        # Empty allow-list means every guild channel is watched.
        channel_ids_cfg = discord_cfg.get("channel_ids")
        if channel_ids_cfg:
            self.CHANNEL_IDS: List[int] = [int(cid) for cid in channel_ids_cfg]
        else:
            self.CHANNEL_IDS = _split_ids(os.getenv("CHANNEL_IDS", ""))

        self.MAX_ISSUES_PER_MESSAGE: int = int(
            limits_cfg.get("max_issues_per_message", os.getenv("MAX_ISSUES_PER_MESSAGE", "3"))
        )
        self.MAX_EMBED_DESCRIPTION_LENGTH: int = int(
            limits_cfg.get(
                "max_embed_description_length",
                os.getenv("MAX_EMBED_DESCRIPTION_LENGTH", "2048"),
            )
        )

    def missing_secrets(self) -> list[str]:
        """Return the names of required secrets that are not configured."""

        required = [
            ("DISCORD_BOT_TOKEN", self.DISCORD_BOT_TOKEN),
            ("GITHUB_TOKEN", self.GITHUB_TOKEN),
        ]
        return [name for name, val in required if not val]
