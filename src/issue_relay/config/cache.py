import os
from pathlib import Path

from .loader import section

_DEFAULT_DB_PATH = Path("data") / "bot.db"


class Cache:
    def __init__(self, config: dict | None = None) -> None:
        cache_cfg = section(config, "cache")
        self.CACHE_TTL: int = int(cache_cfg.get("ttl", os.getenv("CACHE_TTL", "300")))
        # Fast-cache sweep period as a fraction of the default TTL.
        self.CHECK_PERIOD_RATIO: float = float(
            cache_cfg.get("check_period_ratio", os.getenv("CACHE_CHECK_PERIOD_RATIO", "0.2"))
        )
        self.PURGE_INTERVAL: int = int(
            cache_cfg.get("purge_interval", os.getenv("CACHE_PURGE_INTERVAL", "3600"))
        )
        self.DATABASE_PATH: str = str(
            cache_cfg.get("database_path", os.getenv("DATABASE_PATH", str(_DEFAULT_DB_PATH)))
        )
