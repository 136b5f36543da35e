"""Application configuration"""

import logging
import os

from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .cache import Cache
from .github import GitHub

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
)
logging.getLogger("discord.http").setLevel(logging.WARNING)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

core = Core(_RAW_CONFIG)
cache = Cache(_RAW_CONFIG)
github = GitHub(_RAW_CONFIG)


class Config:
    core = core
    cache = cache
    github = github


__all__ = ["core", "cache", "github", "Config"]
