"""
Slash command cogs.

Every module under ``commands/handlers`` is imported when this package loads.
Cogs mark themselves with :func:`register_cog`; :func:`setup` then attaches
each of them to the bot once, in import order::

    from issue_relay.commands import register_cog

    @register_cog
    class Issues(commands.Cog): ...
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import List, Type

from discord.ext import commands as commands_ext

logger = logging.getLogger(__name__)

_COG_CLASSES: List[Type[commands_ext.Cog]] = []


def register_cog(cog_cls: Type[commands_ext.Cog]) -> Type[commands_ext.Cog]:
    """Class decorator adding ``cog_cls`` to the set attached by :func:`setup`."""

    if not (isinstance(cog_cls, type) and issubclass(cog_cls, commands_ext.Cog)):
        raise TypeError(f"register_cog expects a Cog subclass, got {cog_cls!r}")
    if cog_cls not in _COG_CLASSES:
        _COG_CLASSES.append(cog_cls)
    return cog_cls


def registered_cogs() -> List[Type[commands_ext.Cog]]:
    return list(_COG_CLASSES)


async def setup(bot: commands_ext.Bot) -> None:
    """Attach every registered cog that ``bot`` does not already carry."""

    added = []
    for cog_cls in _COG_CLASSES:
        if bot.get_cog(cog_cls.__name__) is None:
            await bot.add_cog(cog_cls(bot))
            added.append(cog_cls.__name__)

    if not _COG_CLASSES:
        logger.warning("No command cogs discovered; command tree is empty")
    elif added:
        logger.info("Attached command cogs: %s", ", ".join(added))


def _import_handlers() -> None:
    handlers_dir = Path(__file__).resolve().parent / "handlers"
    for module in iter_modules([str(handlers_dir)]):
        if not module.name.startswith("_"):
            import_module(f"{__name__}.handlers.{module.name}")


_import_handlers()


__all__ = ["register_cog", "registered_cogs", "setup"]
