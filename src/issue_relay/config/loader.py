from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

ROOT_TABLE = "issuerelay"

DEFAULT_CONFIG_PATH = Path(os.getenv("ISSUE_RELAY_CONFIG", "config.toml"))


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Read the TOML config file (``$ISSUE_RELAY_CONFIG`` or ``config.toml``).

    A missing file yields ``{}``; every setting then comes from the
    environment.
    """
    target = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        return tomllib.load(handle)


def section(config: Dict[str, Any] | None, *names: str) -> Dict[str, Any]:
    """Return ``[issuerelay.<names...>]`` from ``config``, or ``{}`` when absent."""

    table = (config or {}).get(ROOT_TABLE, {})
    for name in names:
        table = table.get(name, {})
        if not isinstance(table, dict):
            raise ValueError(f"[{'.'.join((ROOT_TABLE, *names))}] must be a table")
    return table


__all__ = ["load_raw_config", "section", "DEFAULT_CONFIG_PATH", "ROOT_TABLE"]
