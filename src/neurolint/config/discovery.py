"""Locating and reading ``neurolint.toml``.

Resolution order: an explicit path, then the ``NEUROLINT_CONFIG`` env
var, then a walk up from the start directory (the way git finds
``.git/``).  A path that does not name an existing file resolves to no
config at all rather than an error.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "neurolint.toml"
CONFIG_ENV_VAR = "NEUROLINT_CONFIG"


class ConfigError(ValueError):
    """Raised when a resolved neurolint.toml cannot be parsed."""


def _existing_file(path: str | Path) -> Path | None:
    candidate = Path(path)
    return candidate if candidate.is_file() else None


def find_config(start: Path | None = None) -> Path | None:
    """Env var override first, else the nearest neurolint.toml above *start*."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return _existing_file(env_path)

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        found = _existing_file(directory / CONFIG_FILENAME)
        if found is not None:
            return found
    return None


def resolve_config(
    config_path: str | Path | None = None, start: Path | None = None
) -> Path | None:
    """An explicit *config_path* wins over env var and walk-up discovery."""
    if config_path:
        return _existing_file(config_path)
    return find_config(start)


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* into the raw section mapping fed to the settings."""
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
