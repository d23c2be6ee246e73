"""Environment overlay for recurrence_lite configuration.

Settings come from ``RECURRENCE_LITE_*`` environment variables (plus the
conventional ``GEMINI_API_KEY``), optionally seeded from a ``.env`` file in
the working directory. Values found here override the YAML config file.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ENV_PREFIX = "RECURRENCE_LITE_"

_TRUTHY = ("1", "true", "yes", "on")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUTHY


# (variable suffix, Config field, converter)
_ENV_SETTINGS: tuple[tuple[str, str, Callable[[str], Any]], ...] = (
    ("GEMINI_MODEL", "gemini_model", str),
    ("GEMINI_API_BASE", "gemini_api_base", str),
    ("SERVER_BIND", "server_bind", str),
    ("SERVER_PORT", "server_port", int),
    ("LOG_LEVEL", "log_level", str),
    ("SUGGESTION_TIMEOUT", "suggestion_timeout_seconds", float),
    ("DAILY_INTERVAL_STEPPING", "daily_interval_stepping", _parse_bool),
)


def parse_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=VALUE`` pairs from a dotenv file.

    Blank lines, ``#`` comments and lines without ``=`` are ignored, an
    ``export`` prefix is allowed, and matching quotes around values are
    removed. A missing or unreadable file yields an empty mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        logger.debug("Could not read %s; ignoring", path, exc_info=True)
        return {}

    pairs: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        name, _, value = line.partition("=")
        name = name.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        if name:
            pairs[name] = value
    return pairs


class ConfigManager:
    """Builds config overrides from the process environment and a ``.env`` file."""

    def __init__(self, env_file_path: Path | None = None):
        self.env_file_path = env_file_path if env_file_path is not None else Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Copy ``.env`` entries into ``os.environ`` without overriding existing ones.

        Returns:
            Names of the variables that were newly set
        """
        added = []
        for name, value in parse_env_file(self.env_file_path).items():
            if name in os.environ:
                continue
            os.environ[name] = value
            added.append(name)

        if added:
            logger.debug("Set %d variable(s) from %s: %s", len(added), self.env_file_path, ", ".join(added))
        return added

    def build_config_from_env(self) -> dict[str, Any]:
        """Translate environment variables into ``Config.from_dict`` keys.

        ``RECURRENCE_LITE_GEMINI_API_KEY`` wins over ``GEMINI_API_KEY``. Values
        that fail conversion are skipped with a warning.
        """
        overrides: dict[str, Any] = {}

        api_key = os.environ.get(f"{ENV_PREFIX}GEMINI_API_KEY") or os.environ.get("GEMINI_API_KEY")
        if api_key:
            overrides["gemini_api_key"] = api_key

        for suffix, key, convert in _ENV_SETTINGS:
            raw = os.environ.get(ENV_PREFIX + suffix)
            if not raw:
                continue
            try:
                overrides[key] = convert(raw)
            except ValueError:
                logger.warning("Ignoring %s%s=%r: not a valid %s", ENV_PREFIX, suffix, raw, convert.__name__)

        return overrides

    def load_full_config(self) -> dict[str, Any]:
        """Apply the ``.env`` file, then return the environment overrides."""
        self.load_env_file()
        return self.build_config_from_env()


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Look up ``key`` on a mapping or an attribute-style config object."""
    if config is None:
        return default
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
