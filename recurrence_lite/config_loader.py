"""recurrence_lite.config_loader

Lightweight config loader for recurrence_lite.

- Reads YAML (PyYAML ``safe_load``); JSON files parse as YAML too.
- Exposes a typed dataclass ``Config`` and a ``load_config()`` helper that
  accepts an optional path override.
- An optional ``recurrence:`` mapping is parsed into a ``RecurrenceSpec`` so a
  file can carry a default pattern for the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .domain.recurrence_engine import MAX_OUTPUT, MAX_SCAN, RecurrenceEngineConfig
from .domain.recurrence_models import RecurrenceSpec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("recurrence_lite") / "config.yaml"


@dataclass
class Config:
    """Typed configuration for recurrence_lite.

    Fields:
        server_bind: host to bind the HTTP server to
        server_port: port for the HTTP server
        log_level: logging level name
        gemini_api_key: optional API key for task suggestions
        gemini_model: text-generation model name
        gemini_api_base: base URL of the text-generation API
        suggestion_timeout_seconds: read timeout for suggestion requests (1..300)
        daily_interval_stepping: step Daily recurrences by their interval
        max_scan: candidate-day scan cap for expansion (1..MAX_SCAN)
        max_output: occurrence cap for expansion (1..MAX_OUTPUT)
        recurrence: optional default recurrence spec
    """

    server_bind: str = "127.0.0.1"
    server_port: int = 8080
    log_level: str = "INFO"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    suggestion_timeout_seconds: float = 60.0
    daily_interval_stepping: bool = False
    max_scan: int = MAX_SCAN
    max_output: int = MAX_OUTPUT
    recurrence: RecurrenceSpec | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced, out-of-range caps are clamped with a
        warning, and an invalid ``recurrence`` section is dropped with a warning.
        """
        if data is None:
            data = {}

        defaults = cls()

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        def _clamp(key: str, value: int, low: int, high: int) -> int:
            if value < low:
                logger.warning("%s %d below minimum; coercing to %d", key, value, low)
                return low
            if value > high:
                logger.warning("%s %d above maximum; coercing to %d", key, value, high)
                return high
            return value

        server_port = _coerce_int("server_port", defaults.server_port)
        max_scan = _clamp("max_scan", _coerce_int("max_scan", MAX_SCAN), 1, MAX_SCAN)
        max_output = _clamp("max_output", _coerce_int("max_output", MAX_OUTPUT), 1, MAX_OUTPUT)

        raw_timeout = data.get("suggestion_timeout_seconds", defaults.suggestion_timeout_seconds)
        try:
            timeout = float(raw_timeout)
        except (TypeError, ValueError):
            logger.warning("Config suggestion_timeout_seconds=%r is not a number; using default", raw_timeout)
            timeout = defaults.suggestion_timeout_seconds
        timeout = min(max(timeout, 1.0), 300.0)

        server_bind = data.get("server_bind") or defaults.server_bind
        log_level = str(data.get("log_level") or defaults.log_level).upper()

        api_key = data.get("gemini_api_key")
        api_key = str(api_key) if api_key else None

        stepping = data.get("daily_interval_stepping", False)
        if isinstance(stepping, str):
            stepping = stepping.strip().lower() in ("1", "true", "yes", "on")

        recurrence = None
        raw_spec = data.get("recurrence")
        if raw_spec is not None:
            if not isinstance(raw_spec, dict):
                logger.warning("Config `recurrence` is not a mapping; ignoring")
            else:
                try:
                    recurrence = RecurrenceSpec.model_validate(raw_spec)
                except ValidationError as exc:
                    logger.warning("Config `recurrence` is invalid; ignoring: %s", exc)

        return cls(
            server_bind=str(server_bind),
            server_port=server_port,
            log_level=log_level,
            gemini_api_key=api_key,
            gemini_model=str(data.get("gemini_model") or defaults.gemini_model),
            gemini_api_base=str(data.get("gemini_api_base") or defaults.gemini_api_base),
            suggestion_timeout_seconds=timeout,
            daily_interval_stepping=bool(stepping),
            max_scan=max_scan,
            max_output=max_output,
            recurrence=recurrence,
        )

    def merged_with(self, overrides: dict[str, Any]) -> Config:
        """Return a new Config with ``overrides`` (e.g. from the environment) applied."""
        base = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "recurrence"}
        base.update({k: v for k, v in overrides.items() if v is not None})
        if self.recurrence is not None:
            base["recurrence"] = self.recurrence.model_dump(exclude_unset=True)
        return Config.from_dict(base)

    def engine_config(self) -> RecurrenceEngineConfig:
        """Return the engine tuning described by this config."""
        return RecurrenceEngineConfig.from_settings(self)


def _load_mapping(path: Path) -> Any:
    """Load the top-level value of a YAML (or JSON) file."""
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config(path: str | Path | None = None) -> Config:
    """Read a YAML (or JSON) config file into a ``Config``.

    Args:
        path: Config file to read. Defaults to ``recurrence_lite/config.yaml``
              under the current working directory.

    A missing file is not an error and yields the defaults. A file whose top
    level is not a mapping raises ``ValueError``.
    """
    config_path = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info("No config file at %s; using built-in defaults", config_path)
        return Config()

    raw = _load_mapping(config_path)
    if not isinstance(raw, dict):
        logger.warning("Config file %s must hold a mapping, got %s", config_path, type(raw).__name__)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    cfg = Config.from_dict(raw)
    logger.info("Config loaded from %s", config_path)
    logger.debug("Effective config: %s", cfg)
    return cfg


def load_spec_file(path: str | Path) -> RecurrenceSpec:
    """Load a recurrence spec from a YAML/JSON file.

    The file may hold the spec at top level or under a ``recurrence`` key.

    Raises:
        ValueError: If the file does not hold a mapping
        pydantic.ValidationError: If the spec is structurally invalid
    """
    raw = _load_mapping(Path(path))
    if isinstance(raw, dict) and isinstance(raw.get("recurrence"), dict):
        raw = raw["recurrence"]
    if not isinstance(raw, dict):
        raise ValueError("Spec file must contain a mapping")  # noqa: TRY004
    return RecurrenceSpec.model_validate(raw)
