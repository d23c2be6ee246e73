"""Logger level policy for recurrence_lite.

The console handler itself is installed by ``recurrence_lite._init_logging``;
this module only decides levels: recurrence_lite modules at INFO (DEBUG when
troubleshooting) and chatty HTTP and event-loop libraries held at WARNING.
"""

import logging
import os
from typing import Optional

NOISY_LOGGERS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}

LITE_MODULES = [
    "recurrence_lite",
    "recurrence_lite.domain.recurrence_engine",
    "recurrence_lite.domain.calendar_preview",
    "recurrence_lite.suggestions",
    "recurrence_lite.api",
]

_ROOT_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR")


def _debug_requested(debug_mode: bool, force_debug: Optional[bool]) -> bool:
    if force_debug is not None:
        return force_debug
    if os.getenv("RECURRENCE_LITE_DEBUG", "").lower() in ("1", "true", "yes"):
        return True
    return debug_mode


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """Apply recurrence_lite logger levels.

    Args:
        debug_mode: Log recurrence_lite modules at DEBUG
        force_debug: When not None, overrides both ``debug_mode`` and
            RECURRENCE_LITE_DEBUG

    RECURRENCE_LITE_LOG_LEVEL (DEBUG, INFO, WARNING or ERROR) sets the root
    level independently of the module levels.
    """
    debug = _debug_requested(debug_mode, force_debug)
    module_level = logging.DEBUG if debug else logging.INFO

    root_level = module_level
    env_level = os.getenv("RECURRENCE_LITE_LOG_LEVEL", "").upper()
    if env_level in _ROOT_LEVEL_NAMES:
        root_level = logging.getLevelName(env_level)

    root = logging.getLogger()
    root.setLevel(root_level)
    if not root.handlers:
        # Library use without _init_logging: fall back to a plain stderr handler.
        fallback = logging.StreamHandler()
        fallback.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s"))
        root.addHandler(fallback)

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
    for name in LITE_MODULES:
        logging.getLogger(name).setLevel(module_level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s modules=%s",
        logging.getLevelName(root_level),
        logging.getLevelName(module_level),
    )


def reset_logging_to_debug() -> None:
    """Drop every managed logger, and the root, to DEBUG."""
    for name in ["", *NOISY_LOGGERS, *LITE_MODULES]:
        logging.getLogger(name).setLevel(logging.DEBUG)
    logging.getLogger(__name__).info("All recurrence_lite loggers set to DEBUG")


def get_logging_status() -> dict[str, str]:
    """Return the current level name of the root and key loggers."""
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for name in ("recurrence_lite", "aiohttp.access", "httpx", "asyncio"):
        status[name] = logging.getLevelName(logging.getLogger(name).level)
    return status
