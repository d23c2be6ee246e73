"""recurrence_lite - recurring date expansion with summary, preview and suggestions.

The core is ``expand(spec)``: a pure function turning a ``RecurrenceSpec``
into the ordered list of concrete dates it describes. Everything else in the
package (summary text, month-grid preview, task suggestions, CLI and JSON API)
consumes either the spec or that list.
"""

__version__ = "0.1.0"

from typing import Optional

from .domain.recurrence_engine import (
    MAX_OUTPUT,
    MAX_SCAN,
    RecurrenceEngineConfig,
    expand,
    expand_series,
)
from .domain.recurrence_models import Frequency, MonthlyMode, OccurrenceSeries, RecurrenceSpec

__all__ = [
    "MAX_OUTPUT",
    "MAX_SCAN",
    "Frequency",
    "MonthlyMode",
    "OccurrenceSeries",
    "RecurrenceEngineConfig",
    "RecurrenceSpec",
    "expand",
    "expand_series",
    "run_server",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorized stderr handler (colorlog) when the root logger has
    none, then applies ``level_name``. RECURRENCE_LITE_DEBUG (truthy values:
    "1", "true", "yes", "on") forces DEBUG.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("RECURRENCE_LITE_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message -- only the level is colorized
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(level))


def run_server(args: Optional[object] = None) -> None:
    """Start the recurrence_lite JSON API server.

    Loads the config file (``args.config`` when given), overlays environment
    settings, applies command line overrides (``args.port``) and blocks until
    the server is stopped.
    """
    import asyncio
    import logging
    import os

    _init_logging(os.environ.get("RECURRENCE_LITE_LOG_LEVEL"))

    from .api.server import serve
    from .config_loader import load_config
    from .core.config_manager import ConfigManager
    from .lite_logging import configure_lite_logging

    logger = logging.getLogger(__name__)

    config = load_config(getattr(args, "config", None))
    config = config.merged_with(ConfigManager().load_full_config())

    port = getattr(args, "port", None)
    if port is not None:
        config = config.merged_with({"server_port": port})

    configure_lite_logging(debug_mode=config.log_level == "DEBUG")
    logger.debug("Starting server with bind=%s port=%d", config.server_bind, config.server_port)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server stopped")
