"""aiohttp server for the recurrence_lite JSON API."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from aiohttp import web

from ..config_loader import Config
from ..core.http_client import close_all_clients
from ..domain.recurrence_engine import RecurrenceEngineConfig
from ..suggestions import GeminiSuggestionClient, SuggestionProvider, SuggestionSettings
from .routes import register_api_routes

logger = logging.getLogger(__name__)

MAX_PORT_ATTEMPTS = 10


def build_suggestion_provider(config: Config) -> Optional[SuggestionProvider]:
    """Return a Gemini provider when an API key is configured, else None."""
    settings = SuggestionSettings.from_config(config)
    if not settings.is_configured:
        logger.info("No Gemini API key configured; suggestions disabled")
        return None
    return GeminiSuggestionClient(settings)


def make_app(
    config: Config,
    suggestion_provider: Optional[SuggestionProvider] = None,
    engine_config: Optional[RecurrenceEngineConfig] = None,
) -> web.Application:
    """Create the aiohttp application with API routes registered.

    Args:
        config: Application configuration
        suggestion_provider: Optional suggestion capability (None disables /api/suggestions)
        engine_config: Optional engine tuning (defaults to the config's caps)
    """
    app = web.Application()

    register_api_routes(
        app=app,
        engine_config=engine_config or config.engine_config(),
        suggestion_provider=suggestion_provider,
    )

    async def _close_clients(_app: web.Application) -> None:
        await close_all_clients()

    app.on_cleanup.append(_close_clients)
    return app


async def _start_site(runner: web.AppRunner, host: str, configured_port: int) -> int:
    """Start a TCP site on the configured port or the next free one."""
    for port_offset in range(MAX_PORT_ATTEMPTS):
        port = configured_port + port_offset
        site = web.TCPSite(runner, host=host, port=port)
        try:
            await site.start()
        except OSError as e:
            if "address already in use" not in str(e).lower():
                logger.exception("Failed to start server on %s:%d", host, port)
                raise
            logger.debug("Port %d in use, trying next port", port)
            continue

        if port != configured_port:
            logger.warning("Configured port %d was in use, using port %d instead", configured_port, port)
        return port

    raise RuntimeError(
        f"No available port found in range {configured_port}-{configured_port + MAX_PORT_ATTEMPTS - 1}"
    )


async def serve(config: Config, stop_event: Optional[asyncio.Event] = None) -> None:
    """Run the API server until ``stop_event`` is set (or SIGINT/SIGTERM).

    Args:
        config: Application configuration
        stop_event: Optional event to signal shutdown. If provided, signal
            handlers are not registered (caller owns signal handling).
    """
    app = make_app(config, build_suggestion_provider(config))
    runner = web.AppRunner(app)
    await runner.setup()

    own_signals = stop_event is None
    stop_event = stop_event or asyncio.Event()
    if own_signals:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                logger.debug("Signal handlers not supported on this platform")

    try:
        port = await _start_site(runner, config.server_bind, config.server_port)
        logger.info("Server started successfully on %s:%d", config.server_bind, port)
        await stop_event.wait()
    finally:
        logger.info("Shutting down server")
        await runner.cleanup()
