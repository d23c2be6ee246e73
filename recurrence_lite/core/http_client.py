"""Pooled httpx clients for outbound calls to the suggestion API.

One ``httpx.AsyncClient`` is kept per client id so repeated suggestion
requests reuse connections. A client that keeps failing is thrown away and
rebuilt on the next ``get_shared_client`` call.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import httpx

from recurrence_lite import __version__

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "default"

# A handful of concurrent suggestion requests at most.
DEFAULT_LIMITS = httpx.Limits(max_connections=4, max_keepalive_connections=2)

# Text generation answers slowly; reads get the long budget.
DEFAULT_TIMEOUT = httpx.Timeout(connect=10.0, read=60.0, write=10.0, pool=30.0)

DEFAULT_HEADERS = {
    "User-Agent": f"recurrence-lite/{__version__}",
    "Accept": "application/json",
}

# Three consecutive errors inside five minutes mark a client unhealthy.
HEALTH_ERROR_THRESHOLD = 3
HEALTH_TIMEOUT_SECONDS = 300


@dataclass
class ClientHealth:
    """Consecutive-error bookkeeping for one pooled client."""

    error_count: int = 0
    last_error_time: float = 0.0
    created_time: float = field(default_factory=time.time)

    def is_unhealthy(self, now: float) -> bool:
        return (
            self.error_count >= HEALTH_ERROR_THRESHOLD
            and now - self.last_error_time < HEALTH_TIMEOUT_SECONDS
        )


_clients: dict[str, httpx.AsyncClient] = {}
_health: dict[str, ClientHealth] = {}
_lock = asyncio.Lock()


async def _discard_client(client_id: str) -> None:
    """Close and forget ``client_id``; the caller holds ``_lock``."""
    client = _clients.pop(client_id, None)
    _health.pop(client_id, None)
    if client is None or client.is_closed:
        return
    try:
        await client.aclose()
    except Exception as e:
        logger.warning("Error closing HTTP client '%s': %s", client_id, e)


async def get_shared_client(
    client_id: str = DEFAULT_CLIENT_ID,
    limits: Optional[httpx.Limits] = None,
    timeout: Optional[httpx.Timeout] = None,
) -> httpx.AsyncClient:
    """Return the pooled client for ``client_id``, creating it on first use.

    ``limits`` and ``timeout`` only apply when a new client is built.

    Raises:
        RuntimeError: If httpx refuses to build the client
    """
    async with _lock:
        health = _health.get(client_id)
        if health is not None and client_id in _clients and health.is_unhealthy(time.time()):
            logger.warning(
                "Replacing HTTP client '%s' after %d consecutive errors",
                client_id,
                health.error_count,
            )
            await _discard_client(client_id)

        client = _clients.get(client_id)
        if client is not None and not client.is_closed:
            return client

        try:
            client = httpx.AsyncClient(
                limits=limits or DEFAULT_LIMITS,
                timeout=timeout or DEFAULT_TIMEOUT,
                headers=DEFAULT_HEADERS,
                follow_redirects=True,
            )
        except Exception as e:
            logger.exception("Could not create HTTP client '%s'", client_id)
            raise RuntimeError(f"Could not create HTTP client '{client_id}': {e}") from e

        _clients[client_id] = client
        _health[client_id] = ClientHealth()
        logger.debug("Created HTTP client '%s'", client_id)
        return client


async def close_all_clients() -> None:
    """Close every pooled client. Called on server shutdown and after CLI runs."""
    async with _lock:
        for client_id in list(_clients):
            await _discard_client(client_id)
        _health.clear()


async def record_client_error(client_id: str = DEFAULT_CLIENT_ID) -> None:
    """Count a failed request against ``client_id``."""
    async with _lock:
        health = _health.setdefault(client_id, ClientHealth())
        health.error_count += 1
        health.last_error_time = time.time()
        logger.debug("HTTP client '%s' error count now %d", client_id, health.error_count)


async def record_client_success(client_id: str = DEFAULT_CLIENT_ID) -> None:
    """Reset the consecutive error count of ``client_id``."""
    async with _lock:
        health = _health.get(client_id)
        if health is not None:
            health.error_count = 0


async def get_client_health(client_id: str = DEFAULT_CLIENT_ID) -> dict[str, Any]:
    """Return a snapshot of the health record for ``client_id`` (empty if unknown)."""
    async with _lock:
        health = _health.get(client_id)
        return asdict(health) if health is not None else {}
