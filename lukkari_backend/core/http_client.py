"""Pooled httpx clients for upstream calendar and realization fetches.

All proxy requests reuse one ``httpx.AsyncClient`` per name so upstream
connections are kept alive between fetches. Clients live until
:func:`close_all_clients` runs at shutdown.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
)

DEFAULT_TIMEOUT = httpx.Timeout(
    connect=10.0,
    read=30.0,  # large schedule exports stream slowly
    write=10.0,
    pool=30.0,
)

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": "lukkari-backend/0.1 (+https://lukkari.juh.fi)",
    "Accept": "text/calendar, application/json, text/plain, */*",
}


class _ClientRegistry:
    """Named ``httpx.AsyncClient`` instances guarded by a single lock."""

    def __init__(self) -> None:
        self.clients: dict[str, httpx.AsyncClient] = {}
        self._lock: Optional[asyncio.Lock] = None

    @property
    def lock(self) -> asyncio.Lock:
        # Created on first use so it belongs to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def reset_lock(self) -> None:
        self._lock = None


_registry = _ClientRegistry()


async def get_shared_client(
    client_id: str = "default",
    limits: Optional[httpx.Limits] = None,
    timeout: Optional[httpx.Timeout] = None,
) -> httpx.AsyncClient:
    """Return the pooled client named ``client_id``, creating it on first use.

    A client that was closed is replaced. ``limits`` and ``timeout`` only
    apply when a new client is built.

    Raises:
        RuntimeError: If httpx rejects the client configuration
    """
    async with _registry.lock:
        existing = _registry.clients.get(client_id)
        if existing is not None and not existing.is_closed:
            return existing

        pool_limits = limits or DEFAULT_LIMITS
        try:
            client = httpx.AsyncClient(
                limits=pool_limits,
                timeout=timeout or DEFAULT_TIMEOUT,
                headers=DEFAULT_HEADERS,
                follow_redirects=True,
            )
        except (TypeError, ValueError) as e:
            logger.exception("Could not build upstream HTTP client '%s'", client_id)
            raise RuntimeError(f"Invalid HTTP client configuration for '{client_id}': {e}") from e

        _registry.clients[client_id] = client
        logger.info(
            "Upstream HTTP client '%s' ready (max_connections=%s, keepalive=%s)",
            client_id,
            pool_limits.max_connections,
            pool_limits.max_keepalive_connections,
        )
        return client


def active_client_ids() -> list[str]:
    """Names of clients currently held open."""
    return [name for name, client in _registry.clients.items() if not client.is_closed]


async def close_all_clients() -> None:
    """Close every pooled client and forget it.

    A client that fails to close is logged and skipped so the rest still
    release their connections.
    """
    async with _registry.lock:
        clients = list(_registry.clients.items())
        _registry.clients.clear()

        for client_id, client in clients:
            if client.is_closed:
                continue
            try:
                await client.aclose()
            except (httpx.HTTPError, OSError, RuntimeError) as e:
                logger.warning("Upstream HTTP client '%s' did not close cleanly: %s", client_id, e)
            else:
                logger.debug("Closed upstream HTTP client '%s'", client_id)

    _registry.reset_lock()
