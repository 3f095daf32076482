"""lukkari_backend.api.server - aiohttp server and process lifecycle.

This module:
- builds the aiohttp application with middleware and routes wired to the
  shared cache services
- binds the listener, falling back to the next ports when the configured
  one is taken
- starts the calendar precache in the background once the listener is up
- waits for SIGINT/SIGTERM and releases shared HTTP clients on shutdown
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Any

from aiohttp import web

from lukkari_backend.api.middleware import (
    correlation_id_middleware,
    cors_middleware,
    request_logging_middleware,
)
from lukkari_backend.api.middleware.request_logging import CORS_ORIGIN_KEY
from lukkari_backend.api.routes import (
    register_calendar_routes,
    register_health_routes,
    register_realization_routes,
)
from lukkari_backend.core.config_manager import (
    DEFAULT_CORS_ORIGIN,
    DEFAULT_SERVER_BIND,
    DEFAULT_SERVER_PORT,
    get_config_value,
)
from lukkari_backend.core.dependencies import AppDependencies, DependencyContainer
from lukkari_backend.core.http_client import close_all_clients, get_shared_client
from lukkari_backend.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

MAX_PORT_ATTEMPTS = 10


def make_app(deps: AppDependencies) -> web.Application:
    """Create the aiohttp application with routes wired to ``deps``."""
    app = web.Application(
        middlewares=[correlation_id_middleware, cors_middleware, request_logging_middleware]
    )
    app[CORS_ORIGIN_KEY] = get_config_value(deps.config, "cors_origin", DEFAULT_CORS_ORIGIN)

    register_health_routes(app, deps.time_provider)
    register_calendar_routes(app, deps.calendar_service, deps.time_provider)
    register_realization_routes(app, deps.realization_service, deps.time_provider)

    async def _shutdown(_app: web.Application) -> None:
        logger.info("Application shutdown requested")

    app.on_shutdown.append(_shutdown)
    return app


async def _start_site(runner: web.AppRunner, host: str, configured_port: int) -> int:
    """Bind ``runner`` to the first free port starting at ``configured_port``.

    Returns:
        The port the site is listening on

    Raises:
        RuntimeError: If no port in the attempted range is free
    """
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
            logger.warning(
                "Configured port %d was in use, using port %d instead", configured_port, port
            )
        return port

    raise RuntimeError(
        f"No available port found in range {configured_port}-"
        f"{configured_port + MAX_PORT_ATTEMPTS - 1}"
    )


async def serve(config: Any, external_stop_event: asyncio.Event | None = None) -> None:
    """Run the server and background precache until signalled to stop.

    Args:
        config: Server configuration object/dict.
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()

    http_client = await get_shared_client("upstream")
    deps = DependencyContainer.build_dependencies(config, http_client)
    app = make_app(deps)

    runner = web.AppRunner(app)
    await runner.setup()

    host = get_config_value(config, "server_bind", DEFAULT_SERVER_BIND)
    configured_port = int(get_config_value(config, "server_port", DEFAULT_SERVER_PORT))

    try:
        port = await _start_site(runner, host, configured_port)
    except Exception:
        await runner.cleanup()
        await close_all_clients()
        raise

    logger.info("Server is running on http://%s:%d", host, port)

    if get_config_value(config, "precache_enabled", True):
        deps.precache_runner.start()
    else:
        logger.info("Calendar pre-cache disabled by configuration")

    if external_stop_event is None:
        loop = asyncio.get_running_loop()

        def _on_signal() -> None:
            logger.info("Shutdown signal received")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _on_signal)

    await stop_event.wait()
    logger.info("Stop event received, shutting down")

    await deps.precache_runner.stop()
    await runner.cleanup()

    try:
        await close_all_clients()
    except Exception as e:
        logger.warning("Error cleaning up shared HTTP clients: %s", e)

    logger.info("Server shutdown complete")


def start_server(config: Any) -> None:
    """Start the asyncio event loop and HTTP server.

    Args:
        config: dict or dataclass-like object with keys:
            - server_bind: host to bind (str)
            - server_port: port (int)
            - realization_base_url: upstream realization REST base (str)
            - precache_enabled: warm known calendar URLs at startup (bool)
            - cors_origin: value for Access-Control-Allow-Origin (str)
            - debug_logging: enable debug logging for lukkari_backend (bool)

    Blocks the calling thread until SIGINT/SIGTERM is received.
    """
    configure_logging(debug_mode=bool(get_config_value(config, "debug_logging", False)))

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception:
        logger.exception("Server terminated unexpectedly")
        raise
