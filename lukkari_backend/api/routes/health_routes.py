"""Liveness route."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from ...core.time_utils import TimeProvider, serialize_iso

logger = logging.getLogger(__name__)


def register_health_routes(app: Any, time_provider: TimeProvider) -> None:
    """Register the ``/health`` liveness endpoint."""

    async def health_check(_request: web.Request) -> web.Response:
        return web.json_response({"status": "ok", "timestamp": serialize_iso(time_provider())})

    app.router.add_get("/health", health_check)

    logger.debug("Health routes registered")
