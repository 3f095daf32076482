"""Realization (course instance) proxy route."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from ...core.time_utils import TimeProvider, serialize_iso
from ...exceptions import UpstreamFetchError, ValidationError
from ...models import CacheFailure
from ...services.realization_service import RealizationCacheService, is_valid_realization_id

logger = logging.getLogger(__name__)


def _require_realization_id(request: web.Request) -> str:
    realization_id = request.match_info.get("id", "")

    if not realization_id:
        raise ValidationError(
            "Realization ID is required", "Please provide a realization ID as a URL parameter"
        )

    if not is_valid_realization_id(realization_id):
        raise ValidationError(
            "Invalid realization ID format", "Realization ID contains invalid characters"
        )

    return realization_id


def register_realization_routes(
    app: Any,
    realization_service: RealizationCacheService,
    time_provider: TimeProvider,
) -> None:
    """Register realization routes.

    Args:
        app: aiohttp web application
        realization_service: Realization cache service
        time_provider: Clock for response timestamps
    """

    async def get_realization(request: web.Request) -> web.Response:
        """Serve realization JSON by ID, mirroring upstream error statuses."""
        try:
            realization_id = _require_realization_id(request)
        except ValidationError as exc:
            return web.json_response({"error": exc.error, "message": exc.message}, status=400)

        try:
            result = await realization_service.get_realization(realization_id)
        except Exception:
            logger.exception("Realization request failed for %s", realization_id)
            return web.json_response(
                {"error": "Internal server error", "message": "Unexpected error while handling request"},
                status=500,
            )

        if isinstance(result, CacheFailure):
            if isinstance(result.error, UpstreamFetchError):
                return web.json_response(
                    {
                        "error": "Failed to fetch realization data",
                        "message": result.message,
                        "realizationId": realization_id,
                    },
                    status=result.status_code,
                )
            return web.json_response(
                {"error": "Internal server error", "message": result.message},
                status=result.status_code,
            )

        return web.json_response(
            {
                "data": result.payload,
                "cached": result.was_cached,
                "timestamp": serialize_iso(time_provider()),
            }
        )

    app.router.add_get("/api/realization/", get_realization)
    app.router.add_get("/api/realization/{id}", get_realization)

    logger.debug("Realization routes registered")
