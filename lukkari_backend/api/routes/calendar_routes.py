"""Calendar proxy routes: raw iCalendar data and content fingerprints."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from ...core.time_utils import TimeProvider, serialize_iso
from ...exceptions import ValidationError
from ...models import CacheFailure
from ...services.calendar_service import CalendarCacheService, is_valid_url

logger = logging.getLogger(__name__)

FETCH_FAILED_ERROR = "Failed to fetch or parse calendar"


def _require_calendar_url(request: web.Request) -> str:
    """Extract and validate the ``url`` query parameter.

    Raises:
        ValidationError: If the parameter is missing or not an absolute URL
    """
    calendar_url = request.query.get("url", "")

    if not calendar_url:
        raise ValidationError(
            "Calendar URL is required",
            "Please provide a calendar URL as a query parameter: ?url=your_calendar_url",
        )

    if not is_valid_url(calendar_url):
        raise ValidationError("Invalid URL format", "Please provide a valid calendar URL")

    return calendar_url


def _validation_response(exc: ValidationError) -> web.Response:
    return web.json_response({"error": exc.error, "message": exc.message}, status=400)


def _fetch_failed_response(failure: CacheFailure, calendar_url: str) -> web.Response:
    return web.json_response(
        {"error": FETCH_FAILED_ERROR, "message": failure.message, "url": calendar_url},
        status=400,
    )


def _internal_error_response() -> web.Response:
    return web.json_response(
        {"error": "Internal server error", "message": "Unexpected error while handling request"},
        status=500,
    )


def register_calendar_routes(
    app: Any,
    calendar_service: CalendarCacheService,
    time_provider: TimeProvider,
) -> None:
    """Register calendar routes.

    Args:
        app: aiohttp web application
        calendar_service: Calendar cache policy service
        time_provider: Clock for response timestamps
    """

    async def get_calendar(request: web.Request) -> web.Response:
        """Serve raw iCalendar text for ``?url=``, from cache when present."""
        try:
            calendar_url = _require_calendar_url(request)
        except ValidationError as exc:
            return _validation_response(exc)

        try:
            result = await calendar_service.get_calendar(calendar_url)
        except Exception:
            logger.exception("Calendar request failed for %s", calendar_url)
            return _internal_error_response()

        if isinstance(result, CacheFailure):
            return _fetch_failed_response(result, calendar_url)

        return web.json_response(
            {"data": result.payload, "timestamp": serialize_iso(time_provider())}
        )

    async def get_calendar_hash(request: web.Request) -> web.Response:
        """Serve the SHA-256 fingerprint of the calendar at ``?url=``."""
        try:
            calendar_url = _require_calendar_url(request)
        except ValidationError as exc:
            return _validation_response(exc)

        try:
            result = await calendar_service.get_calendar_hash(calendar_url)
        except Exception:
            logger.exception("Calendar hash request failed for %s", calendar_url)
            return _internal_error_response()

        if isinstance(result, CacheFailure):
            return _fetch_failed_response(result, calendar_url)

        return web.json_response(
            {
                "hash": result.hash,
                "cached": result.was_cached,
                "cachedAt": serialize_iso(result.cached_at),
                "timestamp": serialize_iso(time_provider()),
            }
        )

    app.router.add_get("/api/calendar", get_calendar)
    app.router.add_get("/api/calendar/hash", get_calendar_hash)

    logger.debug("Calendar routes registered")
