"""Access logging and CORS middleware."""

import logging
import time
from collections.abc import Awaitable, Callable

from aiohttp import web

logger = logging.getLogger("lukkari_backend.http")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

CORS_ORIGIN_KEY = web.AppKey("cors_origin", str)
_CORS_ALLOW_METHODS = "GET, HEAD, OPTIONS"


@web.middleware
async def request_logging_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log every request on arrival and on completion with its duration."""
    started = time.perf_counter()
    logger.info("Incoming request %s %s", request.method, request.path_qs)

    try:
        response = await handler(request)
    except web.HTTPException as http_exc:
        _log_completed(request, http_exc.status, started)
        raise
    except Exception:
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.exception(
            "Request failed %s %s after %.1f ms", request.method, request.path_qs, duration_ms
        )
        raise

    _log_completed(request, response.status, started)
    return response


def _log_completed(request: web.Request, status: int, started: float) -> None:
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    logger.info(
        "Request completed %s %s status=%d duration_ms=%.1f",
        request.method,
        request.path_qs,
        status,
        duration_ms,
    )


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Allow the browser frontend to call the API from another origin.

    Preflight requests are answered directly; other responses get the
    allow-origin header. The allowed origin is read from ``app[CORS_ORIGIN_KEY]``.
    """
    allowed_origin = request.app.get(CORS_ORIGIN_KEY, "*")

    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        response: web.StreamResponse = web.Response(status=204)
        response.headers["Access-Control-Allow-Methods"] = _CORS_ALLOW_METHODS
        requested_headers = request.headers.get("Access-Control-Request-Headers")
        if requested_headers:
            response.headers["Access-Control-Allow-Headers"] = requested_headers
    else:
        try:
            response = await handler(request)
        except web.HTTPException as http_exc:
            http_exc.headers["Access-Control-Allow-Origin"] = allowed_origin
            raise

    response.headers["Access-Control-Allow-Origin"] = allowed_origin
    if allowed_origin != "*":
        response.headers["Vary"] = "Origin"
    return response
