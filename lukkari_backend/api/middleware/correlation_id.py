"""Per-request correlation IDs.

Every request gets an ID, taken from the client when it sends one, which
is exposed to log records via :func:`get_request_id` and returned in the
``X-Request-ID`` response header.
"""

import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

from aiohttp import web

REQUEST_ID_HEADER = "X-Request-ID"
# Checked in order; the first non-empty value wins
INCOMING_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
NO_REQUEST_ID = "no-request-id"

CORRELATION_ID_KEY = web.RequestKey("correlation_id", str)

request_id_var: ContextVar[str] = ContextVar("lukkari_request_id", default="")


def _incoming_request_id(request: web.Request) -> str:
    for header in INCOMING_ID_HEADERS:
        value = request.headers.get(header, "").strip()
        if value:
            return value
    return uuid.uuid4().hex


@web.middleware
async def correlation_id_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Bind a correlation ID to the request for the duration of the handler."""
    request_id = _incoming_request_id(request)
    request[CORRELATION_ID_KEY] = request_id

    token = request_id_var.set(request_id)
    try:
        response = await handler(request)
    except web.HTTPException as http_exc:
        http_exc.headers[REQUEST_ID_HEADER] = request_id
        raise
    finally:
        request_id_var.reset(token)

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def get_request_id() -> str:
    """Correlation ID of the request being handled, or ``"no-request-id"``."""
    return request_id_var.get() or NO_REQUEST_ID
