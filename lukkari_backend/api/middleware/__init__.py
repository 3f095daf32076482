"""Middleware components for request processing.

Provides correlation ID tracking, access logging and CORS handling.
"""

from .correlation_id import CORRELATION_ID_KEY, correlation_id_middleware, get_request_id
from .request_logging import cors_middleware, request_logging_middleware

__all__ = [
    "CORRELATION_ID_KEY",
    "correlation_id_middleware",
    "cors_middleware",
    "get_request_id",
    "request_logging_middleware",
]
