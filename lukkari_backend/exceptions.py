"""Exception hierarchy for the calendar and realization proxy.

These are raised inside the cache core and converted into
:class:`~lukkari_backend.models.CacheFailure` results at the service
boundary, so route handlers can map every failure mode to an HTTP status
without catching anything.
"""

from typing import Optional


class ProxyError(Exception):
    """Base exception for all proxy failures."""


class ValidationError(ProxyError):
    """Caller-supplied input is malformed.

    Raised when:
    - A calendar URL is missing or cannot be parsed
    - A realization ID contains characters outside ``[a-zA-Z0-9-_]``

    Should result in HTTP 400 Bad Request. Never touches the cache.
    """

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error
        self.message = message


class UpstreamFetchError(ProxyError):
    """Upstream answered with a non-2xx status.

    Carries the upstream status code and reason phrase so realization
    routes can mirror them. Calendar routes surface a generic 400.
    """

    def __init__(self, message: str, status_code: int, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class InvalidPayloadError(ProxyError):
    """Fetched body failed shape validation.

    Raised when:
    - A calendar body is not a VCALENDAR document
    - A realization body is not parseable JSON

    A previously cached good value is always preserved.
    """


class NetworkError(ProxyError):
    """DNS, connection, TLS or timeout failure talking to upstream."""
