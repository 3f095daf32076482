"""Result models returned by the cache services."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .core.time_utils import serialize_iso
from .exceptions import ProxyError, UpstreamFetchError, ValidationError


class CalendarResult(BaseModel):
    """Raw iCalendar text served for a calendar URL."""

    payload: str = Field(..., description="Raw iCalendar document text")
    was_cached: bool = Field(..., description="True when served without an upstream fetch")


class CalendarHashResult(BaseModel):
    """Content fingerprint of a calendar payload."""

    hash: str = Field(..., description="SHA-256 hex digest of the payload text")
    was_cached: bool
    cached_at: Optional[datetime] = Field(
        default=None, description="Instant of the last successful fetch for this URL"
    )

    @field_serializer("cached_at", when_used="unless-none")
    def serialize_cached_at(self, dt: datetime) -> Optional[str]:
        """Serialize fetch instant as UTC ISO 8601."""
        return serialize_iso(dt)


class RealizationResult(BaseModel):
    """Realization JSON payload served for a realization ID."""

    payload: Any = None
    was_cached: bool
    status: int = 200


class CacheFailure(BaseModel):
    """Typed failure result; wraps the error that ended the request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    error: ProxyError

    @property
    def message(self) -> str:
        """Short diagnostic text safe to include in an error body."""
        return str(self.error)

    @property
    def status_code(self) -> int:
        """HTTP status suggested by the failure kind.

        Upstream status is mirrored, malformed input is 400, and
        anything else is reported as an internal error.
        """
        if isinstance(self.error, UpstreamFetchError):
            return self.error.status_code
        if isinstance(self.error, ValidationError):
            return 400
        return 500


CalendarOutcome = Union[CalendarResult, CacheFailure]
CalendarHashOutcome = Union[CalendarHashResult, CacheFailure]
RealizationOutcome = Union[RealizationResult, CacheFailure]
