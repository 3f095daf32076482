"""Payload storage, fetch recency tracking and payload validation."""

from .store import (
    STALE_AFTER_MS,
    FetchTimeIndex,
    KeyValueStore,
    calendar_cache_key,
    realization_cache_key,
)
from .validator import is_valid_icalendar

__all__ = [
    "STALE_AFTER_MS",
    "FetchTimeIndex",
    "KeyValueStore",
    "calendar_cache_key",
    "is_valid_icalendar",
    "realization_cache_key",
]
