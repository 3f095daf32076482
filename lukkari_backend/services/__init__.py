"""Cache policy services for calendar and realization payloads."""

from .calendar_service import CalendarCacheService, compute_payload_hash, is_valid_url
from .precache import PRECACHE_URLS, PrecacheReport, PrecacheRunner
from .realization_service import RealizationCacheService, is_valid_realization_id

__all__ = [
    "PRECACHE_URLS",
    "CalendarCacheService",
    "PrecacheReport",
    "PrecacheRunner",
    "RealizationCacheService",
    "compute_payload_hash",
    "is_valid_realization_id",
    "is_valid_url",
]
