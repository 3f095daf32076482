"""Fetch-or-serve-cached policy for calendar URLs.

Two entry points share one fetch-and-cache cycle:

- :meth:`CalendarCacheService.get_calendar` serves any cached payload,
  however old, and only fetches on a miss.
- :meth:`CalendarCacheService.get_calendar_hash` serves the digest of the
  cached payload while it is younger than ``STALE_AFTER_MS`` and
  revalidates otherwise.

Concurrent misses for the same URL may each fetch; the last successful
write wins.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from ..cache.store import STALE_AFTER_MS, FetchTimeIndex, KeyValueStore, calendar_cache_key
from ..cache.validator import is_valid_icalendar
from ..core.time_utils import TimeProvider, now_utc
from ..exceptions import InvalidPayloadError, NetworkError, ProxyError, UpstreamFetchError
from ..models import CacheFailure, CalendarHashOutcome, CalendarHashResult, CalendarOutcome, CalendarResult

logger = logging.getLogger(__name__)


def is_valid_url(value: str) -> bool:
    """Return True if ``value`` is an absolute URL with a scheme and a well-formed host.

    The authority must hold no whitespace, any port must be numeric and in
    range, and httpx must be able to build a request URL from it.
    """
    try:
        parsed = urlparse(value)
        parsed.port  # raises ValueError on a non-numeric or out-of-range port
        httpx.URL(value)
    except (ValueError, httpx.InvalidURL):
        return False

    if not parsed.scheme or not parsed.hostname:
        return False
    return not any(ch.isspace() for ch in parsed.netloc)


def compute_payload_hash(payload: str) -> str:
    """SHA-256 hex digest of the payload text (UTF-8)."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class CalendarCacheService:
    """Serves calendar payloads and their fingerprints from the shared cache."""

    def __init__(
        self,
        store: KeyValueStore,
        fetch_index: FetchTimeIndex,
        http_client: httpx.AsyncClient,
        time_provider: TimeProvider = now_utc,
        stale_after_ms: int = STALE_AFTER_MS,
    ) -> None:
        self.store = store
        self.fetch_index = fetch_index
        self.http_client = http_client
        self.time_provider = time_provider
        self.stale_after_ms = stale_after_ms

    async def get_calendar(self, calendar_url: str) -> CalendarOutcome:
        """Return the cached payload for ``calendar_url`` or fetch it on a miss."""
        cache_key = calendar_cache_key(calendar_url)
        cached: Optional[str] = self.store.get(cache_key)

        if cached is not None:
            logger.debug("Cache hit for calendar %s", calendar_url)
            return CalendarResult(payload=cached, was_cached=True)

        try:
            fresh = await self.fetch_and_cache(calendar_url)
        except ProxyError as e:
            return CacheFailure(error=e)

        return CalendarResult(payload=fresh, was_cached=False)

    async def get_calendar_hash(self, calendar_url: str) -> CalendarHashOutcome:
        """Return the payload digest, revalidating entries older than the threshold."""
        cache_key = calendar_cache_key(calendar_url)
        cached: Optional[str] = self.store.get(cache_key)

        if cached is not None and not self.fetch_index.is_stale(
            cache_key, self.stale_after_ms, self.time_provider()
        ):
            return CalendarHashResult(
                hash=compute_payload_hash(cached),
                was_cached=True,
                cached_at=self.fetch_index.last_fetch(cache_key),
            )

        try:
            fresh = await self.fetch_and_cache(calendar_url)
        except ProxyError as e:
            return CacheFailure(error=e)

        return CalendarHashResult(
            hash=compute_payload_hash(fresh),
            was_cached=False,
            cached_at=self.fetch_index.last_fetch(cache_key),
        )

    async def fetch_and_cache(self, calendar_url: str) -> str:
        """Fetch ``calendar_url``, validate it and store it with a fresh timestamp.

        The cache is only written after the body validates, so a bad fetch
        never replaces a previously good entry.

        Returns:
            The fetched iCalendar text

        Raises:
            UpstreamFetchError: Upstream answered with a non-2xx status
            InvalidPayloadError: Body is not a VCALENDAR document
            NetworkError: Connection, DNS, TLS or timeout failure
        """
        cache_key = calendar_cache_key(calendar_url)
        logger.info("Fetching calendar %s", calendar_url)

        try:
            response = await self.http_client.get(calendar_url)
            if not response.is_success:
                logger.warning(
                    "Calendar fetch failed for %s (status %d)", calendar_url, response.status_code
                )
                raise UpstreamFetchError(
                    f"HTTP {response.status_code}: {response.reason_phrase or 'Unknown status'}",
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                )
            calendar_data = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Calendar fetch errored for %s: %s", calendar_url, e)
            raise NetworkError(f"Could not reach calendar source: {type(e).__name__}") from e

        if not is_valid_icalendar(calendar_data):
            logger.warning("Calendar payload from %s is not valid iCalendar data", calendar_url)
            raise InvalidPayloadError("The provided URL does not contain valid iCalendar data")

        self.store.put(cache_key, calendar_data)
        self.fetch_index.record_fetch(cache_key, self.time_provider())

        logger.info("Calendar cached successfully for %s", calendar_url)
        return calendar_data
