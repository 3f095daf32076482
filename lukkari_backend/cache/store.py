"""In-memory payload store and fetch-recency index.

One :class:`KeyValueStore` and one :class:`FetchTimeIndex` are built at
process start and shared by the calendar and realization services. Neither
evicts: entries are overwritten on refetch and live until process exit.
Freshness is a read-time decision made against the index, never an expiry
enforced by the store.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Calendar payloads older than this are revalidated on the hash path.
STALE_AFTER_MS = 3_600_000

CALENDAR_KEY_PREFIX = "calendar_"
REALIZATION_KEY_PREFIX = "realization_"


def calendar_cache_key(calendar_url: str) -> str:
    """Cache key for a calendar URL; the raw string is used as-is."""
    return f"{CALENDAR_KEY_PREFIX}{calendar_url}"


def realization_cache_key(realization_id: str) -> str:
    """Cache key for a realization ID."""
    return f"{REALIZATION_KEY_PREFIX}{realization_id}"


class KeyValueStore:
    """Process-wide associative store without expiry.

    ``put``/``get`` never suspend, so each call is atomic with respect to
    other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        self._entries[key] = value
        logger.debug("Stored cache entry %s", key)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the entry for ``key``, or ``default`` when unknown."""
        return self._entries.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class FetchTimeIndex:
    """Tracks the last successful fetch instant per cache key."""

    def __init__(self) -> None:
        self._fetched_at: dict[str, datetime.datetime] = {}

    def record_fetch(self, key: str, instant: datetime.datetime) -> None:
        """Overwrite the last-fetch instant for ``key``."""
        self._fetched_at[key] = instant

    def last_fetch(self, key: str) -> Optional[datetime.datetime]:
        """Return the last-fetch instant for ``key``, or None if never fetched."""
        return self._fetched_at.get(key)

    def is_stale(self, key: str, threshold_ms: int, now: datetime.datetime) -> bool:
        """Return True when ``key`` was never fetched or is older than ``threshold_ms``.

        The age comparison is strict: an entry exactly ``threshold_ms`` old is
        still fresh.
        """
        last = self._fetched_at.get(key)
        if last is None:
            return True
        return now - last > datetime.timedelta(milliseconds=threshold_ms)
