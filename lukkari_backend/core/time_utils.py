"""Clock helpers shared by the cache services and routes."""

from __future__ import annotations

import datetime
import logging
import os
from typing import Callable

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

TimeProvider = Callable[[], datetime.datetime]


def now_utc() -> datetime.datetime:
    """Return current UTC time with tzinfo.

    Can be overridden for testing via the LUKKARI_TEST_TIME environment variable.
    Format: ISO 8601 datetime string (e.g., "2025-10-27T08:20:00+03:00").
    """
    test_time = os.environ.get("LUKKARI_TEST_TIME")
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
            if dt.tzinfo is not None:
                return dt.astimezone(datetime.timezone.utc)
            # Naive values are taken to be UTC already
            return dt.replace(tzinfo=datetime.timezone.utc)
        except ValueError as e:
            logger.warning("Failed to parse LUKKARI_TEST_TIME=%r: %s", test_time, e)

    return datetime.datetime.now(datetime.timezone.utc)


def serialize_iso(dt: datetime.datetime | None) -> str | None:
    """Serialize a datetime as a UTC ISO 8601 string with a ``Z`` suffix."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc).isoformat().replace("+00:00", "Z")
