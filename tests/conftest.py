"""Shared fixtures for lukkari_backend tests.

Upstream traffic is scripted with ``httpx.MockTransport`` and time is driven
by a fake clock, so no test touches the network or the real wall clock.
"""

from collections.abc import AsyncIterator, Generator
from datetime import datetime, timedelta, timezone
from typing import Any, Union

import httpx
import pytest

from lukkari_backend.cache.store import FetchTimeIndex, KeyValueStore
from lukkari_backend.core.http_client import close_all_clients
from lukkari_backend.services.calendar_service import CalendarCacheService
from lukkari_backend.services.realization_service import RealizationCacheService

REALIZATION_BASE_URL = "https://upstream.test/rest/realization"

SAMPLE_ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Lukkari Test//EN
CALSCALE:GREGORIAN
BEGIN:VEVENT
UID:lecture-001@lukkari.test
DTSTART:20250115T080000Z
DTEND:20250115T093000Z
SUMMARY:Ohjelmoinnin perusteet
LOCATION:ICT-City B2039
DTSTAMP:20250110T090000Z
END:VEVENT
END:VCALENDAR
"""

SAMPLE_ICS_UPDATED = SAMPLE_ICS.replace("Ohjelmoinnin perusteet", "Tietokannat")

EVENT_ONLY_ICS = """BEGIN:VEVENT
UID:lonely@lukkari.test
DTSTART:20250115T080000Z
SUMMARY:Not wrapped in a calendar
END:VEVENT
"""

UpstreamReply = Union[tuple[int, str], Exception]


class FakeClock:
    """Manually advanced UTC clock usable as a time provider."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


class UpstreamStub:
    """Scriptable upstream keyed by absolute URL.

    Each reply is either ``(status, body)`` or an exception to raise. A
    fresh ``httpx.Response`` is built per request. Unknown URLs answer 404.
    """

    def __init__(self) -> None:
        self.replies: dict[str, UpstreamReply] = {}
        self.calls: list[str] = []

    def reply(self, url: str, status: int = 200, body: str = "") -> None:
        self.replies[url] = (status, body)

    def fail(self, url: str, exc: Exception) -> None:
        self.replies[url] = exc

    def call_count(self, url: str) -> int:
        return self.calls.count(url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        reply = self.replies.get(url)
        if reply is None:
            return httpx.Response(404, text="not found")
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        return httpx.Response(status, text=body)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 15, 8, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> KeyValueStore:
    return KeyValueStore()


@pytest.fixture
def fetch_index() -> FetchTimeIndex:
    return FetchTimeIndex()


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
async def http_client(upstream: UpstreamStub) -> AsyncIterator[httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.aclose()


@pytest.fixture
def calendar_service(
    store: KeyValueStore,
    fetch_index: FetchTimeIndex,
    http_client: httpx.AsyncClient,
    clock: FakeClock,
) -> CalendarCacheService:
    return CalendarCacheService(
        store=store, fetch_index=fetch_index, http_client=http_client, time_provider=clock
    )


@pytest.fixture
def realization_service(
    store: KeyValueStore, http_client: httpx.AsyncClient
) -> RealizationCacheService:
    return RealizationCacheService(
        store=store, http_client=http_client, base_url=REALIZATION_BASE_URL
    )


@pytest.fixture
def sample_ics() -> str:
    return SAMPLE_ICS


@pytest.fixture
def updated_ics() -> str:
    """Same calendar as ``sample_ics`` with one lecture renamed."""
    return SAMPLE_ICS_UPDATED


@pytest.fixture
def event_only_ics() -> str:
    """Well-formed iCalendar text whose root is a VEVENT, not a VCALENDAR."""
    return EVENT_ONLY_ICS


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Keep LUKKARI_* variables from the host out of every test."""
    for key in (
        "LUKKARI_TEST_TIME",
        "LUKKARI_WEB_HOST",
        "LUKKARI_WEB_PORT",
        "PORT",
        "LUKKARI_LOG_LEVEL",
        "LUKKARI_DEBUG",
        "LUKKARI_REALIZATION_BASE_URL",
        "LUKKARI_PRECACHE",
        "LUKKARI_CORS_ORIGIN",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients created by a test."""
    yield
    await close_all_clients()
