"""Startup warm-up of the calendar cache for well-known schedule URLs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import ProxyError
from .calendar_service import CalendarCacheService

logger = logging.getLogger(__name__)

# Group schedules offered by the frontend's calendar picker.
PRECACHE_URLS: tuple[str, ...] = (
    "http://lukkari.turkuamk.fi/ical.php?hash=9385A6CBC6B79C3DDCE6B2738B5C1B882A6D64CA",
    "http://lukkari.turkuamk.fi/ical.php?hash=6DDA4ADC8FD96BC395D68B8B15340B543D74E3D8",
    "http://lukkari.turkuamk.fi/ical.php?hash=E4AC87D135AF921A83B677DD15A19E6119DDF0BB",
    "http://lukkari.turkuamk.fi/ical.php?hash=E8F13D455EA82E8A7D0990CF6983BBE61AD839A7",
    "http://lukkari.turkuamk.fi/ical.php?hash=346C225AD26BD6966FC656F8E77B5A3EA38A73B5",
    "http://lukkari.turkuamk.fi/ical.php?hash=6EAF3A6D4FC2B07836C2B742EC923629839CA0B7",
)


@dataclass
class PrecacheReport:
    """Outcome of one precache run."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class PrecacheRunner:
    """Concurrently runs the fetch-and-cache cycle for a fixed URL list.

    Individual failures are logged and never abort the remaining fetches.
    """

    def __init__(
        self,
        calendar_service: CalendarCacheService,
        urls: Sequence[str] = PRECACHE_URLS,
    ) -> None:
        self.calendar_service = calendar_service
        self.urls = tuple(urls)
        self._task: Optional[asyncio.Task[PrecacheReport]] = None

    async def run(self) -> PrecacheReport:
        """Warm every URL and wait for the whole group to finish."""
        logger.info("Pre-caching %d common calendar URLs", len(self.urls))

        results = await asyncio.gather(
            *(self.calendar_service.fetch_and_cache(url) for url in self.urls),
            return_exceptions=True,
        )

        report = PrecacheReport()
        for url, result in zip(self.urls, results):
            if isinstance(result, BaseException):
                report.failed.append(url)
                if isinstance(result, ProxyError):
                    logger.warning("Pre-cache failed for %s: %s", url, result)
                else:
                    logger.error("Pre-cache errored for %s", url, exc_info=result)
            else:
                report.succeeded.append(url)

        logger.info(
            "Calendar pre-cache complete (%d succeeded, %d failed)",
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def start(self) -> asyncio.Task[PrecacheReport]:
        """Schedule :meth:`run` in the background and return its task."""
        self._task = asyncio.create_task(self.run(), name="calendar-precache")
        self._task.add_done_callback(self._log_task_outcome)
        return self._task

    @staticmethod
    def _log_task_outcome(task: asyncio.Task[PrecacheReport]) -> None:
        if task.cancelled():
            logger.info("Calendar pre-cache cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Calendar pre-cache failed", exc_info=exc)

    async def stop(self) -> None:
        """Cancel a still-running background precache."""
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
