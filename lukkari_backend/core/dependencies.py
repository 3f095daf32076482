"""Dependency injection container for the lukkari_backend server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from lukkari_backend.cache.store import FetchTimeIndex, KeyValueStore
from lukkari_backend.core.config_manager import DEFAULT_REALIZATION_BASE_URL, get_config_value
from lukkari_backend.core.time_utils import TimeProvider, now_utc
from lukkari_backend.services.calendar_service import CalendarCacheService
from lukkari_backend.services.precache import PRECACHE_URLS, PrecacheRunner
from lukkari_backend.services.realization_service import RealizationCacheService


@dataclass
class AppDependencies:
    """Container for all application dependencies.

    The store and fetch index are built once per process and shared by
    both cache services.
    """

    # Configuration
    config: Any

    # State
    store: KeyValueStore
    fetch_index: FetchTimeIndex

    # Infrastructure
    http_client: httpx.AsyncClient
    time_provider: TimeProvider

    # Services
    calendar_service: CalendarCacheService
    realization_service: RealizationCacheService
    precache_runner: PrecacheRunner


class DependencyContainer:
    """Factory for building application dependencies."""

    @staticmethod
    def build_dependencies(
        config: Any,
        http_client: httpx.AsyncClient,
        time_provider: TimeProvider = now_utc,
    ) -> AppDependencies:
        """Build all application dependencies.

        Args:
            config: Application configuration
            http_client: Shared HTTP client for upstream fetches
            time_provider: Clock used for fetch timestamps and staleness

        Returns:
            AppDependencies container with all dependencies initialized
        """
        store = KeyValueStore()
        fetch_index = FetchTimeIndex()

        calendar_service = CalendarCacheService(
            store=store,
            fetch_index=fetch_index,
            http_client=http_client,
            time_provider=time_provider,
        )
        realization_service = RealizationCacheService(
            store=store,
            http_client=http_client,
            base_url=get_config_value(config, "realization_base_url", DEFAULT_REALIZATION_BASE_URL),
        )
        precache_runner = PrecacheRunner(
            calendar_service,
            urls=get_config_value(config, "precache_urls", PRECACHE_URLS),
        )

        return AppDependencies(
            config=config,
            store=store,
            fetch_index=fetch_index,
            http_client=http_client,
            time_provider=time_provider,
            calendar_service=calendar_service,
            realization_service=realization_service,
            precache_runner=precache_runner,
        )
