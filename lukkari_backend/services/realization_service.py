"""Fetch-or-serve-cached for realization (course instance) JSON.

Realization payloads have no staleness policy: once fetched they are
served for the life of the process.
"""

from __future__ import annotations

import json
import logging
import re

import httpx

from ..cache.store import KeyValueStore, realization_cache_key
from ..core.config_manager import DEFAULT_REALIZATION_BASE_URL
from ..exceptions import InvalidPayloadError, NetworkError, ProxyError, UpstreamFetchError
from ..models import CacheFailure, RealizationOutcome, RealizationResult

logger = logging.getLogger(__name__)

REALIZATION_ID_PATTERN = re.compile(r"[a-zA-Z0-9\-_]+")

_MISSING = object()


def is_valid_realization_id(realization_id: str) -> bool:
    """Return True if the ID is non-empty and URL-path-safe."""
    return REALIZATION_ID_PATTERN.fullmatch(realization_id) is not None


class RealizationCacheService:
    """Serves realization JSON from the shared store, fetching once per ID."""

    def __init__(
        self,
        store: KeyValueStore,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_REALIZATION_BASE_URL,
    ) -> None:
        self.store = store
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    def realization_url(self, realization_id: str) -> str:
        return f"{self.base_url}/{realization_id}"

    async def get_realization(self, realization_id: str) -> RealizationOutcome:
        """Return cached realization JSON or fetch and cache it.

        The caller validates ``realization_id`` with
        :func:`is_valid_realization_id` before calling.
        """
        cache_key = realization_cache_key(realization_id)
        cached = self.store.get(cache_key, _MISSING)

        if cached is not _MISSING:
            logger.debug("Cache hit for realization %s", realization_id)
            return RealizationResult(payload=cached, was_cached=True, status=200)

        try:
            realization_data = await self._fetch(realization_id)
        except ProxyError as e:
            return CacheFailure(error=e)

        self.store.put(cache_key, realization_data)
        logger.info("Realization %s cached successfully", realization_id)

        return RealizationResult(payload=realization_data, was_cached=False, status=200)

    async def _fetch(self, realization_id: str) -> object:
        url = self.realization_url(realization_id)
        logger.info("Fetching realization %s", realization_id)

        try:
            response = await self.http_client.get(url)
            if not response.is_success:
                logger.warning(
                    "Realization fetch failed for %s (status %d)",
                    realization_id,
                    response.status_code,
                )
                raise UpstreamFetchError(
                    f"HTTP {response.status_code}: {response.reason_phrase or 'Unknown status'}",
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                )
            body = response.text
        except httpx.HTTPError as e:
            logger.error("Realization fetch errored for %s: %s", realization_id, e)
            raise NetworkError(f"Could not reach realization source: {type(e).__name__}") from e

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            logger.warning("Realization %s payload is not valid JSON: %s", realization_id, e)
            raise InvalidPayloadError("Realization source returned malformed JSON") from e
