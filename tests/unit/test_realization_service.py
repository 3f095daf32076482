"""Unit tests for realization JSON caching."""

import json

import httpx
import pytest

from lukkari_backend.cache.store import realization_cache_key
from lukkari_backend.exceptions import InvalidPayloadError, NetworkError, UpstreamFetchError
from lukkari_backend.models import CacheFailure, RealizationResult
from lukkari_backend.services.realization_service import (
    RealizationCacheService,
    is_valid_realization_id,
)

pytestmark = pytest.mark.unit

REALIZATION = {"id": "abc123", "name": "Ohjelmoinnin perusteet", "credits": 5}


class TestRealizationIdValidation:
    @pytest.mark.parametrize("value", ["abc123", "TTC-2020_3001", "a", "----", "A_b-C"])
    def test_valid_ids(self, value):
        assert is_valid_realization_id(value) is True

    @pytest.mark.parametrize(
        "value", ["", "abc 123", "abc/123", "../etc", "abc.123", "abc123\n", "äö"]
    )
    def test_invalid_ids(self, value):
        assert is_valid_realization_id(value) is False


def test_realization_url_joins_base_and_id(http_client, store):
    service = RealizationCacheService(
        store=store, http_client=http_client, base_url="https://upstream.test/rest/realization/"
    )

    assert service.realization_url("abc123") == "https://upstream.test/rest/realization/abc123"


class TestGetRealization:
    async def test_miss_fetches_and_caches(self, realization_service, upstream, store):
        url = realization_service.realization_url("abc123")
        upstream.reply(url, body=json.dumps(REALIZATION))

        result = await realization_service.get_realization("abc123")

        assert isinstance(result, RealizationResult)
        assert result.payload == REALIZATION
        assert result.was_cached is False
        assert result.status == 200
        assert store.get(realization_cache_key("abc123")) == REALIZATION

    async def test_hit_never_refetches(self, realization_service, upstream, clock):
        url = realization_service.realization_url("abc123")
        upstream.reply(url, body=json.dumps(REALIZATION))
        await realization_service.get_realization("abc123")

        upstream.reply(url, body=json.dumps({"id": "abc123", "name": "changed"}))
        clock.advance(days=30)
        result = await realization_service.get_realization("abc123")

        assert result.was_cached is True
        assert result.payload == REALIZATION
        assert upstream.call_count(url) == 1

    async def test_upstream_status_is_mirrored(self, realization_service, upstream, store):
        upstream.reply(realization_service.realization_url("missing"), status=404)

        result = await realization_service.get_realization("missing")

        assert isinstance(result, CacheFailure)
        assert isinstance(result.error, UpstreamFetchError)
        assert result.status_code == 404
        assert result.message == "HTTP 404: Not Found"
        assert realization_cache_key("missing") not in store

    async def test_failure_is_retried_on_next_request(self, realization_service, upstream):
        url = realization_service.realization_url("abc123")
        upstream.reply(url, status=502)
        first = await realization_service.get_realization("abc123")

        upstream.reply(url, body=json.dumps(REALIZATION))
        second = await realization_service.get_realization("abc123")

        assert isinstance(first, CacheFailure)
        assert isinstance(second, RealizationResult)
        assert second.was_cached is False
        assert upstream.call_count(url) == 2

    async def test_malformed_json_is_failure(self, realization_service, upstream, store):
        upstream.reply(realization_service.realization_url("abc123"), body="{not json")

        result = await realization_service.get_realization("abc123")

        assert isinstance(result, CacheFailure)
        assert isinstance(result.error, InvalidPayloadError)
        assert result.status_code == 500
        assert realization_cache_key("abc123") not in store

    async def test_network_error_is_failure(self, realization_service, upstream):
        upstream.fail(
            realization_service.realization_url("abc123"), httpx.ConnectError("connection refused")
        )

        result = await realization_service.get_realization("abc123")

        assert isinstance(result, CacheFailure)
        assert isinstance(result.error, NetworkError)
        assert result.status_code == 500

    async def test_cached_null_counts_as_present(self, realization_service, upstream):
        url = realization_service.realization_url("empty")
        upstream.reply(url, body="null")

        first = await realization_service.get_realization("empty")
        second = await realization_service.get_realization("empty")

        assert first.payload is None
        assert second.was_cached is True
        assert second.payload is None
        assert upstream.call_count(url) == 1

    async def test_shares_store_with_calendar_namespace(self, realization_service, calendar_service, upstream, store, sample_ics):
        upstream.reply("https://lukkari.test/cal.ics", body=sample_ics)
        upstream.reply(realization_service.realization_url("abc123"), body=json.dumps(REALIZATION))

        await calendar_service.get_calendar("https://lukkari.test/cal.ics")
        await realization_service.get_realization("abc123")

        assert len(store) == 2
