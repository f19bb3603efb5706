"""
Unit tests for dashboard/services/cache.py

The Upstash REST endpoint is replaced by an httpx.MockTransport.
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from dashboard.config import settings
from dashboard.services import cache as cache_module
from dashboard.services.cache import (
    UpstashClient,
    cache_page,
    get_cached_page,
    page_key,
    revalidate_path,
)


@pytest.fixture
def cache_enabled(monkeypatch):
    monkeypatch.setattr(settings, "UPSTASH_REDIS_REST_URL", "https://cache.test")
    monkeypatch.setattr(settings, "UPSTASH_REDIS_REST_TOKEN", "token-123")


def test_page_key():
    assert page_key("/dashboard/invoices") == "page:/dashboard/invoices"


@pytest.mark.asyncio
async def test_client_posts_commands_as_json(cache_enabled, monkeypatch):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.headers["Authorization"], json.loads(request.content)))
        return httpx.Response(200, json={"result": 1})

    monkeypatch.setattr(cache_module, "_http", httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    removed = await UpstashClient().delete("page:/dashboard/invoices")

    assert removed == 1
    assert seen == [("Bearer token-123", ["DEL", "page:/dashboard/invoices"])]


@pytest.mark.asyncio
async def test_revalidate_skipped_when_cache_disabled():
    with patch.object(cache_module, "cache") as mock_cache:
        mock_cache.delete = AsyncMock()
        await revalidate_path("/dashboard/invoices")
    mock_cache.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_revalidate_drops_cached_page(cache_enabled):
    with patch.object(cache_module, "cache") as mock_cache:
        mock_cache.delete = AsyncMock(return_value=1)
        await revalidate_path("/dashboard/invoices")
    mock_cache.delete.assert_awaited_once_with("page:/dashboard/invoices")


@pytest.mark.asyncio
async def test_revalidate_survives_cache_outage(cache_enabled):
    with patch.object(cache_module, "cache") as mock_cache:
        mock_cache.delete = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
        await revalidate_path("/dashboard/invoices")
    mock_cache.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_cache_page_uses_ttl(cache_enabled, monkeypatch):
    monkeypatch.setattr(settings, "PAGE_CACHE_TTL_SECONDS", 60)
    with patch.object(cache_module, "cache") as mock_cache:
        mock_cache.set = AsyncMock()
        await cache_page("/dashboard/invoices", '{"data": []}')
    mock_cache.set.assert_awaited_once_with("page:/dashboard/invoices", '{"data": []}', ex=60)


@pytest.mark.asyncio
async def test_get_cached_page_miss_on_error(cache_enabled):
    with patch.object(cache_module, "cache") as mock_cache:
        mock_cache.get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        assert await get_cached_page("/dashboard/invoices") is None
