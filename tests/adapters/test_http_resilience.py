from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, cast

import httpx
import pytest

from wofbot.adapters.http_resilience import (
    ResilientClient,
    _build_cache_components,  # type: ignore[reportPrivateUsage]
    _ShouldCacheResponseFilter,  # type: ignore[reportPrivateUsage]
)
from wofbot.config import CacheConfig, RateLimit, ResilienceConfig
from wofbot.config.wikidata import default_sparql_resilience

if TYPE_CHECKING:
    from hishel import Response as HishelCacheResponse


def test_cache_components_disabled() -> None:
    assert _build_cache_components(None) == (None, None)
    assert _build_cache_components(CacheConfig(enabled=False)) == (None, None)


def test_cache_components_reject_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        _build_cache_components(CacheConfig(backend="redis"))  # type: ignore[arg-type]


def test_sparql_cache_only_keeps_result_payloads() -> None:
    config = default_sparql_resilience("wofbot-tests")
    assert config.cache is not None
    assert config.cache.should_cache is not None
    response_filter = _ShouldCacheResponseFilter(config.cache.should_cache)
    item = cast("HishelCacheResponse", None)

    assert response_filter.apply(item, json.dumps({"results": {"bindings": []}}).encode())
    assert not response_filter.apply(item, json.dumps({"error": "timeout"}).encode())
    assert response_filter.apply(item, b"not json")


def test_resilient_client_sends_through_limiter() -> None:
    seen: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["User-Agent"])
        return httpx.Response(200, json={})

    config = ResilienceConfig(
        name="test",
        base_url="https://example.test/",
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"User-Agent": "wofbot-tests"},
    )

    async def scenario() -> int:
        async with ResilientClient(config) as client:
            client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
                transport=httpx.MockTransport(handler),
                base_url="https://example.test/",
                headers={"User-Agent": "wofbot-tests"},
            )
            response = await client.get("api")
            return response.status_code

    assert asyncio.run(scenario()) == 200
    assert seen == ["wofbot-tests"]
