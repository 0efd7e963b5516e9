import pytest
from unittest.mock import AsyncMock

from streamflow.services.response_cache import ResponseCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=300, clock=clock)


@pytest.mark.asyncio
async def test_second_call_within_ttl_uses_cached_value(cache, clock):
    loader = AsyncMock(return_value={"items": [1]})

    first = await cache.fetch_with_cache("k", loader)
    clock.now += 1
    second = await cache.fetch_with_cache("k", loader)

    assert first == second == {"items": [1]}
    assert loader.await_count == 1


@pytest.mark.asyncio
async def test_loader_called_again_after_ttl(cache, clock):
    loader = AsyncMock(side_effect=["old", "new"])

    assert await cache.fetch_with_cache("k", loader) == "old"
    clock.now += 300
    assert await cache.fetch_with_cache("k", loader) == "new"
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_failure_is_not_cached(cache):
    loader = AsyncMock(side_effect=[RuntimeError("down"), "ok"])

    with pytest.raises(RuntimeError):
        await cache.fetch_with_cache("k", loader)
    assert len(cache) == 0

    assert await cache.fetch_with_cache("k", loader) == "ok"
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_failed_refresh_keeps_stale_entry_out_of_reads(cache, clock):
    loader = AsyncMock(side_effect=["v1", RuntimeError("down")])
    await cache.fetch_with_cache("k", loader)
    clock.now += 301

    with pytest.raises(RuntimeError):
        await cache.fetch_with_cache("k", loader)
    assert cache.get("k") == (False, None)


@pytest.mark.asyncio
async def test_clear_cache_forces_reload(cache):
    loader = AsyncMock(return_value="v")
    await cache.fetch_with_cache("k", loader)

    cache.clear_cache()
    await cache.fetch_with_cache("k", loader)

    assert loader.await_count == 2


def test_make_key_distinguishes_options():
    url = "http://proxy/api/youtube/search"
    assert ResponseCache.make_key(url, {"q": "a"}) != ResponseCache.make_key(url, {"q": "b"})
    assert ResponseCache.make_key(url, {"q": "a", "n": 1}) == ResponseCache.make_key(url, {"n": 1, "q": "a"})
    assert ResponseCache.make_key(url) == ResponseCache.make_key(url, {})
