"""TTLCache tests: expiry, eviction order, cache-aside fetch."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from zuna.cache import TTLCache


class FakeTimer:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


class TestExpiry:
    def test_hit_before_ttl(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        cache.set("k", "v", 10)
        assert cache.get("k") == "v"

    def test_value_still_live_at_exact_expiry(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        cache.set("k", "v", 10)
        timer.advance(10)
        assert cache.get("k") == "v"

    def test_miss_after_ttl_and_entry_dropped(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        cache.set("k", "v", 10)
        timer.advance(10.001)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl_used_when_omitted(self, timer):
        cache: TTLCache[int] = TTLCache(5, timer=timer)
        cache.set("k", 1)
        timer.advance(4)
        assert cache.get("k") == 1
        timer.advance(2)
        assert cache.get("k") is None

    def test_contains_does_not_evict(self, timer):
        cache: TTLCache[int] = TTLCache(5, timer=timer)
        cache.set("k", 1)
        timer.advance(6)
        assert "k" not in cache
        assert len(cache) == 1

    def test_missing_key(self, timer):
        cache: TTLCache[int] = TTLCache(5, timer=timer)
        assert cache.get("nope") is None


class TestEviction:
    def test_oldest_inserted_evicted_at_capacity(self, timer):
        cache: TTLCache[int] = TTLCache(60, max_size=2, timer=timer)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert len(cache) == 2
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_eviction_ignores_reads(self, timer):
        cache: TTLCache[int] = TTLCache(60, max_size=2, timer=timer)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" not in cache
        assert "b" in cache

    def test_overwrite_at_capacity_does_not_evict(self, timer):
        cache: TTLCache[int] = TTLCache(60, max_size=2, timer=timer)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_overwrite_keeps_insertion_position(self, timer):
        cache: TTLCache[int] = TTLCache(60, max_size=2, timer=timer)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)
        assert "a" not in cache
        assert cache.get("b") == 2

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            TTLCache(60, max_size=0)


class TestExplicitRemoval:
    def test_invalidate(self, timer):
        cache: TTLCache[int] = TTLCache(60, timer=timer)
        cache.set("a", 1)
        cache.invalidate("a")
        cache.invalidate("missing")
        assert cache.get("a") is None

    def test_clear(self, timer):
        cache: TTLCache[int] = TTLCache(60, timer=timer)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0


class TestGetOrFetch:
    @pytest.mark.asyncio
    async def test_miss_fetches_and_stores(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        fetcher = AsyncMock(return_value="fresh")
        assert await cache.get_or_fetch("k", fetcher) == "fresh"
        assert cache.get("k") == "fresh"
        fetcher.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hit_skips_fetcher(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        cache.set("k", "cached")
        fetcher = AsyncMock(return_value="fresh")
        assert await cache.get_or_fetch("k", fetcher) == "cached"
        fetcher.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refetches_after_expiry_with_custom_ttl(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        fetcher = AsyncMock(side_effect=["one", "two"])
        await cache.get_or_fetch("k", fetcher, ttl=1)
        timer.advance(2)
        assert await cache.get_or_fetch("k", fetcher) == "two"

    @pytest.mark.asyncio
    async def test_fetcher_error_propagates_and_caches_nothing(self, timer):
        cache: TTLCache[str] = TTLCache(60, timer=timer)
        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("k", AsyncMock(side_effect=RuntimeError("down")))
        assert "k" not in cache

    @pytest.mark.asyncio
    async def test_concurrent_misses_both_fetch(self, timer):
        cache: TTLCache[int] = TTLCache(60, timer=timer)
        calls = 0

        async def fetcher() -> int:
            nonlocal calls
            calls += 1
            value = calls
            await asyncio.sleep(0)
            return value

        results = await asyncio.gather(cache.get_or_fetch("k", fetcher), cache.get_or_fetch("k", fetcher))
        assert calls == 2
        assert sorted(results) == [1, 2]
        assert cache.get("k") == 2
