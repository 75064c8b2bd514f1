"""Tests for the in-memory cache and the sheet row cache."""

from typing import Any

import pytest

from discovinyl.application.cache import InMemoryCache, SheetRowCache
from discovinyl.domain.exceptions import DataSourceError
from discovinyl.infrastructure.persistence.range_resolver import SheetRangeResolver

ROWS = [["artistName"], ["Kraftwerk"]]


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingSheets:
    def __init__(self, rows: list[list[Any]] | None = None) -> None:
        self.rows = rows if rows is not None else ROWS
        self.reads = 0

    async def get_values(self, range_: str) -> list[list[Any]]:
        self.reads += 1
        return self.rows


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sheets() -> CountingSheets:
    return CountingSheets()


@pytest.fixture
def cache(sheets: CountingSheets, clock: FakeClock) -> SheetRowCache:
    resolver = SheetRangeResolver(sheets, ["A:L"])
    return SheetRowCache(
        resolver, ttl_seconds=300, invalidation_interval_seconds=1800, clock=clock
    )


class TestInMemoryCache:
    async def test_set_get_expire(self, clock: FakeClock) -> None:
        cache: InMemoryCache[str, int] = InMemoryCache(clock=clock)
        await cache.set("k", 1, ttl_seconds=10)
        assert await cache.get("k") == 1

        clock.advance(10)
        assert await cache.get("k") is None

    async def test_delete_and_clear(self, clock: FakeClock) -> None:
        cache: InMemoryCache[str, int] = InMemoryCache(clock=clock)
        await cache.set("a", 1)
        await cache.set("b", 2)
        assert await cache.delete("a") is True
        assert await cache.delete("a") is False
        await cache.clear()
        assert cache.get_stats()["total_entries"] == 0

    async def test_stats_count_expired(self, clock: FakeClock) -> None:
        cache: InMemoryCache[str, int] = InMemoryCache(clock=clock)
        await cache.set("old", 1, ttl_seconds=5)
        await cache.set("new", 2, ttl_seconds=500)
        clock.advance(6)
        stats = cache.get_stats()
        assert stats["active_entries"] == 1
        assert stats["expired_entries"] == 1
        assert stats["entries"]["old"] == 6.0


class TestSheetRowCache:
    async def test_miss_then_hit(self, cache: SheetRowCache, sheets: CountingSheets) -> None:
        assert await cache.get_rows() == ("A:L", ROWS)
        assert await cache.get_rows() == ("A:L", ROWS)

        assert sheets.reads == 1
        assert cache.misses == 1
        assert cache.hits == 1

    async def test_ttl_expiry_refetches(
        self, cache: SheetRowCache, sheets: CountingSheets, clock: FakeClock
    ) -> None:
        await cache.get_rows()
        clock.advance(299)
        await cache.get_rows()
        assert sheets.reads == 1

        clock.advance(1)
        await cache.get_rows()
        assert sheets.reads == 2

    async def test_global_interval_drops_everything(
        self, sheets: CountingSheets, clock: FakeClock
    ) -> None:
        resolver = SheetRangeResolver(sheets, ["A:L"])
        cache = SheetRowCache(
            resolver, ttl_seconds=10_000, invalidation_interval_seconds=60, clock=clock
        )
        await cache.get_rows()
        clock.advance(61)

        await cache.get_rows()

        assert sheets.reads == 2
        assert cache.last_invalidation == clock.now

    async def test_invalidate_forgets_locator(self, cache: SheetRowCache) -> None:
        await cache.get_rows()
        assert cache.resolver.preferred == "A:L"

        await cache.invalidate()

        assert cache.last_locator is None
        assert cache.resolver.preferred is None
        assert cache.status()["entries"] == 0

    async def test_disabled_always_reads(self, sheets: CountingSheets, clock: FakeClock) -> None:
        cache = SheetRowCache(
            SheetRangeResolver(sheets, ["A:L"]), enabled=False, clock=clock
        )
        await cache.get_rows()
        await cache.get_rows()
        assert sheets.reads == 2
        assert cache.hits == 0

    async def test_read_fresh_bypasses_cache(
        self, cache: SheetRowCache, sheets: CountingSheets
    ) -> None:
        await cache.get_rows()
        await cache.read_fresh()
        assert sheets.reads == 2

    async def test_failure_not_cached(self, clock: FakeClock) -> None:
        sheets = CountingSheets(rows=[["artistName"]])
        cache = SheetRowCache(SheetRangeResolver(sheets, ["A:L"]), clock=clock)
        with pytest.raises(DataSourceError):
            await cache.get_rows()
        assert cache.status()["entries"] == 0

    async def test_status_shape(self, cache: SheetRowCache) -> None:
        await cache.get_rows()
        await cache.get_rows()
        status = cache.status()
        assert status["enabled"] is True
        assert status["ttlSeconds"] == 300
        assert status["invalidationIntervalSeconds"] == 1800
        assert status["entries"] == 1
        assert status["lastLocator"] == "A:L"
        assert status["hits"] == 1
        assert status["misses"] == 1
        assert status["lastInvalidation"].endswith("+00:00")
