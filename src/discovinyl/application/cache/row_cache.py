"""Read-through cache for spreadsheet rows.

Hey future me - every list/get/stats/unique-values call needs the WHOLE sheet (there are no
server-side queries against a spreadsheet). Without this cache every page load is a full
Sheets API read, and Google's per-minute read quota runs out fast.

Two expiry rules stack:
- per-entry TTL (CACHE_TTL, default 5 min): an entry older than this is refetched
- global interval (CACHE_INVALIDATION_INTERVAL, default 30 min): when that much time has passed
  since the last FULL invalidation, everything is dropped before serving, regardless of age.
  The lifespan also runs a background loop on the same interval; this lazy check covers the
  gap when the loop is late or disabled.

Rows are keyed by the locator that produced them, and we remember the last successful one so
a hit needs no resolver call at all. Writes ALWAYS go around the cache (fresh reads) and then
call invalidate().

No lock around the whole read-then-fill. Two concurrent misses both hit the sheet once and
the second overwrite wins, which is harmless.
"""

import logging
import time
from datetime import UTC, datetime
from typing import Any

from discovinyl.application.cache.base_cache import Clock, InMemoryCache
from discovinyl.infrastructure.persistence.range_resolver import SheetRangeResolver

logger = logging.getLogger(__name__)

Rows = list[list[Any]]


class SheetRowCache:
    """Time-boxed cache of raw sheet rows in front of SheetRangeResolver."""

    def __init__(
        self,
        resolver: SheetRangeResolver,
        ttl_seconds: int = 300,
        invalidation_interval_seconds: int = 1800,
        enabled: bool = True,
        clock: Clock = time.time,
    ) -> None:
        self.resolver = resolver
        self.ttl_seconds = ttl_seconds
        self.invalidation_interval_seconds = invalidation_interval_seconds
        self.enabled = enabled
        self._clock = clock
        self._cache: InMemoryCache[str, Rows] = InMemoryCache(clock=clock)
        self.last_locator: str | None = None
        self.last_invalidation: float = clock()
        self.hits = 0
        self.misses = 0

    async def _expire_if_interval_passed(self) -> None:
        if self._clock() - self.last_invalidation > self.invalidation_interval_seconds:
            logger.info(
                "Cache invalidation interval (%ss) elapsed, dropping cached rows",
                self.invalidation_interval_seconds,
            )
            await self.invalidate()

    async def get_rows(self) -> tuple[str, Rows]:
        """Return (locator, rows) from cache or a fresh discovery read.

        Raises:
            DataSourceError: If no candidate location produced data
        """
        if not self.enabled:
            return await self.resolver.read()

        await self._expire_if_interval_passed()

        if self.last_locator is not None:
            rows = await self._cache.get(self.last_locator)
            if rows is not None:
                self.hits += 1
                logger.debug("Row cache hit for %s", self.last_locator)
                return self.last_locator, rows

        self.misses += 1
        locator, rows = await self.resolver.read()
        await self._cache.set(locator, rows, self.ttl_seconds)
        self.last_locator = locator
        return locator, rows

    async def read_fresh(self) -> tuple[str, Rows]:
        """Bypass the cache completely (used before writes)."""
        return await self.resolver.read()

    async def invalidate(self) -> None:
        """Drop every cached entry and the resolver's remembered location."""
        await self._cache.clear()
        self.resolver.forget()
        self.last_locator = None
        self.last_invalidation = self._clock()
        logger.debug("Row cache invalidated")

    def status(self) -> dict[str, Any]:
        """Snapshot for the cache status endpoint."""
        stats = self._cache.get_stats()
        return {
            "enabled": self.enabled,
            "ttlSeconds": self.ttl_seconds,
            "invalidationIntervalSeconds": self.invalidation_interval_seconds,
            "entries": stats["active_entries"],
            "entryAges": stats["entries"],
            "lastLocator": self.last_locator,
            "hits": self.hits,
            "misses": self.misses,
            "lastInvalidation": datetime.fromtimestamp(
                self.last_invalidation, tz=UTC
            ).isoformat(),
        }
