"""Generic async key/value cache with per-entry TTL."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

K = TypeVar("K")
V = TypeVar("V")

# seconds since the epoch; injectable so tests can move time without sleeping
Clock = Callable[[], float]


@dataclass
class CacheEntry[V]:
    """A stored value and when it was stored."""

    value: V
    stored_at: float
    ttl_seconds: int

    def expires_at(self) -> float:
        return self.stored_at + self.ttl_seconds

    # Hey future me, ">=" on purpose: with CACHE_TTL=0 an entry is already stale when stored,
    # which makes "TTL 0" behave like "don't cache" instead of "cache for one tick".
    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at()


class BaseCache[K, V](ABC):
    """Async cache contract. get() returns None for missing AND for expired keys."""

    @abstractmethod
    async def get(self, key: K) -> V | None: ...

    @abstractmethod
    async def set(self, key: K, value: V, ttl_seconds: int = 300) -> None: ...

    @abstractmethod
    async def delete(self, key: K) -> bool:
        """Remove key; True if something was removed."""

    @abstractmethod
    async def clear(self) -> None: ...


class InMemoryCache(BaseCache[K, V]):
    """Dict-backed cache for a single process.

    Nothing survives a restart, which is fine for a read-through cache in front of the sheet.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: K) -> V | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                # lazy eviction
                self._entries.pop(key, None)
                return None
            return entry.value

    async def set(self, key: K, value: V, ttl_seconds: int = 300) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(value, self._clock(), ttl_seconds)

    async def delete(self, key: K) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    # Yo, sync and unlocked: only feeds the cache status endpoint, a count that is one
    # coroutine stale doesn't matter there.
    def get_stats(self) -> dict[str, Any]:
        """Entry counts plus the age in seconds of every stored key."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        return {
            "total_entries": len(self._entries),
            "active_entries": len(self._entries) - len(expired),
            "expired_entries": len(expired),
            "entries": {
                str(key): round(now - entry.stored_at, 1)
                for key, entry in self._entries.items()
            },
        }
