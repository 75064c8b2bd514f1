"""Shared HTTP client pool for arbitrary image downloads.

Hey future me - MusicBrainz, CAA and Sheets each own a base_url-bound client. Image downloads
hit ANY host the user pastes (CAA redirects to archive.org, Discogs, random blogs), so they go
through this one shared pool instead of creating a fresh AsyncClient per download.

Usage:
    client = await HttpClientPool.get_client()
    response = await client.get(url, timeout=10.0)

Don't forget HttpClientPool.close() at app shutdown (see lifecycle.py)!
"""

import asyncio
import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Singleton HTTP client pool for connection reuse."""

    # Hey future me, these are CLASS VARIABLES (shared across all calls)!
    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    DEFAULT_TIMEOUT: ClassVar[float] = 10.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 10
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 20
    USER_AGENT: ClassVar[str] = "DiscoVinylApp/1.0"

    @classmethod
    async def _ensure_lock(cls) -> asyncio.Lock:
        """Create the lock lazily, inside a running event loop."""
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(cls) -> httpx.AsyncClient:
        """Get the shared HTTP client instance, creating it on first use."""
        lock = await cls._ensure_lock()

        async with lock:
            if cls._client is None:
                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(cls.DEFAULT_TIMEOUT),
                    limits=httpx.Limits(
                        max_keepalive_connections=cls.DEFAULT_MAX_KEEPALIVE,
                        max_connections=cls.DEFAULT_MAX_CONNECTIONS,
                    ),
                    headers={"User-Agent": cls.USER_AGENT},
                    http2=True,
                    # CAA /front answers with a 307 to archive.org
                    follow_redirects=True,
                )
                logger.info("HTTP client pool initialized")

            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared HTTP client and release all connections."""
        lock = await cls._ensure_lock()

        async with lock:
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")
