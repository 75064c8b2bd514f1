"""MusicBrainz HTTP client implementation with rate limiting."""

import asyncio
import logging
from typing import Any, cast

import httpx

from discovinyl.config.settings import MusicBrainzSettings

logger = logging.getLogger(__name__)


class MusicBrainzClient:
    """HTTP client for MusicBrainz release search with rate limiting."""

    API_BASE_URL = "https://musicbrainz.org/ws/2"
    RATE_LIMIT_DELAY = 1.0  # 1 request per second as per MusicBrainz guidelines
    TIMEOUT = 10.0

    # Hey future me, MusicBrainz is STRICT about rate limiting - 1 req/sec, NO EXCEPTIONS!
    # That's why we track _last_request_time and have a lock. The metadata search modal fires
    # a request per keystroke pause and the cover search can fire two in a row, so the lock
    # is what keeps us from getting IP-banned. Don't remove it.
    def __init__(self, settings: MusicBrainzSettings) -> None:
        """
        Initialize MusicBrainz client.

        Args:
            settings: MusicBrainz configuration settings
        """
        self.settings = settings
        self._client: httpx.AsyncClient | None = None
        self._last_request_time: float = 0.0
        self._rate_limit_lock = asyncio.Lock()

    # Listen future me, MusicBrainz REQUIRES a User-Agent with app name and version, contact is
    # strongly recommended. Format: "AppName/Version ( contact )". Missing UA = 403.
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            user_agent = f"{self.settings.app_name}/{self.settings.app_version}"
            if self.settings.contact:
                user_agent = f"{user_agent} ( {self.settings.contact} )"

            self._client = httpx.AsyncClient(
                base_url=self.API_BASE_URL,
                headers={
                    "User-Agent": user_agent,
                    "Accept": "application/json",
                },
                timeout=self.TIMEOUT,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Yo future me, _last_request_time is updated AFTER the request completes, not before. With
    # slow responses that still keeps us at <= 1 req/sec.
    async def _rate_limited_request(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """
        Make a rate-limited request to MusicBrainz API.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            HTTP response

        Raises:
            httpx.HTTPError: If the request fails
        """
        async with self._rate_limit_lock:
            current_time = asyncio.get_event_loop().time()
            time_since_last = current_time - self._last_request_time

            if time_since_last < self.RATE_LIMIT_DELAY:
                await asyncio.sleep(self.RATE_LIMIT_DELAY - time_since_last)

            client = await self._get_client()
            try:
                response = await client.request(method, url, **kwargs)
            finally:
                self._last_request_time = asyncio.get_event_loop().time()

            return response

    # Hey future me, MusicBrainz search uses Lucene query syntax. A free-text query like
    # "Kraftwerk Autobahn" is matched against all indexed release fields, which is exactly what
    # the search box wants. Field-scoped helpers below quote the value so "The Beatles" stays
    # one phrase instead of "the OR beatles".
    async def search_releases(self, query: str, limit: int = 5) -> list[dict[str, Any]]:
        """
        Search for releases with a Lucene query.

        Args:
            query: Lucene query (free text or field-scoped)
            limit: Maximum number of results

        Returns:
            List of release matches (raw MusicBrainz JSON)

        Raises:
            httpx.HTTPError: If the request fails
        """
        response = await self._rate_limited_request(
            "GET",
            "/release",
            params={
                "query": query,
                "fmt": "json",
                "limit": limit,
            },
        )
        response.raise_for_status()
        data = response.json()

        return cast(list[dict[str, Any]], data.get("releases", []))

    async def search_by_artist(
        self, artist: str, limit: int = 5
    ) -> list[dict[str, Any]]:
        """Search releases credited to an artist."""
        return await self.search_releases(f'artist:"{_escape(artist)}"', limit)

    async def search_by_album(self, album: str, limit: int = 5) -> list[dict[str, Any]]:
        """Search releases by title."""
        return await self.search_releases(f'release:"{_escape(album)}"', limit)

    async def search_by_artist_and_album(
        self, artist: str, album: str, limit: int = 5
    ) -> list[dict[str, Any]]:
        """Search releases matching both artist and title."""
        query_parts = []
        if artist:
            query_parts.append(f'artist:"{_escape(artist)}"')
        if album:
            query_parts.append(f'release:"{_escape(album)}"')
        return await self.search_releases(" AND ".join(query_parts), limit)

    # Yo, 404 here means the release id doesn't exist or was merged - that's not an error!
    async def lookup_release(self, release_id: str) -> dict[str, Any] | None:
        """
        Lookup a release by MusicBrainz ID.

        Args:
            release_id: MusicBrainz release ID

        Returns:
            Release information or None if not found

        Raises:
            httpx.HTTPError: If the request fails
        """
        try:
            response = await self._rate_limited_request(
                "GET",
                f"/release/{release_id}",
                params={
                    "fmt": "json",
                    "inc": "labels+genres+release-groups+artist-credits",
                },
            )
            response.raise_for_status()
            return cast(dict[str, Any], response.json())
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 404):
                return None
            raise

    async def __aenter__(self) -> "MusicBrainzClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


def _escape(value: str) -> str:
    # Quotes inside a quoted Lucene phrase end the phrase early.
    return value.replace("\\", "\\\\").replace('"', '\\"')
