"""Cover Art Archive probe client.

Hey future me - CAA serves the artwork for MusicBrainz releases, keyed by release MBID, no API
key. GET /release/{mbid}/front answers 307 to the image on archive.org when art exists and 404
when it doesn't. Lots of releases have no art at all, so a front URL is just a guess until a
HEAD probe confirms it.

Nothing is downloaded here. The confirmed URL goes to the browser, and ArtworkService fetches
it only if the user picks that cover.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# 2xx, or a redirect to wherever the image actually lives
_PRESENT = frozenset({200, 301, 302, 307, 308})


class CoverArtArchiveClient:
    """Build front-cover URLs and check whether they exist."""

    API_BASE_URL = "https://coverartarchive.org"
    PROBE_TIMEOUT = 5.0

    def __init__(self, user_agent: str = "DiscoVinylApp/1.0") -> None:
        self.user_agent = user_agent
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.API_BASE_URL,
                headers={"User-Agent": self.user_agent},
                timeout=self.PROBE_TIMEOUT,
                follow_redirects=False,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _front_path(release_mbid: str) -> str:
        return f"/release/{release_mbid}/front"

    def front_cover_url(self, release_mbid: str) -> str:
        """Absolute front cover URL (not checked)."""
        return self.API_BASE_URL + self._front_path(release_mbid)

    # Yo, the redirect itself proves the image exists, so we never follow it. A timeout, DNS
    # failure or 5xx only means "no art for this one" - the caller probes a whole batch with
    # gather() and the other candidates must still come through.
    async def has_front_cover(self, release_mbid: str) -> bool:
        """HEAD-probe the front cover. False on 404 and on any error."""
        try:
            client = await self._get_client()
            response = await client.head(self._front_path(release_mbid))
        except httpx.HTTPError as e:
            logger.debug("CAA probe for %s failed: %s", release_mbid, e)
            return False
        return response.status_code in _PRESENT

    async def __aenter__(self) -> "CoverArtArchiveClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
