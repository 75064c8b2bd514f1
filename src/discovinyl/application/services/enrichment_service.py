"""Enrichment Service - album metadata and cover art candidates from MusicBrainz + CAA.

Hey future me - this powers the "search metadata" and "find cover" modals in the record form.
Everything here is BEST-EFFORT:
- a failing MusicBrainz search returns an empty list (logged), never an error response
- every candidate gets a cover art probe; a probe that blows up just means "no art" for that
  one candidate, the rest of the batch carries on
- only candidates whose probe CONFIRMED art get coverArtUrl/hasCoverArt=true. We never hand
  the UI an image URL that 404s.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any

from discovinyl.domain.entities import RecordFormat
from discovinyl.infrastructure.integrations.coverartarchive_client import (
    CoverArtArchiveClient,
)
from discovinyl.infrastructure.integrations.musicbrainz_client import MusicBrainzClient

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"

# CAA /front serves whatever size was uploaded; the UI renders candidates in a 300px grid.
COVER_DISPLAY_SIZE = 300

_YEAR_PREFIX = re.compile(r"^(\d{4})")


@dataclass
class AlbumMetadata:
    """Normalized view of one MusicBrainz release."""

    release_id: str
    artist_name: str
    album_name: str
    year: int | None = None
    label: str | None = None
    genre: str | None = None
    format: str = RecordFormat.LP.value
    cover_art_url: str | None = None
    has_cover_art: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "releaseId": self.release_id,
            "artistName": self.artist_name,
            "albumName": self.album_name,
            "year": self.year,
            "label": self.label,
            "genre": self.genre,
            "format": self.format,
            "coverArtUrl": self.cover_art_url,
            "hasCoverArt": self.has_cover_art,
        }


def guess_format(primary_type: str | None) -> str:
    """Map a release-group primary type to a record format."""
    kind = (primary_type or "").lower()
    if kind == "single":
        return RecordFormat.SINGLE_7.value
    if kind == "ep":
        return RecordFormat.EP.value
    return RecordFormat.LP.value


def _top_genre(release: dict[str, Any]) -> str | None:
    genres = release.get("genres") or release.get("release-group", {}).get("genres") or []
    if not genres:
        return None
    best = max(genres, key=lambda g: g.get("count", 0))
    name = best.get("name")
    return name.title() if name else None


def parse_release(release: dict[str, Any]) -> AlbumMetadata:
    """Turn raw MusicBrainz release JSON into AlbumMetadata (cover art not probed yet)."""
    credits = release.get("artist-credit") or []
    first_credit = credits[0] if credits else {}
    artist = (
        first_credit.get("name")
        or first_credit.get("artist", {}).get("name")
        or UNKNOWN_ARTIST
    )

    release_group = release.get("release-group") or {}
    album = release.get("title") or release_group.get("title") or UNKNOWN_ALBUM

    year = None
    match = _YEAR_PREFIX.match(release.get("date") or "")
    if match:
        year = int(match.group(1))

    label = None
    label_info = release.get("label-info") or []
    if label_info:
        label = (label_info[0].get("label") or {}).get("name")

    return AlbumMetadata(
        release_id=release.get("id", ""),
        artist_name=artist,
        album_name=album,
        year=year,
        label=label,
        genre=_top_genre(release),
        format=guess_format(release_group.get("primary-type")),
    )


class EnrichmentService:
    """Search MusicBrainz and annotate results with confirmed cover art."""

    def __init__(
        self, musicbrainz: MusicBrainzClient, cover_art: CoverArtArchiveClient
    ) -> None:
        self.musicbrainz = musicbrainz
        self.cover_art = cover_art

    async def _annotate(self, metadata: AlbumMetadata) -> AlbumMetadata:
        if metadata.release_id and await self.cover_art.has_front_cover(
            metadata.release_id
        ):
            metadata.cover_art_url = self.cover_art.front_cover_url(metadata.release_id)
            metadata.has_cover_art = True
        return metadata

    async def _annotate_all(self, releases: list[dict[str, Any]]) -> list[AlbumMetadata]:
        parsed = []
        for release in releases:
            try:
                parsed.append(parse_release(release))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping unparseable release: %s", e)

        outcomes = await asyncio.gather(
            *(self._annotate(item) for item in parsed), return_exceptions=True
        )
        results = []
        for item, outcome in zip(parsed, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.debug("Cover art probe failed for %s: %s", item.release_id, outcome)
                results.append(item)
            else:
                results.append(outcome)
        return results

    async def _search(self, label: str, coro: Any) -> list[AlbumMetadata]:
        try:
            releases = await coro
        except Exception as e:
            logger.warning("MusicBrainz %s search failed: %s", label, e)
            return []
        return await self._annotate_all(releases)

    async def search(self, query: str, limit: int = 5) -> list[AlbumMetadata]:
        """Free-text release search."""
        return await self._search(
            "free-text", self.musicbrainz.search_releases(query, limit)
        )

    async def search_by_artist(self, artist: str, limit: int = 5) -> list[AlbumMetadata]:
        return await self._search("artist", self.musicbrainz.search_by_artist(artist, limit))

    async def search_by_album(self, album: str, limit: int = 5) -> list[AlbumMetadata]:
        return await self._search("album", self.musicbrainz.search_by_album(album, limit))

    async def search_by_artist_and_album(
        self, artist: str, album: str, limit: int = 5
    ) -> list[AlbumMetadata]:
        return await self._search(
            "artist+album",
            self.musicbrainz.search_by_artist_and_album(artist, album, limit),
        )

    async def get_release(self, release_id: str) -> AlbumMetadata | None:
        """Detailed metadata for one release, None if unknown or MusicBrainz fails."""
        try:
            release = await self.musicbrainz.lookup_release(release_id)
        except Exception as e:
            logger.warning("MusicBrainz lookup of %s failed: %s", release_id, e)
            return None
        if release is None:
            return None
        results = await self._annotate_all([release])
        return results[0] if results else None

    # Yo, the cover search is deliberately fuzzy: users type "kraftwerk autobahn" or just
    # "kraftwerk". Full query first; if MusicBrainz finds nothing with art, retry with the
    # first word as an artist guess. We over-fetch (limit * 2) because a good chunk of
    # releases have no CAA art and get filtered out.
    async def search_covers(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """Cover image candidates with CONFIRMED art only."""
        results = await self._cover_candidates(query, limit)

        words = query.split()
        if not results and len(words) > 1:
            logger.info("No covers for %r, retrying with artist guess %r", query, words[0])
            results = await self._cover_candidates(words[0], limit)

        return results[:limit]

    async def _cover_candidates(self, query: str, limit: int) -> list[dict[str, Any]]:
        found = await self.search(query, limit * 2)
        return [
            {
                "url": item.cover_art_url,
                "title": f"{item.album_name} by {item.artist_name}",
                "width": COVER_DISPLAY_SIZE,
                "height": COVER_DISPLAY_SIZE,
            }
            for item in found
            if item.has_cover_art
        ][:limit]
