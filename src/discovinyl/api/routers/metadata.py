"""Metadata endpoints: filter dropdown values, MusicBrainz enrichment, cache admin."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from discovinyl.api.dependencies import (
    get_catalog_service,
    get_current_user,
    get_enrichment_service,
    get_reader,
    get_row_cache,
)
from discovinyl.api.responses import ok
from discovinyl.application.cache.row_cache import SheetRowCache
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.application.services.enrichment_service import (
    AlbumMetadata,
    EnrichmentService,
)
from discovinyl.domain.entities import UserIdentity
from discovinyl.domain.exceptions import EntityNotFoundException

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_SEARCH_LIMIT = 5
MAX_SEARCH_LIMIT = 25


def _results(items: list[AlbumMetadata]) -> dict[str, Any]:
    return ok({"results": [item.to_dict() for item in items], "total": len(items)})


# =============================================================================
# FILTER VALUES (from the sheet)
# =============================================================================


@router.get("/artists")
async def list_artists(
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Distinct artist names."""
    return ok(await catalog.get_unique_values("artistName"))


@router.get("/genres")
async def list_genres(
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Distinct genres."""
    return ok(await catalog.get_unique_values("genre"))


@router.get("/owners")
async def list_owners(
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Distinct owners."""
    return ok(await catalog.get_unique_values("owner"))


# =============================================================================
# MUSICBRAINZ ENRICHMENT
# =============================================================================
# Hey future me - these never 500 because MusicBrainz is down. The service swallows upstream
# errors and we return an empty result list; the add-record form still works without it.


@router.get("/search")
async def search_releases(
    query: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Free-text release search."""
    return _results(await enrichment.search(query, limit))


@router.get("/artist/{artist}")
async def search_by_artist(
    artist: str,
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Releases credited to an artist."""
    return _results(await enrichment.search_by_artist(artist, limit))


@router.get("/album")
async def search_by_album(
    album: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Releases by title."""
    return _results(await enrichment.search_by_album(album, limit))


@router.get("/artist-album")
async def search_by_artist_and_album(
    artist: str = Query(..., min_length=1),
    album: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Releases matching both artist and title."""
    return _results(await enrichment.search_by_artist_and_album(artist, album, limit))


@router.get("/release/{release_id}")
async def get_release(
    release_id: str,
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Full metadata for one MusicBrainz release."""
    release = await enrichment.get_release(release_id)
    if release is None:
        raise EntityNotFoundException("Release", release_id)
    return ok(release.to_dict())


# =============================================================================
# CACHE ADMIN
# =============================================================================


@router.post("/cache/invalidate")
async def invalidate_cache(
    user: UserIdentity = Depends(get_current_user),
    row_cache: SheetRowCache = Depends(get_row_cache),
) -> dict[str, Any]:
    """Drop all cached rows; the next read goes to the sheet."""
    await row_cache.invalidate()
    logger.info("Cache invalidated by %s", user.email)
    return ok({"message": "Cache invalidated successfully"})


@router.get("/cache/status")
async def cache_status(
    _user: UserIdentity = Depends(get_current_user),
    row_cache: SheetRowCache = Depends(get_row_cache),
) -> dict[str, Any]:
    """Cache configuration, entries and hit/miss counters."""
    return ok(row_cache.status())
