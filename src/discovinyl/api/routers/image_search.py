"""Cover image search and download endpoints used by the add/edit record forms."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from discovinyl.api.dependencies import (
    get_artwork_service,
    get_current_user,
    get_enrichment_service,
)
from discovinyl.api.responses import ok
from discovinyl.api.schemas import ImageDownloadRequest
from discovinyl.application.services.artwork_service import ArtworkService
from discovinyl.application.services.enrichment_service import EnrichmentService
from discovinyl.domain.entities import UserIdentity

router = APIRouter()

DEFAULT_COVER_LIMIT = 10
MAX_COVER_LIMIT = 50


@router.get("/search")
async def search_covers(
    query: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_COVER_LIMIT, ge=1, le=MAX_COVER_LIMIT),
    _user: UserIdentity = Depends(get_current_user),
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> dict[str, Any]:
    """Cover candidates with confirmed Cover Art Archive images."""
    return ok({"results": await enrichment.search_covers(query, limit)})


# Yo, size is the length of the returned data URL (characters), not the image bytes. The form
# uses it to warn before stuffing something huge into a spreadsheet cell.
@router.post("/download")
async def download_cover(
    body: ImageDownloadRequest,
    _user: UserIdentity = Depends(get_current_user),
    artwork: ArtworkService = Depends(get_artwork_service),
) -> dict[str, Any]:
    """Fetch an image and return it as an optimised base64 data URL."""
    data_url = await artwork.fetch_thumbnail(body.image_url)
    return ok({"base64Data": data_url, "size": len(data_url)})
