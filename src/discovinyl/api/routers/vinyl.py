"""Catalog entry endpoints.

Reads are gated by get_reader (token required unless ALLOW_PUBLIC_READ), writes always need a
token. Paging params are taken as raw strings and clamped by QueryFilter: page=0 or limit=500
returns a clamped page, never a 400.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status

from discovinyl.api.dependencies import (
    get_catalog_service,
    get_current_user,
    get_reader,
)
from discovinyl.api.responses import ok
from discovinyl.api.schemas import VinylRecordCreate, VinylRecordUpdate
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.domain.entities import UserIdentity
from discovinyl.domain.value_objects import QueryFilter, SortField, SortOrder

logger = logging.getLogger(__name__)

router = APIRouter()


def _sort_field(value: str | None) -> SortField | None:
    if not value:
        return None
    try:
        return SortField(value)
    except ValueError:
        logger.debug("Ignoring unknown sortBy %r", value)
        return None


def _sort_order(value: str | None) -> SortOrder:
    try:
        return SortOrder((value or SortOrder.ASC.value).lower())
    except ValueError:
        return SortOrder.ASC


@router.get("")
async def list_records(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    artist: str | None = Query(None),
    genre: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    owner: str | None = Query(None),
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Filtered, sorted, paginated list of records."""
    query = QueryFilter(
        page=page,  # type: ignore[arg-type]
        limit=limit,  # type: ignore[arg-type]
        artist=artist or None,
        genre=genre or None,
        owner=owner or None,
        status=status_filter or None,
        search=search or None,
        sort_by=_sort_field(sort_by),
        sort_order=_sort_order(sort_order),
    )
    result = await catalog.list_records(query)
    return ok(
        {
            "records": [entry.to_dict() for entry in result.records],
            "pagination": result.pagination(),
        }
    )


# Listen future me, /stats MUST be declared before /{record_id} or "stats" gets treated as an id
# and comes back as a 404 "Vinyl record not found".
@router.get("/stats")
async def get_stats(
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Aggregate counts and prices."""
    return ok(await catalog.get_stats())


# Hey future me, ":path" because the server hands us the path already percent-decoded once:
# "AC%2FDC-Back%20in%20Black-1980" arrives as "AC/DC-Back in Black-1980" and a plain segment
# converter would never match it. record_id is used as-is from here on, never unquoted again.
@router.get("/{record_id:path}")
async def get_record(
    record_id: str,
    _reader: UserIdentity | None = Depends(get_reader),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """One record by derived id (artist-album-year)."""
    entry = await catalog.get_record(record_id)
    return ok(entry.to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_record(
    body: VinylRecordCreate,
    user: UserIdentity = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Append a new record."""
    entry = await catalog.create_record(body.entry_fields(), cover_art_url=body.cover_art_url)
    logger.info("Record %s created by %s", entry.id, user.email)
    return ok(entry.to_dict())


# Hey future me - the response carries the id derived from the MERGED fields. If the client
# changed artist/album/year the old id is gone and the front end must switch to the new one.
@router.put("/{record_id:path}")
async def update_record(
    record_id: str,
    body: VinylRecordUpdate,
    user: UserIdentity = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Merge the sent fields onto an existing record."""
    entry = await catalog.update_record(
        record_id, body.entry_fields(), cover_art_url=body.cover_art_url
    )
    logger.info("Record %s updated by %s", entry.id, user.email)
    return ok(entry.to_dict())


@router.delete("/{record_id:path}")
async def delete_record(
    record_id: str,
    user: UserIdentity = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    """Remove a record's row from the sheet."""
    await catalog.delete_record(record_id)
    logger.info("Record %s deleted by %s", record_id, user.email)
    return ok({"message": "Record deleted successfully"})
