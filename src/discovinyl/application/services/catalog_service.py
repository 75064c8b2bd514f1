"""Catalog CRUD on top of the spreadsheet.

Hey future me - there is no id column and no row lock, so read this before changing anything:

- Reads (list/get/stats/unique values) go through SheetRowCache and may be up to CACHE_TTL old.
- Writes NEVER trust the cache for row positions. Update and delete do a FRESH read, find the
  row by re-deriving every row's id, and write to that row number. Someone else inserting or
  deleting a row between our read and our write shifts the rows under us - that race is known
  and not solved here (it needs a stable id column or a real database).
- Every successful write invalidates the cache so the next list shows the change.
- Row numbers: rows[i] of a read starting at the top of the sheet is spreadsheet row i + 1
  (header is row 1). A named-table locator that doesn't start at A1 would break that.
"""

import logging
from collections import Counter
from typing import Any

import httpx

from discovinyl.application.cache.row_cache import SheetRowCache
from discovinyl.application.services.artwork_service import ArtworkService, is_data_url
from discovinyl.application.services.collection_query import QueryResult, query_records
from discovinyl.domain.entities import (
    CatalogEntry,
    RecordFormat,
    RecordStatus,
    utc_now_iso,
)
from discovinyl.domain.exceptions import (
    DataSourceError,
    EntityNotFoundException,
    ExternalServiceError,
    ValidationException,
)
from discovinyl.domain.value_objects import QueryFilter
from discovinyl.infrastructure.integrations.google_sheets_client import (
    GoogleSheetsClient,
)
from discovinyl.infrastructure.persistence.range_resolver import row_range, sheet_title
from discovinyl.infrastructure.persistence.row_codec import (
    HEADER_ROWS,
    decode_row,
    decode_rows,
    encode_row,
)

logger = logging.getLogger(__name__)

ENTITY_NAME = "Vinyl record"

EDITABLE_FIELDS = frozenset(
    {
        "artist_name",
        "album_name",
        "year",
        "format",
        "genre",
        "price",
        "owner",
        "status",
        "notes",
        "cover_art",
    }
)

UNIQUE_VALUE_FIELDS = {
    "artistName": "artist_name",
    "genre": "genre",
    "owner": "owner",
}


def normalize_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Coerce caller-supplied snake_case fields into CatalogEntry field types.

    Unknown format falls back to the default format; unknown status is rejected.
    Keys outside EDITABLE_FIELDS are dropped.

    Raises:
        ValidationException: On an unknown status
    """
    fields: dict[str, Any] = {}
    for key, value in data.items():
        if key not in EDITABLE_FIELDS:
            continue
        if key == "format":
            fields[key] = RecordFormat.from_string(value)
        elif key == "status":
            try:
                fields[key] = RecordStatus(value)
            except ValueError as e:
                raise ValidationException(
                    "Invalid input data",
                    details=[{"field": "status", "message": f"Unknown status {value!r}"}],
                ) from e
        elif key == "price":
            fields[key] = round(float(value or 0), 2)
        elif key == "year":
            fields[key] = int(value or 0)
        elif key in ("artist_name", "album_name", "genre", "owner", "notes"):
            fields[key] = (value or "").strip()
        else:
            fields[key] = value
    return fields


def _require_identity(fields: dict[str, Any], partial: bool) -> None:
    details = []
    for key, api_name in (("artist_name", "artistName"), ("album_name", "albumName")):
        if partial and key not in fields:
            continue
        if not fields.get(key):
            details.append({"field": api_name, "message": f"{api_name} is required"})
    if details:
        raise ValidationException("Invalid input data", details=details)


class CatalogService:
    """Create, read, update and delete catalog entries."""

    def __init__(
        self,
        sheets: GoogleSheetsClient,
        row_cache: SheetRowCache,
        artwork: ArtworkService | None = None,
    ) -> None:
        self.sheets = sheets
        self.row_cache = row_cache
        self.artwork = artwork or ArtworkService()

    async def _load_entries(self) -> list[CatalogEntry]:
        _, rows = await self.row_cache.get_rows()
        return decode_rows(rows)

    async def list_records(self, query: QueryFilter) -> QueryResult:
        """Filtered, sorted, paginated view of the collection."""
        entries = await self._load_entries()
        return query_records(entries, query)

    async def get_record(self, record_id: str) -> CatalogEntry:
        """Find an entry by its derived id (O(n) scan).

        record_id is compared exactly as given; the HTTP layer has already percent-decoded it.

        Raises:
            EntityNotFoundException: If no row derives to this id
        """
        for entry in await self._load_entries():
            if entry.id == record_id:
                return entry
        raise EntityNotFoundException(ENTITY_NAME, record_id)

    async def create_record(
        self, data: dict[str, Any], cover_art_url: str | None = None
    ) -> CatalogEntry:
        """Validate and append a new entry.

        Raises:
            ValidationException: If artist/album are missing or status is unknown
            ExternalServiceError: If the append itself fails (also when the sheet is unreachable)
        """
        fields = normalize_fields(data)
        _require_identity(fields, partial=False)

        fields["cover_art"] = await self._prepare_cover_art(
            fields.get("cover_art"), cover_art_url, current=None
        )

        now = utc_now_iso()
        entry = CatalogEntry(**fields, created_at=now, updated_at=now)

        try:
            locator, _ = await self.row_cache.read_fresh()
        except DataSourceError:
            # header-only sheet: discovery finds "no data", append to the primary location
            locator = self.row_cache.resolver.candidates[0]
            logger.info("No data rows found, appending first record to %s", locator)
        try:
            await self.sheets.append_values(locator, [encode_row(entry)])
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to create record: {e}") from e

        await self.row_cache.invalidate()
        logger.info("Created record %s", entry.id)
        return entry

    async def _locate(self, record_id: str) -> tuple[str, int, CatalogEntry]:
        # Fresh read on purpose: the cached rows may be stale and row positions with them.
        locator, rows = await self.row_cache.read_fresh()
        for index in range(HEADER_ROWS, len(rows)):
            entry = decode_row(rows[index])
            if entry.id == record_id:
                return locator, index, entry
        raise EntityNotFoundException(ENTITY_NAME, record_id)

    async def update_record(
        self,
        record_id: str,
        changes: dict[str, Any],
        cover_art_url: str | None = None,
    ) -> CatalogEntry:
        """Merge changes onto an existing entry and rewrite its row in place.

        The returned entry's id is derived from the MERGED fields, so an update that touches
        artist, album or year returns the new id.

        Raises:
            EntityNotFoundException: If no row derives to record_id
            ValidationException: If the merged entry would lose artist/album
        """
        fields = normalize_fields(changes)
        _require_identity(fields, partial=True)

        locator, index, existing = await self._locate(record_id)

        if "cover_art" in fields or cover_art_url:
            fields["cover_art"] = await self._prepare_cover_art(
                fields.get("cover_art"), cover_art_url, current=existing.cover_art
            )

        updated = existing.merged(fields)
        updated.created_at = existing.created_at
        updated.updated_at = utc_now_iso()

        target = row_range(locator, index + 1)
        try:
            await self.sheets.update_values(target, [encode_row(updated)])
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to update record: {e}") from e

        await self.row_cache.invalidate()
        if updated.id != record_id:
            logger.info("Record %s renamed to %s", record_id, updated.id)
        else:
            logger.info("Updated record %s", record_id)
        return updated

    async def delete_record(self, record_id: str) -> None:
        """Structurally delete an entry's row.

        Raises:
            EntityNotFoundException: If no row derives to record_id
        """
        locator, index, _ = await self._locate(record_id)

        try:
            await self.sheets.delete_row(sheet_title(locator), index)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to delete record: {e}") from e

        await self.row_cache.invalidate()
        logger.info("Deleted record %s", record_id)

    async def get_stats(self) -> dict[str, Any]:
        """Aggregate counts and prices for the stats dashboard."""
        entries = await self._load_entries()
        total_records = len(entries)
        total_value = sum(entry.price for entry in entries)

        most_expensive: CatalogEntry | None = None
        for entry in entries:
            # strictly greater: first entry wins on equal price, free records never win
            if entry.price > (most_expensive.price if most_expensive else 0):
                most_expensive = entry

        return {
            "totalRecords": total_records,
            "totalValue": round(total_value, 2),
            "byStatus": dict(Counter(entry.status.value for entry in entries)),
            "byFormat": dict(Counter(entry.format.value for entry in entries)),
            "byGenre": dict(Counter(entry.genre for entry in entries)),
            "averagePrice": round(total_value / total_records, 2) if total_records else 0,
            "mostExpensive": {
                "id": most_expensive.id if most_expensive else "",
                "artistName": most_expensive.artist_name if most_expensive else "",
                "albumName": most_expensive.album_name if most_expensive else "",
                "price": most_expensive.price if most_expensive else 0,
            },
        }

    async def get_unique_values(self, field: str) -> list[str]:
        """Sorted, de-duplicated, non-empty values of artistName, genre or owner.

        Raises:
            ValidationException: For any other field name
        """
        attribute = UNIQUE_VALUE_FIELDS.get(field)
        if attribute is None:
            raise ValidationException(
                "Invalid input data",
                details=[{"field": "field", "message": f"Unsupported field {field!r}"}],
            )
        entries = await self._load_entries()
        return sorted({getattr(e, attribute) for e in entries if getattr(e, attribute)})

    # Hey future me, cover art is best-effort: a dead URL or a broken image must NEVER fail the
    # create/update itself. We log and keep whatever cover the record had before.
    async def _prepare_cover_art(
        self, cover_art: str | None, cover_art_url: str | None, current: str | None
    ) -> str | None:
        if cover_art_url:
            try:
                return await self.artwork.fetch_thumbnail(cover_art_url)
            except ExternalServiceError as e:
                logger.warning("Cover art download failed, keeping existing: %s", e)
                return current
        if cover_art == "":
            return None
        if cover_art and is_data_url(cover_art):
            return await self.artwork.optimize_data_url(cover_art)
        return cover_art if cover_art is not None else current
