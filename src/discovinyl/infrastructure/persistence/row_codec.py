"""Conversion between spreadsheet rows and CatalogEntry.

Hey future me - columns are POSITIONAL. There's no header lookup; the index IS the meaning.
Row 1 of the sheet is a header and is always skipped by callers (see HEADER_ROWS).

    A artist | B album | C year | D format | E genre | F price | G owner | H status |
    I notes  | J createdAt | K updatedAt | L coverArt

coverArt sits LAST on purpose: sheets created before cover art existed only have A:K, and
decoding them still works (missing trailing cells fall back to defaults).
"""

import re
from typing import Any

from discovinyl.domain.entities import (
    CatalogEntry,
    RecordFormat,
    RecordStatus,
    utc_now_iso,
)

HEADER_ROWS = 1
FIRST_COLUMN = "A"
LAST_COLUMN = "L"

COLUMNS = (
    "artistName",
    "albumName",
    "year",
    "format",
    "genre",
    "price",
    "owner",
    "status",
    "notes",
    "createdAt",
    "updatedAt",
    "coverArt",
)

_PRICE_NOISE = re.compile(r"[$€£¥,\s]")


def _cell(cells: list[Any], index: int) -> Any:
    if index < len(cells):
        value = cells[index]
        if value is not None and value != "":
            return value
    return None


def parse_price(raw: Any) -> float:
    """Normalize a price cell to a two-decimal float.

    Currency symbols, thousands separators and whitespace are stripped.
    Anything unparseable becomes 0.0.
    """
    if raw is None or raw == "":
        return 0.0
    if isinstance(raw, int | float):
        return round(float(raw), 2)
    cleaned = _PRICE_NOISE.sub("", str(raw))
    try:
        return round(float(cleaned), 2)
    except ValueError:
        return 0.0


def parse_year(raw: Any) -> int:
    """Parse a year cell; empty or non-numeric cells become 0."""
    if raw is None:
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        try:
            return int(float(str(raw).strip()))
        except ValueError:
            return 0


def decode_row(cells: list[Any]) -> CatalogEntry:
    """Decode one spreadsheet row into a CatalogEntry, filling defaults for missing cells."""
    now = utc_now_iso()
    return CatalogEntry(
        artist_name=str(_cell(cells, 0) or ""),
        album_name=str(_cell(cells, 1) or ""),
        year=parse_year(_cell(cells, 2)),
        format=RecordFormat.from_string(_cell(cells, 3)),
        genre=str(_cell(cells, 4) or ""),
        price=parse_price(_cell(cells, 5)),
        owner=str(_cell(cells, 6) or ""),
        status=RecordStatus.from_string(_cell(cells, 7)),
        notes=str(_cell(cells, 8) or ""),
        created_at=str(_cell(cells, 9) or now),
        updated_at=str(_cell(cells, 10) or now),
        cover_art=_cell(cells, 11),
    )


def encode_row(entry: CatalogEntry) -> list[Any]:
    """Encode a CatalogEntry into the positional cell list written to the sheet."""
    return [
        entry.artist_name,
        entry.album_name,
        entry.year,
        entry.format.value,
        entry.genre,
        round(entry.price, 2),
        entry.owner,
        entry.status.value,
        entry.notes or "",
        entry.created_at,
        entry.updated_at,
        entry.cover_art or "",
    ]


def decode_rows(rows: list[list[Any]]) -> list[CatalogEntry]:
    """Decode all data rows, skipping the header."""
    return [decode_row(row) for row in rows[HEADER_ROWS:]]
