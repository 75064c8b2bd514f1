"""Spreadsheet-backed persistence: row codec and range discovery."""

from discovinyl.infrastructure.persistence.range_resolver import (
    RangeError,
    RangeFound,
    RangeNotFound,
    ResolveResult,
    SheetRangeResolver,
    build_candidates,
    row_range,
    sheet_title,
)
from discovinyl.infrastructure.persistence.row_codec import (
    COLUMNS,
    HEADER_ROWS,
    decode_row,
    decode_rows,
    encode_row,
    parse_price,
)

__all__ = [
    "COLUMNS",
    "HEADER_ROWS",
    "RangeError",
    "RangeFound",
    "RangeNotFound",
    "ResolveResult",
    "SheetRangeResolver",
    "build_candidates",
    "decode_row",
    "decode_rows",
    "encode_row",
    "parse_price",
    "row_range",
    "sheet_title",
]
