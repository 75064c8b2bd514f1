"""Request-scoped collection query parameters."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class SortField(str, Enum):
    """Fields the collection can be sorted by (API names)."""

    ARTIST_NAME = "artistName"
    ALBUM_NAME = "albumName"
    YEAR = "year"
    PRICE = "price"
    GENRE = "genre"
    OWNER = "owner"
    CREATED_AT = "createdAt"

    @property
    def attribute(self) -> str:
        return {
            SortField.ARTIST_NAME: "artist_name",
            SortField.ALBUM_NAME: "album_name",
            SortField.YEAR: "year",
            SortField.PRICE: "price",
            SortField.GENRE: "genre",
            SortField.OWNER: "owner",
            SortField.CREATED_AT: "created_at",
        }[self]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def clamp_page(value: Any) -> int:
    """Clamp a page number to >= 1."""
    return max(1, _to_int(value, DEFAULT_PAGE))


def clamp_limit(value: Any) -> int:
    """Clamp a page size into [1, MAX_LIMIT]."""
    return min(MAX_LIMIT, max(1, _to_int(value, DEFAULT_LIMIT)))


# Yo, QueryFilter never rejects bad paging - page=0, limit=500, limit="abc" all get clamped in
# __post_init__. The UI sends whatever the URL bar has and we'd rather return SOMETHING.
@dataclass
class QueryFilter:
    """Filter, sort and paging parameters for a collection query."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    artist: str | None = None
    genre: str | None = None
    owner: str | None = None
    status: str | None = None
    search: str | None = None
    sort_by: SortField | None = None
    sort_order: SortOrder = SortOrder.ASC

    def __post_init__(self) -> None:
        self.page = clamp_page(self.page)
        self.limit = clamp_limit(self.limit)
        if isinstance(self.sort_by, str) and not isinstance(self.sort_by, SortField):
            self.sort_by = SortField(self.sort_by)
        if isinstance(self.sort_order, str) and not isinstance(self.sort_order, SortOrder):
            self.sort_order = SortOrder(self.sort_order.lower())
