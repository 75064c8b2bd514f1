"""Filter, sort and paginate the in-memory collection.

Hey future me - the spreadsheet can't query, so every list request loads ALL rows and this
module does the rest in Python. A few thousand records is nothing; if the collection ever grows
past that, the fix is a real database, not a smarter loop here.

Rules:
- artist / genre / owner: case-insensitive SUBSTRING ("kraft" finds "Kraftwerk")
- status: EXACT match (it's an enum, "Own" must not match "Owned")
- search: case-insensitive substring of "artist album genre owner notes" joined by spaces
- everything ANDed
- sort is Python's sorted() = stable, so ties keep sheet order in both directions
"""

import math
from dataclasses import dataclass
from typing import Any

from discovinyl.domain.entities import CatalogEntry
from discovinyl.domain.value_objects import QueryFilter, SortOrder


@dataclass(frozen=True)
class QueryResult:
    """One page of matching entries plus paging totals."""

    records: list[CatalogEntry]
    page: int
    limit: int
    total: int
    total_pages: int

    def pagination(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def search_text(entry: CatalogEntry) -> str:
    """The text the free-text search runs against."""
    return " ".join(
        [entry.artist_name, entry.album_name, entry.genre, entry.owner, entry.notes or ""]
    )


def matches(entry: CatalogEntry, query: QueryFilter) -> bool:
    """True if entry passes every active filter."""
    if query.artist and not _contains(entry.artist_name, query.artist):
        return False
    if query.genre and not _contains(entry.genre, query.genre):
        return False
    if query.owner and not _contains(entry.owner, query.owner):
        return False
    if query.status and entry.status.value != query.status:
        return False
    if query.search and not _contains(search_text(entry), query.search):
        return False
    return True


def _sort_key(entry: CatalogEntry, attribute: str) -> Any:
    value = getattr(entry, attribute)
    if value is None:
        return ""
    if isinstance(value, str):
        return value.lower()
    return value


def sort_entries(
    entries: list[CatalogEntry], query: QueryFilter
) -> list[CatalogEntry]:
    """Stable sort by the requested field, or original order when no sort key is set."""
    if query.sort_by is None:
        return list(entries)
    attribute = query.sort_by.attribute
    # reverse=True keeps sorted() stable: equal keys stay in their original relative order
    return sorted(
        entries,
        key=lambda entry: _sort_key(entry, attribute),
        reverse=query.sort_order == SortOrder.DESC,
    )


def query_records(entries: list[CatalogEntry], query: QueryFilter) -> QueryResult:
    """Apply filters, sorting and pagination.

    Args:
        entries: Every decoded entry, in sheet order
        query: Filter/sort/paging parameters (already clamped)

    Returns:
        QueryResult with at most query.limit records and the pre-pagination total
    """
    filtered = [entry for entry in entries if matches(entry, query)]
    ordered = sort_entries(filtered, query)

    total = len(ordered)
    start = (query.page - 1) * query.limit
    page = ordered[start : start + query.limit]

    return QueryResult(
        records=page,
        page=query.page,
        limit=query.limit,
        total=total,
        total_pages=math.ceil(total / query.limit),
    )
