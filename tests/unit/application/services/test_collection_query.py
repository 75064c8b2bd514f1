"""Tests for filtering, sorting and paginating the collection."""

import pytest

from discovinyl.application.services.collection_query import query_records
from discovinyl.domain.entities import CatalogEntry, RecordStatus
from discovinyl.domain.value_objects import QueryFilter, SortField, SortOrder


@pytest.fixture
def entries() -> list[CatalogEntry]:
    return [
        CatalogEntry("Kraftwerk", "Autobahn", 1974, genre="Electronic", price=25.0, owner="Alice"),
        CatalogEntry("Miles Davis", "Kind of Blue", 1959, genre="Jazz", price=40.5, owner="Bob",
                     notes="first press"),
        CatalogEntry("Daft Punk", "Discovery", 2001, genre="Electronic", price=30.0, owner="Alice",
                     status=RecordStatus.WANTED),
        CatalogEntry("kraftwerk", "Radio-Activity", 1975, genre="Electronic", price=25.0,
                     owner="Carol", status=RecordStatus.LOANED),
        CatalogEntry("Can", "Tago Mago", 1971, genre="Krautrock", price=0.0, owner="Bob"),
    ]


def _names(result) -> list[str]:
    return [e.album_name for e in result.records]


class TestFilters:
    def test_artist_substring_case_insensitive(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(artist="KRAFT"))
        assert _names(result) == ["Autobahn", "Radio-Activity"]

    def test_status_is_exact(self, entries: list[CatalogEntry]) -> None:
        assert query_records(entries, QueryFilter(status="Own")).total == 0
        assert query_records(entries, QueryFilter(status="Owned")).total == 3

    def test_search_covers_notes_and_owner(self, entries: list[CatalogEntry]) -> None:
        assert _names(query_records(entries, QueryFilter(search="first PRESS"))) == ["Kind of Blue"]
        assert query_records(entries, QueryFilter(search="carol")).total == 1

    def test_filters_are_anded(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(genre="electronic", owner="alice"))
        assert _names(result) == ["Autobahn", "Discovery"]

    def test_no_match(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(artist="Beatles"))
        assert result.records == []
        assert result.total == 0
        assert result.total_pages == 0


class TestSorting:
    def test_no_sort_keeps_sheet_order(self, entries: list[CatalogEntry]) -> None:
        assert _names(query_records(entries, QueryFilter())) == [e.album_name for e in entries]

    def test_sort_year_asc(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(sort_by=SortField.YEAR))
        assert [e.year for e in result.records] == [1959, 1971, 1974, 1975, 2001]

    def test_sort_strings_ignore_case(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(sort_by=SortField.ARTIST_NAME))
        assert [e.artist_name for e in result.records] == [
            "Can",
            "Daft Punk",
            "Kraftwerk",
            "kraftwerk",
            "Miles Davis",
        ]

    def test_ties_keep_original_order_both_directions(self, entries: list[CatalogEntry]) -> None:
        asc = query_records(entries, QueryFilter(sort_by=SortField.PRICE))
        desc = query_records(
            entries, QueryFilter(sort_by=SortField.PRICE, sort_order=SortOrder.DESC)
        )
        assert _names(asc) == ["Tago Mago", "Autobahn", "Radio-Activity", "Discovery", "Kind of Blue"]
        assert _names(desc) == ["Kind of Blue", "Discovery", "Autobahn", "Radio-Activity", "Tago Mago"]


class TestPagination:
    def test_page_slice_and_totals(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(page=2, limit=2))
        assert _names(result) == ["Discovery", "Radio-Activity"]
        assert result.total == 5
        assert result.total_pages == 3
        assert result.pagination() == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}

    def test_page_past_end_is_empty(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(page=9, limit=2))
        assert result.records == []
        assert result.total == 5

    @pytest.mark.parametrize("limit", [1, 2, 3, 100])
    def test_never_more_than_limit(self, entries: list[CatalogEntry], limit: int) -> None:
        for page in range(1, 7):
            result = query_records(entries, QueryFilter(page=page, limit=limit))
            assert len(result.records) <= limit
            assert result.total == len(entries)

    def test_clamped_inputs(self, entries: list[CatalogEntry]) -> None:
        result = query_records(entries, QueryFilter(page=0, limit=0))
        assert result.page == 1
        assert result.limit == 1
        assert len(result.records) == 1
