"""Locate the catalog data inside the spreadsheet.

Hey future me - people rename tabs, convert ranges into named tables, or paste the collection
into the first sheet of a new file. Instead of demanding ONE exact range in config we try a
short list of candidate locators in order and remember the first one that returns data. The
remembered locator is tried first next time; if it stops working we rescan the whole list.

A candidate "has data" only if it returns MORE than the header row. A tab that exists but only
has the header is treated like a missing tab (keep looking).

Errors per candidate are logged and collected, never raised from resolve(). Callers that need
data use read(), which turns both "nothing found" and "everything errored" into one
DataSourceError.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from discovinyl.config.settings import SheetsSettings
from discovinyl.domain.exceptions import DataSourceError
from discovinyl.infrastructure.persistence.row_codec import (
    FIRST_COLUMN,
    HEADER_ROWS,
    LAST_COLUMN,
)

logger = logging.getLogger(__name__)


class ValuesReader(Protocol):
    async def get_values(self, range_: str) -> list[list[Any]]: ...


@dataclass(frozen=True)
class RangeFound:
    """A candidate locator returned data rows (header included)."""

    locator: str
    rows: list[list[Any]]


@dataclass(frozen=True)
class RangeNotFound:
    """Every candidate answered, none had data beyond the header."""

    attempted: list[str]


@dataclass(frozen=True)
class RangeError:
    """At least one candidate failed and none had data."""

    attempted: list[str]
    errors: dict[str, str] = field(default_factory=dict)


type ResolveResult = RangeFound | RangeNotFound | RangeError


def build_candidates(settings: SheetsSettings) -> list[str]:
    """Candidate locators in priority order, without duplicates."""
    columns = f"{FIRST_COLUMN}:{LAST_COLUMN}"
    raw = [
        f"'{settings.sheet_name}'!{columns}",
        f"{settings.sheet_name}!{columns}",
        settings.sheet_name,
        settings.table_name,
        columns,
    ]
    candidates: list[str] = []
    for locator in raw:
        if locator and locator not in candidates:
            candidates.append(locator)
    return candidates


def sheet_title(locator: str) -> str | None:
    """Extract the tab title from a locator, None for a bare column range.

    "'Vinyl_Collection'!A:L" -> "Vinyl_Collection", "Vinyl Collection" -> "Vinyl Collection",
    "A:L" -> None (first sheet).
    """
    if "!" in locator:
        title = locator.rsplit("!", 1)[0]
    elif locator == f"{FIRST_COLUMN}:{LAST_COLUMN}":
        return None
    else:
        title = locator
    if len(title) >= 2 and title.startswith("'") and title.endswith("'"):
        title = title[1:-1].replace("''", "'")
    return title


def row_range(locator: str, row_number: int) -> str:
    """A1 range covering one full row, e.g. ("Vinyl_Collection", 5) -> "'Vinyl_Collection'!A5:L5".

    row_number is 1-based as shown in the spreadsheet UI (header is row 1).
    """
    cells = f"{FIRST_COLUMN}{row_number}:{LAST_COLUMN}{row_number}"
    title = sheet_title(locator)
    if title is None:
        return cells
    escaped = title.replace("'", "''")
    return f"'{escaped}'!{cells}"


class SheetRangeResolver:
    """Find (and remember) which locator holds the catalog."""

    def __init__(self, client: ValuesReader, candidates: list[str]) -> None:
        self._client = client
        self.candidates = list(candidates)
        self.preferred: str | None = None

    def forget(self) -> None:
        """Drop the remembered locator so the next resolve() scans from the top."""
        self.preferred = None

    def _ordered(self) -> list[str]:
        if self.preferred is None:
            return list(self.candidates)
        return [self.preferred] + [c for c in self.candidates if c != self.preferred]

    # Hey future me, every call hits the sheet. Row caching is SheetRowCache's job.
    async def resolve(self) -> ResolveResult:
        """Try candidates in order and return the first one with data."""
        attempted: list[str] = []
        errors: dict[str, str] = {}

        for locator in self._ordered():
            attempted.append(locator)
            try:
                rows = await self._client.get_values(locator)
            except Exception as e:
                logger.warning("Range %s failed: %s", locator, e)
                errors[locator] = str(e)
                continue

            if len(rows) > HEADER_ROWS:
                if locator != self.preferred:
                    logger.info("Catalog data found at range %s", locator)
                self.preferred = locator
                return RangeFound(locator=locator, rows=rows)

            logger.debug("Range %s returned no data rows", locator)

        self.preferred = None
        if errors:
            return RangeError(attempted=attempted, errors=errors)
        return RangeNotFound(attempted=attempted)

    async def read(self) -> tuple[str, list[list[Any]]]:
        """Resolve and return (locator, rows) or raise DataSourceError."""
        result = await self.resolve()
        match result:
            case RangeFound(locator=locator, rows=rows):
                return locator, rows
            case RangeError(attempted=attempted, errors=errors):
                logger.error(
                    "No spreadsheet range produced data; errors: %s", errors
                )
                raise DataSourceError(attempted=attempted)
            case RangeNotFound(attempted=attempted):
                raise DataSourceError(attempted=attempted)
        raise DataSourceError()
