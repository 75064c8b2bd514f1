"""API schemas for catalog entries."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_YEAR = 1900


def max_year() -> int:
    """Latest accepted release year (next year, for announced pressings)."""
    return datetime.now(UTC).year + 1


# Hey future me - the front end speaks camelCase (artistName, coverArtUrl...), Python speaks
# snake_case. alias_generator maps the JSON names, populate_by_name lets tests use either.
# model_dump(exclude_unset=True) gives the service ONLY the fields the client sent, which is
# exactly the merge semantics PUT needs.
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VinylRecordFields(_CamelModel):
    """Fields shared by create and update. Everything optional here."""

    artist_name: str | None = Field(default=None, min_length=1, max_length=255)
    album_name: str | None = Field(default=None, min_length=1, max_length=255)
    year: int | None = Field(default=None)
    format: str | None = Field(
        default=None, max_length=50, description="Unknown formats fall back to Vinyl"
    )
    genre: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    owner: str | None = Field(default=None, max_length=100)
    status: str | None = Field(
        default=None, description="Owned, Wanted, Borrowed, Loaned or Re-purchase Necessary"
    )
    notes: str | None = Field(default=None, max_length=1000)
    cover_art: str | None = Field(
        default=None, description="Base64 data URL, empty string removes the cover"
    )
    cover_art_url: str | None = Field(
        default=None, description="Remote image to download and store as cover art"
    )

    @field_validator("year")
    @classmethod
    def _year_in_range(cls, value: int | None) -> int | None:
        if value is not None and not MIN_YEAR <= value <= max_year():
            raise ValueError(f"year must be between {MIN_YEAR} and {max_year()}")
        return value

    def entry_fields(self) -> dict[str, Any]:
        """Non-null fields the client actually sent, snake_case, minus cover_art_url."""
        return self.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"cover_art_url"}
        )


class VinylRecordCreate(VinylRecordFields):
    """Request body for POST /vinyl."""

    artist_name: str = Field(..., min_length=1, max_length=255)
    album_name: str = Field(..., min_length=1, max_length=255)


class VinylRecordUpdate(VinylRecordFields):
    """Request body for PUT /vinyl/{id} (partial)."""


class ImageDownloadRequest(_CamelModel):
    """Request body for POST /image-search/download."""

    image_url: str = Field(..., min_length=1, description="Image to fetch")
