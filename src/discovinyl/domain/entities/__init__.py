"""Domain entities."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from discovinyl.domain.value_objects.record_identity import derive_record_id


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Hey future me - the format list is the UNION of what the UI dropdown offers (LP, 7" Single...)
# and what older rows in the sheet contain (Vinyl, CD, Cassette, Digital). Anything else gets
# squashed to FALLBACK instead of rejected - the sheet is edited by hand and we'd rather show
# "Vinyl" than refuse to load someone's collection.
class RecordFormat(str, Enum):
    """Physical or media format of a catalog entry."""

    LP = "LP"
    EP = "EP"
    SINGLE_7 = '7" Single'
    SINGLE_10 = '10" Single'
    SINGLE_12 = '12" Single'
    EP_10 = '10" EP'
    EP_12 = '12" EP'
    LP_12 = '12" LP'
    VINYL = "Vinyl"
    CD = "CD"
    CASSETTE = "Cassette"
    DIGITAL = "Digital"

    @classmethod
    def fallback(cls) -> "RecordFormat":
        return cls.VINYL

    @classmethod
    def from_string(cls, value: Any) -> "RecordFormat":
        """Parse a format, defaulting to the fallback if unknown."""
        if value is None:
            return cls.fallback()
        try:
            return cls(str(value).strip())
        except ValueError:
            return cls.fallback()


class RecordStatus(str, Enum):
    """Ownership status of a catalog entry."""

    OWNED = "Owned"
    WANTED = "Wanted"
    BORROWED = "Borrowed"
    LOANED = "Loaned"
    REPURCHASE_NECESSARY = "Re-purchase Necessary"

    @classmethod
    def from_string(cls, value: Any) -> "RecordStatus":
        """Parse a stored status, defaulting to OWNED for empty or unknown cells."""
        if value is None:
            return cls.OWNED
        try:
            return cls(str(value).strip())
        except ValueError:
            return cls.OWNED


# Yo, CatalogEntry is the DOMAIN ENTITY, not the API schema! No pydantic here - the API layer
# converts to camelCase JSON. There is NO stored id column: `id` is recomputed from artist/album/
# year every time, so editing any of those three gives the entry a new id on the next read.
@dataclass
class CatalogEntry:
    """One record in the collection."""

    artist_name: str
    album_name: str
    year: int = 0
    format: RecordFormat = RecordFormat.VINYL
    genre: str = ""
    price: float = 0.0
    owner: str = ""
    status: RecordStatus = RecordStatus.OWNED
    notes: str = ""
    cover_art: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @property
    def id(self) -> str:
        return derive_record_id(self.artist_name, self.album_name, self.year)

    def merged(self, changes: dict[str, Any]) -> "CatalogEntry":
        """Return a copy with the given snake_case fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used by the REST API."""
        return {
            "id": self.id,
            "artistName": self.artist_name,
            "albumName": self.album_name,
            "year": self.year,
            "format": self.format.value,
            "genre": self.genre,
            "price": self.price,
            "owner": self.owner,
            "status": self.status.value,
            "coverArt": self.cover_art,
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated principal decoded from a session token. Never persisted."""

    id: str
    email: str
    name: str = ""
    picture: str | None = None
    google_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
            "googleId": self.google_id,
        }


__all__ = [
    "CatalogEntry",
    "RecordFormat",
    "RecordStatus",
    "UserIdentity",
    "utc_now_iso",
]
