"""Derived record identity.

Hey future me - the sheet has NO id column. A record's id is artist, album and year glued
together with a dash, recomputed on every read. That means:

- Two rows with the same (artist, album, year) collide; lookups return the first one.
- Changing artist/album/year through an update gives the row a NEW id. The old id simply stops
  matching anything. Clients must use the id returned from the update response.

Ids travel in URL paths percent-encoded ("AC%2FDC-...", "Sigur%20R%C3%B3s-..."). The ASGI server
decodes the path exactly once and the vinyl routes capture the rest of it, slashes included, so
everything below the router sees and compares the plain id.
"""

from typing import Any

ID_DELIMITER = "-"


def derive_record_id(artist_name: str, album_name: str, year: Any) -> str:
    """Build the record id from its identity-contributing fields."""
    return ID_DELIMITER.join([str(artist_name), str(album_name), str(year)])
