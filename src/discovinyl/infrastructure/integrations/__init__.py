"""External service integrations."""

from discovinyl.infrastructure.integrations.coverartarchive_client import (
    CoverArtArchiveClient,
)
from discovinyl.infrastructure.integrations.google_oauth_client import (
    GoogleOAuthClient,
)
from discovinyl.infrastructure.integrations.google_sheets_client import (
    GoogleSheetsClient,
)
from discovinyl.infrastructure.integrations.http_pool import HttpClientPool
from discovinyl.infrastructure.integrations.musicbrainz_client import (
    MusicBrainzClient,
)

__all__ = [
    "CoverArtArchiveClient",
    "GoogleOAuthClient",
    "GoogleSheetsClient",
    "HttpClientPool",
    "MusicBrainzClient",
]
