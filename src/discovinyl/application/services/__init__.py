"""Application services - catalog, enrichment, artwork and auth business logic."""

from discovinyl.application.services.artwork_service import ArtworkService
from discovinyl.application.services.auth_service import AuthService, TokenService
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.application.services.collection_query import QueryResult, query_records
from discovinyl.application.services.enrichment_service import (
    AlbumMetadata,
    EnrichmentService,
)

__all__ = [
    "AlbumMetadata",
    "ArtworkService",
    "AuthService",
    "CatalogService",
    "EnrichmentService",
    "QueryResult",
    "TokenService",
    "query_records",
]
