"""App fixtures for router tests.

The TestClient is NOT used as a context manager, so the lifespan never runs: no credentials,
no background task. Services are put on app.state by hand.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from discovinyl.application.cache.row_cache import SheetRowCache
from discovinyl.application.services.auth_service import TokenService
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.config import Settings
from discovinyl.domain.entities import UserIdentity
from discovinyl.main import create_app


@pytest.fixture
def enrichment() -> MagicMock:
    service = MagicMock()
    for name in (
        "search",
        "search_by_artist",
        "search_by_album",
        "search_by_artist_and_album",
        "search_covers",
    ):
        setattr(service, name, AsyncMock(return_value=[]))
    service.get_release = AsyncMock(return_value=None)
    return service


@pytest.fixture
def artwork() -> MagicMock:
    service = MagicMock()
    service.fetch_thumbnail = AsyncMock(return_value="data:image/jpeg;base64,QUJD")
    service.optimize_data_url = AsyncMock(side_effect=lambda data_url: data_url)
    return service


@pytest.fixture
def auth_service() -> MagicMock:
    service = MagicMock()
    service.login_url.return_value = "https://accounts.google.com/o/oauth2/v2/auth?state=s"
    service.complete_login = AsyncMock(
        return_value="http://localhost:3000?token=t&success=true"
    )
    return service


@pytest.fixture
def app(
    settings: Settings,
    catalog_service: CatalogService,
    row_cache: SheetRowCache,
    token_service: TokenService,
    enrichment: MagicMock,
    artwork: MagicMock,
    auth_service: MagicMock,
) -> FastAPI:
    app = create_app(settings)
    catalog_service.artwork = artwork
    app.state.catalog_service = catalog_service
    app.state.row_cache = row_cache
    app.state.token_service = token_service
    app.state.enrichment_service = enrichment
    app.state.artwork_service = artwork
    app.state.auth_service = auth_service
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False, follow_redirects=False)


@pytest.fixture
def auth_headers(token_service: TokenService, user: UserIdentity) -> dict[str, Any]:
    return {"Authorization": f"Bearer {token_service.issue(user)}"}
