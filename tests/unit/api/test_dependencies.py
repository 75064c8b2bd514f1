"""Tests for bearer parsing and the auth gates."""

from typing import Any

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from discovinyl.api.dependencies import (
    get_catalog_service,
    get_current_user,
    get_optional_user,
    get_reader,
    parse_bearer_token,
)
from discovinyl.api.exception_handlers import register_exception_handlers
from discovinyl.application.services.auth_service import TokenService
from discovinyl.config import Settings
from discovinyl.domain.entities import UserIdentity


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        ("BEARER   abc  ", "abc"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_bearer_token(header: str | None, expected: str | None) -> None:
    assert parse_bearer_token(header) == expected


@pytest.fixture
def gate_app(settings: Settings, token_service: TokenService) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.state.settings = settings
    app.state.token_service = token_service

    @app.get("/required")
    async def required(user: UserIdentity = Depends(get_current_user)) -> dict[str, Any]:
        return {"email": user.email}

    @app.get("/optional")
    async def optional(user: UserIdentity | None = Depends(get_optional_user)) -> dict[str, Any]:
        return {"email": user.email if user else None}

    @app.get("/reader")
    async def reader(user: UserIdentity | None = Depends(get_reader)) -> dict[str, Any]:
        return {"email": user.email if user else None}

    @app.get("/catalog")
    async def catalog(service: Any = Depends(get_catalog_service)) -> dict[str, Any]:
        return {"ok": True}

    return app


@pytest.fixture
def gate_client(gate_app: FastAPI) -> TestClient:
    return TestClient(gate_app)


class TestGates:
    def test_required_missing(self, gate_client: TestClient) -> None:
        response = gate_client.get("/required")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_required_invalid(self, gate_client: TestClient) -> None:
        response = gate_client.get("/required", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_required_valid(
        self, gate_client: TestClient, token_service: TokenService, user: UserIdentity
    ) -> None:
        headers = {"Authorization": f"Bearer {token_service.issue(user)}"}
        assert gate_client.get("/required", headers=headers).json() == {
            "email": "alice@example.com"
        }

    def test_optional_ignores_bad_token(self, gate_client: TestClient) -> None:
        response = gate_client.get("/optional", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 200
        assert response.json() == {"email": None}

    def test_reader_requires_token_by_default(self, gate_client: TestClient) -> None:
        assert gate_client.get("/reader").status_code == 401

    def test_reader_public_read(self, gate_app: FastAPI, settings: Settings) -> None:
        gate_app.state.settings = settings.model_copy(update={"allow_public_read": True})
        response = TestClient(gate_app).get("/reader")
        assert response.status_code == 200
        assert response.json() == {"email": None}

    def test_missing_service_is_503(self, gate_client: TestClient) -> None:
        response = gate_client.get("/catalog")
        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "catalog_service not initialized"
