"""Tests for /api/vinyl."""

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from discovinyl.config import Settings
from tests.conftest import FakeSheets


class TestReads:
    def test_list_requires_auth(self, client: TestClient) -> None:
        response = client.get("/api/vinyl")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_list_defaults(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get("/api/vinyl", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [r["albumName"] for r in body["data"]["records"]] == [
            "Autobahn",
            "Kind of Blue",
            "Discovery",
        ]
        assert body["data"]["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}
        assert body["data"]["records"][0]["id"] == "Kraftwerk-Autobahn-1974"

    def test_filters_and_sort(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get(
            "/api/vinyl",
            params={"genre": "electronic", "sortBy": "year", "sortOrder": "DESC"},
            headers=auth_headers,
        )
        assert [r["year"] for r in response.json()["data"]["records"]] == [2001, 1974]

    def test_bad_paging_is_clamped(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get(
            "/api/vinyl", params={"page": "0", "limit": "500", "sortBy": "bogus"}, headers=auth_headers
        )
        assert response.status_code == 200
        pagination = response.json()["data"]["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 100

    def test_status_filter(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get("/api/vinyl", params={"status": "Wanted"}, headers=auth_headers)
        assert [r["artistName"] for r in response.json()["data"]["records"]] == ["Daft Punk"]

    def test_public_read(self, app: FastAPI, settings: Settings) -> None:
        app.state.settings = settings.model_copy(update={"allow_public_read": True})
        response = TestClient(app).get("/api/vinyl/stats")
        assert response.status_code == 200
        assert response.json()["data"]["totalRecords"] == 3

    def test_stats_route_not_an_id(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get("/api/vinyl/stats", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["byGenre"] == {"Electronic": 2, "Jazz": 1}

    def test_get_by_encoded_id(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get("/api/vinyl/Miles%20Davis-Kind%20of%20Blue-1959", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["notes"] == "First press"

    def test_get_unknown(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.get("/api/vinyl/Nobody-Nothing-2000", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Vinyl record not found"


class TestWrites:
    def test_create(
        self, client: TestClient, auth_headers: dict[str, Any], fake_sheets: FakeSheets
    ) -> None:
        response = client.post(
            "/api/vinyl",
            json={"artistName": "Can", "albumName": "Tago Mago", "year": 1971, "price": 22.5},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == "Can-Tago Mago-1971"
        assert data["status"] == "Owned"
        assert data["format"] == "Vinyl"
        assert fake_sheets.rows[-1][:3] == ["Can", "Tago Mago", 1971]

    def test_create_requires_auth(self, client: TestClient) -> None:
        response = client.post("/api/vinyl", json={"artistName": "Can", "albumName": "Tago Mago"})
        assert response.status_code == 401

    def test_create_missing_album(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.post("/api/vinyl", json={"artistName": "Can"}, headers=auth_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation Error"
        assert body["details"][0]["field"] == "albumName"

    def test_create_year_out_of_range(
        self, client: TestClient, auth_headers: dict[str, Any]
    ) -> None:
        response = client.post(
            "/api/vinyl",
            json={"artistName": "Can", "albumName": "X", "year": 1850},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_create_unknown_status(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.post(
            "/api/vinyl",
            json={"artistName": "Can", "albumName": "X", "status": "Lost"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "status"

    def test_create_with_cover_url(
        self, client: TestClient, auth_headers: dict[str, Any], artwork: MagicMock
    ) -> None:
        response = client.post(
            "/api/vinyl",
            json={"artistName": "Can", "albumName": "X", "coverArtUrl": "https://img/x.jpg"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["coverArt"] == "data:image/jpeg;base64,QUJD"
        artwork.fetch_thumbnail.assert_awaited_once_with("https://img/x.jpg")

    def test_update_returns_new_id(
        self, client: TestClient, auth_headers: dict[str, Any]
    ) -> None:
        response = client.put(
            "/api/vinyl/Kraftwerk-Autobahn-1974",
            json={"year": 1975, "notes": "reissue"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == "Kraftwerk-Autobahn-1975"
        assert data["genre"] == "Electronic"
        assert data["notes"] == "reissue"

    def test_update_unknown(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        response = client.put("/api/vinyl/Nobody-Nothing-2000", json={"price": 1}, headers=auth_headers)
        assert response.status_code == 404

    def test_delete(
        self, client: TestClient, auth_headers: dict[str, Any], fake_sheets: FakeSheets
    ) -> None:
        response = client.delete("/api/vinyl/Daft%20Punk-Discovery-2001", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"message": "Record deleted successfully"},
        }
        assert fake_sheets.deleted == [("Vinyl_Collection", 3)]

    def test_list_reflects_write(self, client: TestClient, auth_headers: dict[str, Any]) -> None:
        client.get("/api/vinyl", headers=auth_headers)
        client.delete("/api/vinyl/Kraftwerk-Autobahn-1974", headers=auth_headers)
        response = client.get("/api/vinyl", headers=auth_headers)
        assert response.json()["data"]["pagination"]["total"] == 2


ACDC_PATH = "/api/vinyl/AC%2FDC-Back%20in%20Black-1980"
SIGUR_ROS_PATH = "/api/vinyl/Sigur%20R%C3%B3s-%C3%81g%C3%A6tis%20byrjun-1999"


class TestEncodedIds:
    """Ids with slashes and non-ASCII characters round-trip through the id routes."""

    @pytest.fixture(autouse=True)
    def _extra_rows(self, fake_sheets: FakeSheets) -> None:
        fake_sheets.rows.append(["AC/DC", "Back in Black", 1980, "LP", "Rock"])
        fake_sheets.rows.append(["Sigur Rós", "Ágætis byrjun", 1999, "LP", "Post-rock"])

    @pytest.mark.parametrize(
        ("path", "artist"),
        [(ACDC_PATH, "AC/DC"), (SIGUR_ROS_PATH, "Sigur Rós")],
    )
    def test_get(
        self, client: TestClient, auth_headers: dict[str, Any], path: str, artist: str
    ) -> None:
        response = client.get(path, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["artistName"] == artist

    @pytest.mark.parametrize(("path", "row"), [(ACDC_PATH, 4), (SIGUR_ROS_PATH, 5)])
    def test_update(
        self,
        client: TestClient,
        auth_headers: dict[str, Any],
        fake_sheets: FakeSheets,
        path: str,
        row: int,
    ) -> None:
        response = client.put(path, json={"owner": "Carol"}, headers=auth_headers)

        assert response.status_code == 200
        assert fake_sheets.rows[row][6] == "Carol"

    def test_update_returns_id_with_slash(
        self, client: TestClient, auth_headers: dict[str, Any]
    ) -> None:
        response = client.put(ACDC_PATH, json={"notes": "reissue"}, headers=auth_headers)
        assert response.json()["data"]["id"] == "AC/DC-Back in Black-1980"

    @pytest.mark.parametrize(("path", "row"), [(ACDC_PATH, 4), (SIGUR_ROS_PATH, 5)])
    def test_delete(
        self,
        client: TestClient,
        auth_headers: dict[str, Any],
        fake_sheets: FakeSheets,
        path: str,
        row: int,
    ) -> None:
        response = client.delete(path, headers=auth_headers)

        assert response.status_code == 200
        assert fake_sheets.deleted == [("Vinyl_Collection", row)]

    def test_unknown_id_with_slash_is_record_not_found(
        self, client: TestClient, auth_headers: dict[str, Any]
    ) -> None:
        response = client.get("/api/vinyl/AC%2FDC-Highway%20to%20Hell-1979", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Vinyl record not found"


def test_created_record_is_found_by_search(
    client: TestClient, auth_headers: dict[str, Any], fake_sheets: FakeSheets
) -> None:
    del fake_sheets.rows[1:]

    created = client.post(
        "/api/vinyl",
        json={"artistName": "Kraftwerk", "albumName": "Autobahn", "year": 1974},
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["data"]["id"] == "Kraftwerk-Autobahn-1974"

    response = client.get("/api/vinyl", params={"search": "auto"}, headers=auth_headers)

    assert response.status_code == 200
    records = response.json()["data"]["records"]
    assert [r["id"] for r in records] == ["Kraftwerk-Autobahn-1974"]
