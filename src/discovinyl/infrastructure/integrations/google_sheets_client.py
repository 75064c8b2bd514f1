"""Google Sheets HTTP client implementation.

Hey future me - this is a thin async wrapper around the Sheets REST API v4. We talk HTTP with
httpx (same as every other integration client) and only borrow google-auth for the service
account token dance: sign a JWT with the private key, trade it for a bearer token, refresh when
it expires (~1h). google-auth's refresh() is BLOCKING (uses requests), so it runs in a worker
thread via asyncio.to_thread - never call it directly on the event loop!

All values are written with valueInputOption=RAW so "1974" stays a string cell and formulas
in notes are NOT evaluated.

No timeouts on purpose (timeout=None): a slow sheet is still the only source of truth, there
is nothing to fall back to.
"""

import asyncio
import logging
from typing import Any, cast
from urllib.parse import quote

import google.auth.transport.requests
import httpx
from google.oauth2 import service_account

from discovinyl.config.settings import SheetsSettings

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_service_account_credentials(
    settings: SheetsSettings,
) -> service_account.Credentials:
    """Create service account credentials from settings."""
    info = {
        "type": "service_account",
        "client_email": settings.service_account_email,
        "private_key": settings.private_key,
        "token_uri": TOKEN_URI,
    }
    return service_account.Credentials.from_service_account_info(
        info, scopes=SHEETS_SCOPES
    )


class GoogleSheetsClient:
    """HTTP client for Google Sheets values and structural operations."""

    API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        settings: SheetsSettings,
        credentials: Any | None = None,
    ) -> None:
        """
        Initialize Google Sheets client.

        Args:
            settings: Sheets configuration settings
            credentials: Optional pre-built credentials (tests inject a stub here)
        """
        self.settings = settings
        self.spreadsheet_id = settings.sheets_id
        self._credentials = credentials
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.API_BASE_URL,
                headers={"Accept": "application/json"},
                timeout=None,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _auth_headers(self) -> dict[str, str]:
        if self._credentials is None:
            self._credentials = build_service_account_credentials(self.settings)
        if not self._credentials.valid:
            logger.debug("Refreshing Google service account token")
            await asyncio.to_thread(
                self._credentials.refresh, google.auth.transport.requests.Request()
            )
        return {"Authorization": f"Bearer {self._credentials.token}"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        headers = await self._auth_headers()
        response = await client.request(method, url, headers=headers, **kwargs)
        response.raise_for_status()
        return response

    def _values_url(self, range_: str, suffix: str = "") -> str:
        # Ranges like "'Vinyl Collection'!A:L" contain quotes, spaces and "!" - encode ALL of it.
        return f"/{self.spreadsheet_id}/values/{quote(range_, safe='')}{suffix}"

    async def get_values(self, range_: str) -> list[list[Any]]:
        """
        Read cell values for an A1 range.

        Args:
            range_: A1 notation range or sheet/table name

        Returns:
            Rows as lists of cell values (empty list if the range is empty)

        Raises:
            httpx.HTTPError: If the request fails
        """
        response = await self._request("GET", self._values_url(range_))
        data = response.json()
        return cast(list[list[Any]], data.get("values", []))

    async def append_values(self, range_: str, rows: list[list[Any]]) -> dict[str, Any]:
        """Append rows after the last row of the table found in range_."""
        response = await self._request(
            "POST",
            self._values_url(range_, ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": rows},
        )
        return cast(dict[str, Any], response.json())

    async def update_values(self, range_: str, rows: list[list[Any]]) -> dict[str, Any]:
        """Overwrite the cells of range_ with rows."""
        response = await self._request(
            "PUT",
            self._values_url(range_),
            params={"valueInputOption": "RAW"},
            json={"range": range_, "majorDimension": "ROWS", "values": rows},
        )
        return cast(dict[str, Any], response.json())

    # Hey future me, deleteDimension wants the NUMERIC sheetId, not the tab title. We look it
    # up from spreadsheet metadata every time (one cheap GET). When the title is unknown (the
    # locator was a bare "A:L" range = first sheet) we use the first sheet's id.
    async def get_sheet_id(self, title: str | None) -> int:
        """Resolve a tab title to its numeric sheetId."""
        response = await self._request(
            "GET",
            f"/{self.spreadsheet_id}",
            params={"fields": "sheets.properties(sheetId,title)"},
        )
        sheets = response.json().get("sheets", [])
        for sheet in sheets:
            props = sheet.get("properties", {})
            if title is not None and props.get("title") == title:
                return int(props.get("sheetId", 0))
        if sheets:
            return int(sheets[0].get("properties", {}).get("sheetId", 0))
        return 0

    async def delete_row(self, sheet_title: str | None, row_index: int) -> None:
        """
        Structurally delete one row (rows below shift up).

        Args:
            sheet_title: Tab title, or None for the first sheet
            row_index: Zero-based row index (header is 0)
        """
        sheet_id = await self.get_sheet_id(sheet_title)
        await self._request(
            "POST",
            f"/{self.spreadsheet_id}:batchUpdate",
            json={
                "requests": [
                    {
                        "deleteDimension": {
                            "range": {
                                "sheetId": sheet_id,
                                "dimension": "ROWS",
                                "startIndex": row_index,
                                "endIndex": row_index + 1,
                            }
                        }
                    }
                ]
            },
        )

    async def __aenter__(self) -> "GoogleSheetsClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
