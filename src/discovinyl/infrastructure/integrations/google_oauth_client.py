"""Google OAuth 2.0 (authorization code flow) HTTP client."""

import logging
from typing import Any, cast
from urllib.parse import urlencode

import httpx

from discovinyl.config.settings import AuthSettings
from discovinyl.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """HTTP client for Google login: consent URL, code exchange, userinfo."""

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"  # nosec B105 - public endpoint URL
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self, settings: AuthSettings) -> None:
        """
        Initialize Google OAuth client.

        Args:
            settings: Auth configuration settings
        """
        self.settings = settings
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Listen future me, we only ask for "openid email profile" - that's all a catalog login
    # needs. The state param prevents CSRF: the caller signs it and checks it on callback.
    def get_authorization_url(self, state: str) -> str:
        """
        Build the Google consent screen URL.

        Args:
            state: Opaque CSRF state echoed back on the callback

        Returns:
            Authorization URL

        Raises:
            ConfigurationError: If client id or callback URL is not configured
        """
        if not self.settings.google_client_id.strip():
            raise ConfigurationError("GOOGLE_CLIENT_ID is not configured")
        if not self.settings.google_callback_url.strip():
            raise ConfigurationError("GOOGLE_CALLBACK_URL is not configured")

        params = {
            "client_id": self.settings.google_client_id,
            "response_type": "code",
            "redirect_uri": self.settings.google_callback_url,
            "scope": " ".join(self.SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    # Yo, the code is single-use and short-lived, and redirect_uri MUST match the one used in
    # get_authorization_url() exactly or Google answers 400 redirect_uri_mismatch.
    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Returns:
            Token response with access_token, id_token, expires_in

        Raises:
            httpx.HTTPError: If the request fails
        """
        client = await self._get_client()

        response = await client.post(
            self.TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.google_callback_url,
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        """Fetch the OpenID Connect profile (sub, email, name, picture)."""
        client = await self._get_client()

        response = await client.get(
            self.USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def __aenter__(self) -> "GoogleOAuthClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
