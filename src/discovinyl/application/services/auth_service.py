"""Google login and session tokens.

Hey future me - sessions are STATELESS: after Google login we mint an HS256 JWT that embeds
the identity (id, email, googleId + name/picture for the header avatar) and hand it to the
front end in the redirect URL. Every API call sends it back as "Authorization: Bearer ...".

Consequences you should know about:
- Logout is a no-op on the server. A token stays valid until it expires (JWT_EXPIRES_DAYS,
  default 7). If revocation is ever needed: shorter expiry or a denylist, not here.
- Rotating JWT_SECRET logs everyone out (all old tokens fail verification).

The OAuth `state` is also a JWT, signed with the same secret and valid for 10 minutes. No
server-side session store needed to check it on the callback.
"""

import json
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote, urlencode

import httpx
import jwt

from discovinyl.config.settings import AuthSettings
from discovinyl.domain.entities import UserIdentity
from discovinyl.domain.exceptions import AuthenticationError
from discovinyl.infrastructure.integrations.google_oauth_client import (
    GoogleOAuthClient,
)

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
STATE_PURPOSE = "oauth_state"
STATE_EXPIRY = timedelta(minutes=10)
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class TokenService:
    """Mint and verify session tokens."""

    def __init__(self, settings: AuthSettings) -> None:
        self.secret = settings.jwt_secret
        self.expiry = timedelta(days=settings.jwt_expires_days)

    def issue(self, user: UserIdentity) -> str:
        """Sign a session token for user."""
        now = datetime.now(UTC)
        payload = {
            "id": user.id,
            "email": user.email,
            "googleId": user.google_id,
            "name": user.name,
            "picture": user.picture,
            "iat": now,
            "exp": now + self.expiry,
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> UserIdentity:
        """Verify a session token and return the embedded identity.

        Raises:
            AuthenticationError: For any malformed, forged or expired token. The message never
                says which.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            logger.debug("Rejected expired session token")
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid session token: %s", e)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from e

        if payload.get("purpose") == STATE_PURPOSE or not payload.get("id"):
            raise AuthenticationError(INVALID_TOKEN_MESSAGE)

        return UserIdentity(
            id=str(payload["id"]),
            email=payload.get("email", ""),
            name=payload.get("name") or "",
            picture=payload.get("picture"),
            google_id=payload.get("googleId") or str(payload["id"]),
        )

    def issue_state(self) -> str:
        """Short-lived signed CSRF state for the OAuth round trip."""
        now = datetime.now(UTC)
        payload = {
            "purpose": STATE_PURPOSE,
            "nonce": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + STATE_EXPIRY,
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def verify_state(self, state: str | None) -> bool:
        if not state:
            return False
        try:
            payload = jwt.decode(state, self.secret, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError:
            return False
        return payload.get("purpose") == STATE_PURPOSE


class AuthService:
    """Google OAuth orchestration: consent URL in, front-end redirect URL out.

    The router stays thin - it only turns the returned URLs into redirects.
    """

    def __init__(
        self,
        oauth: GoogleOAuthClient,
        tokens: TokenService,
        frontend_url: str,
    ) -> None:
        self.oauth = oauth
        self.tokens = tokens
        self.frontend_url = frontend_url.rstrip("/")

    def login_url(self) -> str:
        """Google consent screen URL with a fresh signed state."""
        return self.oauth.get_authorization_url(self.tokens.issue_state())

    def _redirect(self, params: dict[str, str]) -> str:
        # quote (not quote_plus) so the front end's decodeURIComponent reads it back exactly
        return f"{self.frontend_url}?{urlencode(params, quote_via=quote)}"

    def failure_redirect(self, error: str = "auth_failed") -> str:
        return self._redirect({"error": error})

    # Yo future me, every failure path here ends in a REDIRECT, never a JSON error - the user is
    # in a browser tab that just came back from Google. The front end reads ?error=... and
    # shows a message.
    async def complete_login(
        self, code: str | None, state: str | None, error: str | None = None
    ) -> str:
        """Finish the OAuth callback and return the front-end URL to redirect to."""
        if error:
            logger.info("Google login was not completed: %s", error)
            return self.failure_redirect()
        if not code or not self.tokens.verify_state(state):
            logger.warning("Google callback with missing code or invalid state")
            return self.failure_redirect()

        try:
            token_response = await self.oauth.exchange_code(code)
            profile = await self.oauth.get_user_info(token_response["access_token"])
        except (httpx.HTTPError, KeyError) as e:
            logger.error("Google OAuth exchange failed: %s", e)
            return self.failure_redirect()

        user = self._user_from_profile(profile)
        if user is None:
            return self.failure_redirect("user_not_found")

        token = self.tokens.issue(user)
        logger.info("User %s logged in", user.email)
        return self._redirect(
            {
                "token": token,
                "user": json.dumps(user.to_dict(), separators=(",", ":")),
                "success": "true",
            }
        )

    @staticmethod
    def _user_from_profile(profile: dict[str, Any]) -> UserIdentity | None:
        subject = profile.get("sub") or profile.get("id")
        if not subject:
            return None
        return UserIdentity(
            id=str(subject),
            email=profile.get("email", ""),
            name=profile.get("name", ""),
            picture=profile.get("picture"),
            google_id=str(subject),
        )
