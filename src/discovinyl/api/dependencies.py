"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Depends, Header, HTTPException, Request

from discovinyl.application.cache.row_cache import SheetRowCache
from discovinyl.application.services.artwork_service import ArtworkService
from discovinyl.application.services.auth_service import AuthService, TokenService
from discovinyl.application.services.catalog_service import CatalogService
from discovinyl.application.services.enrichment_service import EnrichmentService
from discovinyl.config import Settings
from discovinyl.domain.entities import UserIdentity
from discovinyl.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

MISSING_TOKEN_MESSAGE = "Access token required"


# Hey future me, every service is built ONCE in the lifespan (infrastructure/lifecycle.py) and
# parked on app.state. These getters just fetch them. If one is missing, startup went wrong -
# 503 tells the client "not ready" instead of a confusing AttributeError 500. Tests put fakes
# on app.state directly and never run the lifespan.
def _from_state(request: Request, name: str) -> object:
    if not hasattr(request.app.state, name):
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return getattr(request.app.state, name)


def get_app_settings(request: Request) -> Settings:
    return cast(Settings, _from_state(request, "settings"))


def get_catalog_service(request: Request) -> CatalogService:
    return cast(CatalogService, _from_state(request, "catalog_service"))


def get_enrichment_service(request: Request) -> EnrichmentService:
    return cast(EnrichmentService, _from_state(request, "enrichment_service"))


def get_artwork_service(request: Request) -> ArtworkService:
    return cast(ArtworkService, _from_state(request, "artwork_service"))


def get_row_cache(request: Request) -> SheetRowCache:
    return cast(SheetRowCache, _from_state(request, "row_cache"))


def get_token_service(request: Request) -> TokenService:
    return cast(TokenService, _from_state(request, "token_service"))


def get_auth_service(request: Request) -> AuthService:
    return cast(AuthService, _from_state(request, "auth_service"))


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from "Bearer <token>" (prefix case-insensitive).

    Returns:
        The token, or None when the header is absent, blank or not a Bearer credential
    """
    if not authorization or not authorization.strip():
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# Yo, THE auth gate. Missing header and bad token give DIFFERENT messages ("Access token
# required" vs "Invalid or expired token") but never say WHY a token was rejected.
async def get_current_user(
    authorization: str | None = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> UserIdentity:
    """Require a valid session token.

    Raises:
        AuthenticationError: 401 if the token is missing or invalid
    """
    token = parse_bearer_token(authorization)
    if token is None:
        raise AuthenticationError(MISSING_TOKEN_MESSAGE)
    return tokens.verify(token)


async def get_optional_user(
    authorization: str | None = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> UserIdentity | None:
    """Attach the identity when a valid token is present, never fail."""
    token = parse_bearer_token(authorization)
    if token is None:
        return None
    try:
        return tokens.verify(token)
    except AuthenticationError:
        logger.debug("Ignoring invalid token on optional-auth route")
        return None


# Hey future me - catalog READ routes use this. By default it's exactly get_current_user. With
# ALLOW_PUBLIC_READ=true it degrades to the optional variant so a shared, read-only view of the
# collection works without login. Writes ALWAYS use get_current_user.
async def get_reader(
    authorization: str | None = Header(None),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> UserIdentity | None:
    """Auth gate for catalog reads: required unless public read is enabled."""
    if settings.allow_public_read:
        return await get_optional_user(authorization, tokens)
    return await get_current_user(authorization, tokens)
