"""Authentication endpoints (Google OAuth login, session info)."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from discovinyl.api.dependencies import (
    get_auth_service,
    get_current_user,
    get_optional_user,
)
from discovinyl.api.responses import ok
from discovinyl.application.services.auth_service import AuthService
from discovinyl.domain.entities import UserIdentity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/google")
async def google_login(
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Redirect the browser to the Google consent screen."""
    return RedirectResponse(url=auth_service.login_url(), status_code=302)


# Yo, Google sends the browser HERE. Whatever happens we answer with a redirect to the front
# end - success carries ?token=...&user=...&success=true, failure carries ?error=...
@router.get("/google/callback")
async def google_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Finish the OAuth flow and bounce back to the front end."""
    target = await auth_service.complete_login(code, state, error)
    return RedirectResponse(url=target, status_code=302)


# Hey future me, logout is a no-op on purpose: tokens are stateless JWTs and stay valid until
# they expire. The front end just throws its copy away. No auth required either.
@router.get("/logout")
async def logout(
    user: UserIdentity | None = Depends(get_optional_user),
) -> dict[str, Any]:
    """Acknowledge logout."""
    if user is not None:
        logger.info("User %s logged out", user.email)
    return ok({"message": "Logged out successfully"})


@router.get("/me")
async def me(user: UserIdentity = Depends(get_current_user)) -> dict[str, Any]:
    """Identity embedded in the caller's token."""
    return ok(user.to_dict())
