"""Authentication endpoints for the external identity provider."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse

from interview_studio.config.settings import settings
from interview_studio.middleware.auth import set_session_cookie
from interview_studio.schemas.base import CamelModel
from interview_studio.services.session import (
    Identity,
    SessionManager,
    get_current_identity,
    get_session_manager,
)

logger = structlog.get_logger()
router = APIRouter()


class SSOCallbackRequest(CamelModel):
    """Request body for SSO callback."""
    code: str


class UserResponse(CamelModel):
    """Identity of the signed-in user."""
    email: str
    name: Optional[str] = None
    company: str


class TokenResponse(CamelModel):
    """Token exchange response."""
    user: UserResponse
    expires_in: int


def _user(identity: Identity) -> UserResponse:
    return UserResponse(email=identity.email, name=identity.name, company=identity.company)


@router.get("/login")
async def login(
    return_url: str = Query(default="/", description="URL to redirect after login"),
    sessions: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """
    Initiate SSO login flow.

    Redirects to the identity provider for authentication.
    """
    logger.info("Redirecting to SSO login", return_url=return_url)
    return RedirectResponse(url=sessions.begin_sign_in(return_url))


@router.post("/callback", response_model=TokenResponse)
async def sso_callback(
    request: SSOCallbackRequest,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenResponse:
    """
    Exchange SSO auth code for internal token.

    Called by frontend after redirect from the identity provider.
    """
    token, identity = await sessions.complete_sign_in(request.code)
    set_session_cookie(response, token)

    return TokenResponse(
        user=_user(identity),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(identity: Identity = Depends(get_current_identity)) -> UserResponse:
    return _user(identity)


@router.post("/logout")
async def logout(
    response: Response,
    identity: Identity = Depends(get_current_identity),
    sessions: SessionManager = Depends(get_session_manager),
) -> dict:
    """
    Sign out everywhere: every token issued to this identity stops working
    and its workspace (including unsaved drafts) is dropped.
    """
    sessions.sign_out_everywhere(identity)
    response.delete_cookie(key=settings.COOKIE_NAME, domain=settings.COOKIE_DOMAIN)
    return {"signed_out": True}


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    response: Response,
    identity: Identity = Depends(get_current_identity),
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenResponse:
    """Issue a fresh token with extended expiration."""
    set_session_cookie(response, sessions.issue_token(identity))
    logger.debug("Token refreshed", email=identity.email)

    return TokenResponse(
        user=_user(identity),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
