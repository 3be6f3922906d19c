"""Authentication middleware for session token validation."""

import re
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from interview_studio.config.settings import settings
from interview_studio.middleware.error_handler import error_body
from interview_studio.services.token import should_refresh_token


# Paths that don't require authentication
SKIP_AUTH_PATHS = [
    r"^/api/v1/auth/login",
    r"^/api/v1/auth/callback",
    r"^/api/v1/health",
    r"^/health",
    r"^/$",
    r"^/api/docs",
    r"^/api/openapi\.json",
    r"^/api/redoc",
]

SKIP_AUTH_PATTERNS = [re.compile(p) for p in SKIP_AUTH_PATHS]


def should_skip_auth(path: str) -> bool:
    """Check if path should skip authentication."""
    return any(pattern.match(path) for pattern in SKIP_AUTH_PATTERNS)


def get_token_from_request(request: Request) -> Optional[str]:
    """Extract the session token from the cookie or Authorization header."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates session tokens on protected routes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and validate authentication."""
        if request.method == "OPTIONS" or should_skip_auth(request.url.path):
            return await call_next(request)

        sessions = request.app.state.session_manager
        token = get_token_from_request(request)
        payload = sessions.get_session(token)
        if payload is None:
            return JSONResponse(
                status_code=401,
                content=error_body("AUTH_FAILED", "Not authenticated"),
            )

        identity = sessions.identity_from_session(payload)
        request.state.session = payload
        request.state.identity = identity

        response = await call_next(request)

        # Rolling token refresh, unless the route revoked this session (logout)
        if should_refresh_token(payload) and sessions.get_session(token) is not None:
            set_session_cookie(response, sessions.issue_token(identity))

        return response
