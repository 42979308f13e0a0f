"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two credential transports are checked in priority order:
  1. Session cookie (SESSION_COOKIE_NAME, default "aid") -- browser admin UI.
  2. Authorization: Bearer <token> header -- API clients.

try_get_session() is the soft variant (returns None on failure).
require_session() is the authorization gate: it raises Unauthorized before
the route handler runs and stores the claims on request.state.claims for
anything downstream.

auth/dependencies.py may import from fastapi because this module is part of
the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import SessionClaims
from auth.service import AuthService
from core.config import get_settings


def get_request_token(request: Request) -> str | None:
    """Pull the raw session token from the cookie, else the Bearer header."""
    token: str | None = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    return token or None


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def try_get_session(request: Request) -> SessionClaims | None:
    """Return the caller's claims, or None when Anonymous. Never raises."""
    return get_auth_service(request).who_am_i(get_request_token(request))


def require_session(request: Request) -> SessionClaims:
    """Require a valid session token. Raises Unauthorized (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: SessionClaims = Depends(require_session)): ...
    """
    claims = get_auth_service(request).authorize(get_request_token(request))
    request.state.claims = claims
    return claims
