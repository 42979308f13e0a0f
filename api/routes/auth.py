"""
api/routes/auth.py -- Admin authentication REST endpoints.

Routes:
  POST /api/auth/register         -- create an admin account; 201
  POST /api/auth/login            -- password login; returns token (+ cookie)
  POST /api/auth/logout           -- clears the session cookie; 200
  GET  /api/auth/me               -- session check; never fails
  POST /api/auth/change-password  -- requires session
  POST /api/auth/forgot-password  -- emails a reset link

Security:
  POST /login is rate-limited per IP (LOGIN_RATE_LIMIT).
  AuthService.login() runs bcrypt on both failure paths -- never inline
  get_by_username() + verify_password() here.
  Cache-Control: no-store on login responses.
  Logout only clears the cookie; the JWT stays valid until it expires.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    OkResponse,
    RegisterRequest,
    RegisterResponse,
    SessionUser,
)
from auth.dependencies import get_auth_service, require_session, try_get_session
from auth.models import SessionClaims
from auth.tokens import clear_auth_cookie, set_auth_cookie
from core.config import get_settings

_settings = get_settings()

# Auth policy:
# - POST /api/auth/register:        public unless SELF_REGISTRATION_ENABLED=false
# - POST /api/auth/login:           public
# - POST /api/auth/logout:          public -- clearing a cookie needs no prior auth
# - GET  /api/auth/me:              public -- reports authenticated true/false
# - POST /api/auth/change-password: requires session (require_session)
# - POST /api/auth/forgot-password: public
router = APIRouter()


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create an admin account. The caller is not logged in by this call."""
    admin = get_auth_service(request).register(body.username, body.email, body.password, body.role)
    return RegisterResponse(message="Admin registered.", username=admin.username)


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(_settings.login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password.

    Wrong username and wrong password produce the same 401 body.
    """
    issued = get_auth_service(request).login(body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=issued.token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=issued.expires_in,
            username=issued.claims.username,
            role=issued.claims.role,
        ).model_dump(),
    )
    if _settings.session_transport == "cookie":
        set_auth_cookie(resp, issued.token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=OkResponse)
async def logout() -> JSONResponse:
    """Clear the session cookie."""
    resp = JSONResponse(content=OkResponse().model_dump())
    clear_auth_cookie(resp)
    return resp


@router.get("/auth/me", response_model=MeResponse)
async def me(claims: SessionClaims | None = Depends(try_get_session)) -> MeResponse:
    """Report whether the request carries a valid session token."""
    if claims is None:
        return MeResponse(authenticated=False)
    return MeResponse(authenticated=True, user=SessionUser.from_claims(claims))


@router.post("/auth/change-password", response_model=OkResponse)
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    claims: SessionClaims = Depends(require_session),
) -> OkResponse:
    """Replace the current admin's password. Existing tokens stay valid."""
    get_auth_service(request).change_password(claims, body.current_password, body.new_password)
    return OkResponse()


@router.post("/auth/forgot-password", response_model=MessageResponse)
def forgot_password(request: Request, body: ForgotPasswordRequest) -> MessageResponse:
    """Send a password-reset link to the admin registered with the given email."""
    get_auth_service(request).forgot_password(body.email)
    return MessageResponse(message="Password reset email sent.")
