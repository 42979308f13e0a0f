"""
API request and response models for the portfolio backend.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
contact/models.py, which own the internal domain representation. Route
handlers map between the two.

Request models only bound types and lengths. Required-field checks live in
the services so the same rules apply whether a call comes from HTTP, the
CLI, or a test, and so the error messages match the service errors.

Password fields are capped at 72 characters here. The 72-byte bcrypt limit is
enforced by AuthService, since multibyte characters reach it sooner.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import SessionClaims
from contact.models import ContactSubmission

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    username: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=72)
    role: Optional[str] = Field(default=None, max_length=30)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=72)


class ChangePasswordRequest(BaseModel):
    """Request body for POST /api/auth/change-password.

    The admin UI posts camelCase keys; snake_case is accepted too.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword", max_length=72)
    new_password: Optional[str] = Field(default=None, alias="newPassword", max_length=72)


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /api/auth/forgot-password."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Response for POST /api/auth/login.

    The token is always returned in the body. With SESSION_TRANSPORT=cookie
    the same token is also set as the httpOnly session cookie.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    token: str
    token_type: str = "bearer"
    expires_in: int
    username: str
    role: str


class SessionUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: str

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> "SessionUser":
        return cls(id=claims.id, username=claims.username, role=claims.role)


class MeResponse(BaseModel):
    """Response for GET /api/auth/me. user is null when authenticated is false."""

    model_config = ConfigDict(frozen=True)

    authenticated: bool
    user: Optional[SessionUser] = None


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    username: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class OkResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------


class ContactRequest(BaseModel):
    """Request body for POST /api/contact.

    timestamp is free-form (the site sends an ISO string); when omitted the
    server stamps the submission at insert time.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    message: Optional[str] = Field(default=None, max_length=5000)
    timestamp: Optional[str] = Field(default=None, max_length=64)


class ContactAck(BaseModel):
    """Response for POST /api/contact -- echoes Brevo's acknowledgment."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class ContactSubmissionResponse(BaseModel):
    """One row in GET /api/contacts."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    phone: Optional[str]
    message: Optional[str]
    created_at: str

    @classmethod
    def from_submission(cls, submission: ContactSubmission) -> "ContactSubmissionResponse":
        return cls(
            id=submission.id,
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            message=submission.message,
            created_at=submission.created_at or "",
        )


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
