"""
core/errors.py -- Domain error taxonomy shared by services and the API layer.

Services raise these; api/main.py renders every AppError into the same
ErrorResponse envelope:

    {"error": {"code": "...", "message": "...", "detail": ...}}

`code` is the machine-readable identifier clients branch on, `message` is for
humans. Subclasses set class-level defaults; callers may override message
and attach a detail payload.

Layer rule: core/ is the kernel. No imports from api/, auth/, or contact/.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for every error that maps to an HTTP response."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: Any = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    message = "Request validation failed."


class WeakPassword(ValidationError):
    code = "weak_password"
    message = "Password too short (min 8)."


class InvalidCredentials(AppError):
    # One message for unknown username and wrong password alike.
    status_code = 401
    code = "bad_credentials"
    message = "Invalid username or password."


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    message = "This operation is not allowed."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    message = "Resource not found."


class DuplicateUsername(AppError):
    status_code = 409
    code = "duplicate_username"
    message = "An admin with that username already exists."


class UpstreamError(AppError):
    """A third-party API answered with a non-2xx status or could not be reached.

    upstream_status is None when the request never got a response
    (DNS failure, timeout, connection reset).
    """

    status_code = 502
    code = "upstream_error"
    message = "Upstream service request failed."

    def __init__(self, upstream_status: int | None = None, upstream_body: Any = None, message: str | None = None) -> None:
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        super().__init__(
            message,
            detail={"upstream_status": upstream_status, "upstream_body": upstream_body},
        )


class InternalError(AppError):
    """Unexpected server fault. The cause is logged, never returned."""

    status_code = 500
    code = "internal_error"
    message = "An unexpected error occurred."
