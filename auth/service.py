"""
auth/service.py -- Admin authentication flows.

AuthService is the only place that combines the credential store, the
password hasher, and the token issuer. Routes call it and translate the
returned values into responses; every failure is raised as a core.errors
AppError subclass and rendered by the API exception handlers.

Session model:
  A caller is Anonymous (no claims) or Authenticated(SessionClaims). The only
  transition to Authenticated is login(). There is no server-side session
  table: logout just drops the client's cookie, and a token already issued
  stays valid until its exp claim passes. change_password() does not re-issue
  or revoke tokens either.

Password policy:
  New passwords must be at least MIN_PASSWORD_LENGTH characters. That check
  runs before any other change-password input is looked at, so a short
  password is always reported as WeakPassword. Passwords over
  MAX_PASSWORD_BYTES of UTF-8 are rejected with ValidationError; the limit is
  bytes, not characters, so 40 accented letters already exceed it.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Protocol
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError

from auth.models import Admin, IssuedSession, SessionClaims
from auth.store import CredentialStore
from auth.tokens import (
    MAX_PASSWORD_BYTES,
    REGISTER_ROUNDS,
    REHASH_ROUNDS,
    authenticate_admin,
    create_access_token,
    create_reset_token,
    decode_access_token,
    hash_password,
    password_too_long,
    verify_password,
)
from core.errors import (
    DuplicateUsername,
    Forbidden,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    ValidationError,
    WeakPassword,
)

logger = logging.getLogger("portfolio.auth.service")

MIN_PASSWORD_LENGTH = 8


def _check_password_size(password: str) -> None:
    if password_too_long(password):
        raise ValidationError(f"Password too long (max {MAX_PASSWORD_BYTES} bytes).")


def _normalize_email(email: str | None) -> str | None:
    email = (email or "").strip().lower()
    return email or None


class Mailer(Protocol):
    def send_email(self, to_email: str, subject: str, html_content: str) -> dict: ...


class AuthService:
    """Register, login, session checks, and password management for admins."""

    def __init__(
        self,
        store: CredentialStore,
        mailer: Mailer,
        session_ttl_seconds: int,
        password_reset_url: str,
        self_registration_enabled: bool = True,
    ) -> None:
        self._store = store
        self._mailer = mailer
        self._session_ttl = session_ttl_seconds
        self._reset_url = password_reset_url
        self._registration_open = self_registration_enabled

    # ------------------------------------------------------------------
    # Account creation
    # ------------------------------------------------------------------

    def register(self, username: str | None, email: str | None, password: str | None, role: str | None = None) -> Admin:
        """Create an admin account. Does not log the caller in."""
        if not self._registration_open:
            raise Forbidden("Registration is disabled.")
        if not username or not password:
            raise ValidationError("Username and password are required.")
        _check_password_size(password)

        if self._store.get_by_username(username) is not None:
            raise DuplicateUsername()

        admin = Admin(
            username=username,
            email=_normalize_email(email),
            password_hash=hash_password(password, rounds=REGISTER_ROUNDS),
            role=role or "admin",
        )
        try:
            admin.id = self._store.create_admin(admin)
        except IntegrityError as exc:
            # Lost a race with a concurrent register for the same username.
            raise DuplicateUsername() from exc
        logger.info("Admin registered: %s", username)
        return admin

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def login(self, username: str | None, password: str | None) -> IssuedSession:
        """Anonymous -> Authenticated. Raises InvalidCredentials on any mismatch."""
        if not username or not password:
            raise ValidationError("Missing credentials.")

        admin = authenticate_admin(self._store, username, password)
        if admin is None:
            logger.info("Failed login for username=%r", username)
            raise InvalidCredentials()

        claims = SessionClaims(id=admin.id, username=admin.username, role=admin.role)
        token = create_access_token(admin.id, admin.username, admin.role, expire_seconds=self._session_ttl)
        return IssuedSession(token=token, claims=claims, expires_in=self._session_ttl)

    def who_am_i(self, token: str | None) -> SessionClaims | None:
        """Return the claims behind a token, or None for Anonymous. Never raises."""
        if not token:
            return None
        payload = decode_access_token(token)
        if payload is None:
            return None
        return SessionClaims(
            id=payload["id"],
            username=payload["sub"],
            role=payload.get("role", "admin"),
        )

    def authorize(self, token: str | None) -> SessionClaims:
        """Gate variant of who_am_i(): Anonymous is an error here."""
        claims = self.who_am_i(token)
        if claims is None:
            raise Unauthorized()
        return claims

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def change_password(self, claims: SessionClaims, current_password: str | None, new_password: str | None) -> None:
        """Replace the caller's password hash after re-checking the current password."""
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise WeakPassword()
        _check_password_size(new_password)
        if not current_password:
            raise ValidationError("Missing fields.")

        admin = self._store.get_by_id(claims.id)
        if admin is None:
            raise NotFound("Admin not found.")
        if not verify_password(current_password, admin.password_hash):
            raise InvalidCredentials("Current password incorrect.")

        self._store.update_password_hash(admin.id, hash_password(new_password, rounds=REHASH_ROUNDS))
        logger.info("Password changed for admin id=%d", admin.id)

    def forgot_password(self, email: str | None) -> None:
        """Email a 15-minute reset link to the admin registered with this address.

        Addresses compare case-insensitively.
        """
        email = _normalize_email(email)
        if not email:
            raise ValidationError("Email is required.")

        admin = self._store.get_by_email(email)
        if admin is None:
            raise NotFound("No admin with that email.")

        token = create_reset_token(email)
        link = f"{self._reset_url}?{urlencode({'token': token})}"
        html = (
            f"<p>Hello {escape(admin.username)},</p>"
            f'<p>Use <a href="{escape(link)}">this link</a> to reset your password. '
            "It expires in 15 minutes.</p>"
            "<p>If you did not ask for a reset, ignore this email.</p>"
        )
        # UpstreamError from the mailer propagates to the route.
        self._mailer.send_email(email, "Password reset", html)
        logger.info("Password reset email sent for admin id=%d", admin.id)
