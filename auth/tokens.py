"""
auth/tokens.py -- JWT, password hashing, and cookie utilities.

Security design decisions:
  JWT: python-jose with HS256. Access tokens are signed with SECRET_KEY and
       carry id, sub (username), role, typ="access", and expiry. Verification
       returns None on any failure -- expired, tampered, malformed, or the
       wrong token type all look the same to callers.

  Reset tokens: same signing key, typ="password_reset", only the email claim,
       15-minute expiry. decode_access_token() rejects them, so a reset link
       can never be replayed as a session.

  Passwords: bcrypt used directly. The cost factor is explicit per call:
       REGISTER_ROUNDS for new accounts, REHASH_ROUNDS when a password is
       changed or seeded from the CLI. The _DUMMY_HASH constant enables timing
       equalization in authenticate_admin() so response time does not reveal
       whether a username exists.

  SECRET_KEY and every TTL are sourced from core.config.get_settings().

Layer rule: no imports from api/ or contact/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import Admin
    from auth.store import CredentialStore

logger = logging.getLogger("portfolio.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "password_reset"

REGISTER_ROUNDS = 10
REHASH_ROUNDS = 12

# bcrypt only reads the first 72 bytes of a password; bcrypt>=5 refuses longer input.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def password_too_long(plain: str) -> bool:
    """True if the UTF-8 encoding of plain exceeds what bcrypt will hash."""
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain: str, rounds: int = REGISTER_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError for passwords over MAX_PASSWORD_BYTES on every bcrypt
    release. Callers reject such input before it gets here.
    """
    if password_too_long(plain):
        raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    if password_too_long(plain):
        # hash_password() never accepts such input, so nothing stored can match.
        logger.debug("Rejected over-long password without hashing")
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


# Timing equalization dummy hash. Always call verify_password() even when the
# username does not exist so both failure paths cost one bcrypt check.
_DUMMY_HASH: str = hash_password("portfolio_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def _encode(claims: dict, expire_seconds: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + timedelta(seconds=expire_seconds)}
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def create_access_token(admin_id: int, username: str, role: str, expire_seconds: int = 0) -> str:
    """Encode a signed session JWT.

    Args:
        admin_id:       Numeric admin ID stored in the DB.
        username:       Stored as the JWT subject claim.
        role:           Admin role tag.
        expire_seconds: Lifetime in seconds. If 0 (default), uses the TTL of
                        the configured session transport (7d cookie / 1h bearer).
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.session_ttl_seconds
    return _encode(
        {"sub": username, "id": admin_id, "role": role, "typ": ACCESS_TOKEN_TYPE},
        duration,
    )


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a session JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        return None
    if "id" not in payload or "sub" not in payload:
        return None
    return payload


def create_reset_token(email: str) -> str:
    """Encode a short-lived password-reset token bound to an email address only."""
    return _encode({"email": email, "typ": RESET_TOKEN_TYPE}, _settings.reset_token_ttl_seconds)


# ---------------------------------------------------------------------------
# Admin authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_admin(store: CredentialStore, username: str, password: str) -> Admin | None:
    """Check a username/password pair with timing equalization.

    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash

    Returns the Admin on success, None on any failure.
    """
    admin = store.get_by_username(username)
    if admin is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, admin.password_hash):
        return None
    return admin


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the session JWT as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POST.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age: matches the cookie-transport JWT expiry so both expire together.
    """
    response.set_cookie(
        _settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        path="/",
        max_age=_settings.cookie_token_ttl_seconds,
    )


def clear_auth_cookie(response) -> None:
    """Expire the session cookie. The token itself stays valid until exp."""
    response.delete_cookie(_settings.session_cookie_name, path="/")
