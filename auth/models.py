"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services
do the work; these only own the shape.

Layer rule: no imports from api/ or contact/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Admin:
    """An administrator account.

    username is the immutable identity key (exact, case-sensitive match).
    email is optional and not unique; it is only used to deliver
    password-reset links.
    """

    username: str
    password_hash: str
    role: str = "admin"
    email: str | None = None
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried inside a verified session token.

    Presence of a SessionClaims instance means Authenticated; None means
    Anonymous. There is no server-side session record behind it.
    """

    id: int
    username: str
    role: str = "admin"


@dataclass(frozen=True)
class IssuedSession:
    """Result of a successful login: the signed token and what it asserts."""

    token: str
    claims: SessionClaims
    expires_in: int  # seconds
