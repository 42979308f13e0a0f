"""
auth/store.py -- SQLAlchemy Core persistence layer for administrators.

Pattern: Repository + Data Mapper.
AdminStore is the repository; _row_to_admin is the mapper. Services and
routes never touch SQL directly.

CredentialStore is the interface AuthService depends on. AdminStore is its
only implementation; tests may pass any object with the same methods.

Security:
  All queries use bound parameters. No f-strings in SQL.

Engine ownership: the Engine is injected. AdminStore creates its table on
construction (idempotent) but never disposes the engine.

Layer rule: no imports from api/ or contact/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func
from sqlalchemy.engine import Engine

from auth.models import Admin

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_admins = Table(
    "admins",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), index=True),  # not unique -- see DESIGN.md
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default="admin"),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class CredentialStore(Protocol):
    def create_admin(self, admin: Admin) -> int: ...

    def get_by_username(self, username: str) -> Admin | None: ...

    def get_by_id(self, admin_id: int) -> Admin | None: ...

    def get_by_email(self, email: str) -> Admin | None: ...

    def update_password_hash(self, admin_id: int, password_hash: str) -> bool: ...


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AdminStore:
    """Repository for Admin entities.

    Usage:
        engine = create_db_engine(settings.database_url)
        store = AdminStore(engine)
        store.create_admin(Admin(username="admin", password_hash=hash_password("secret")))
        admin = store.get_by_username("admin")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    def has_admins(self) -> bool:
        """Return True if at least one admin record exists."""
        with self.engine.connect() as conn:
            row = conn.execute(_admins.select().limit(1)).fetchone()
        return row is not None

    def create_admin(self, admin: Admin) -> int:
        """Insert a new admin and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        AuthService.register() catches that as the concurrent-register case.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _admins.insert().values(
                    username=admin.username,
                    email=admin.email,
                    password_hash=admin.password_hash,
                    role=admin.role,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_username(self, username: str) -> Admin | None:
        """Look up an admin by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_admins.select().where(_admins.c.username == username)).fetchone()
        return _row_to_admin(row) if row is not None else None

    def get_by_id(self, admin_id: int) -> Admin | None:
        """Look up an admin by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_admins.select().where(_admins.c.id == admin_id)).fetchone()
        return _row_to_admin(row) if row is not None else None

    def get_by_email(self, email: str) -> Admin | None:
        """Return the oldest admin registered with this email, or None.

        Emails are not unique, so the lowest id wins. Matching ignores case.
        """
        with self.engine.connect() as conn:
            row = conn.execute(
                _admins.select()
                .where(func.lower(_admins.c.email) == email.strip().lower())
                .order_by(_admins.c.id)
                .limit(1)
            ).fetchone()
        return _row_to_admin(row) if row is not None else None

    def update_password_hash(self, admin_id: int, password_hash: str) -> bool:
        """Overwrite the stored hash. Returns True if a row was updated."""
        with self.engine.connect() as conn:
            result = conn.execute(_admins.update().where(_admins.c.id == admin_id).values(password_hash=password_hash))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_admin(row) -> Admin:
    return Admin(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        role=row.role,
        created_at=row.created_at,
    )
