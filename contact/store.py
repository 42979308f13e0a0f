"""
contact/store.py -- SQLAlchemy Core persistence for contact submissions.

Pattern: Repository + Data Mapper, same shape as auth/store.py. Rows are
append-only: there is no update or delete.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from contact.models import ContactSubmission

_metadata = MetaData()

_contacts = Table(
    "contacts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("phone", String(50)),
    Column("message", Text),
    Column("created_at", String(64), nullable=False),
)


class ContactStore:
    """Repository for ContactSubmission entities. The Engine is injected."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    def create_submission(self, submission: ContactSubmission) -> int:
        """Insert a submission and return its ID. created_at must already be set."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _contacts.insert().values(
                    name=submission.name,
                    email=submission.email,
                    phone=submission.phone,
                    message=submission.message,
                    created_at=submission.created_at,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_submissions(self, limit: int = 50) -> list[ContactSubmission]:
        """Return the most recent submissions, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_contacts.select().order_by(_contacts.c.id.desc()).limit(limit)).fetchall()
        return [_row_to_submission(r) for r in rows]


def _row_to_submission(row) -> ContactSubmission:
    return ContactSubmission(
        id=row.id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        message=row.message,
        created_at=row.created_at,
    )
