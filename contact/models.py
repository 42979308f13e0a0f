"""
contact/models.py -- Domain dataclass for contact-form submissions.

Pure data container. Validation lives in contact/service.py, SQL in
contact/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ContactSubmission:
    """One contact-form submission.

    created_at is the client-supplied timestamp when present, otherwise the
    service fills in the current UTC time before the row is written.

    id is None before the record is written to the database.
    """

    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[str] = None  # ISO 8601
    id: Optional[int] = None
