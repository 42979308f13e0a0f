"""
contact/service.py -- Persist-then-forward flow for the contact form.

submit() does two independent steps:
  1. Write the submission to ContactStore. Best-effort: a database failure is
     logged with traceback and the request carries on.
  2. Forward the submission to Brevo. This one is authoritative: a non-2xx
     answer or a network error raises UpstreamError and fails the request.

The steps are not transactional. A submission can end up stored but not
forwarded, or forwarded but not stored; neither case is retried.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from contact.models import ContactSubmission
from contact.store import ContactStore
from core.brevo import BrevoClient
from core.errors import ValidationError

logger = logging.getLogger("portfolio.contact")


class ContactService:
    def __init__(self, store: ContactStore, client: BrevoClient, message_required: bool = False) -> None:
        self._store = store
        self._client = client
        self._message_required = message_required

    def submit(
        self,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str] = None,
        message: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> dict[str, Any]:
        """Validate, store, and forward one submission. Returns Brevo's payload."""
        if not name or not email:
            raise ValidationError("Name and Email are required.")
        if self._message_required and not message:
            raise ValidationError("Message is required.")

        submission = ContactSubmission(
            name=name,
            email=email,
            phone=phone or None,
            message=message or None,
            created_at=timestamp or datetime.now(timezone.utc).isoformat(),
        )

        try:
            submission.id = self._store.create_submission(submission)
        except SQLAlchemyError:
            logger.exception("Could not persist contact submission from %s", email)

        return self._client.add_contact(
            email=submission.email,
            name=submission.name,
            phone=submission.phone,
            message=submission.message,
        )

    def list_recent(self, limit: int = 50) -> list[ContactSubmission]:
        return self._store.list_submissions(limit=limit)
