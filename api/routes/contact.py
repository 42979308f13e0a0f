"""
api/routes/contact.py -- Contact form endpoints.

Routes:
  POST /api/contact   -- public; store + forward to Brevo
  GET  /api/contacts  -- requires session; newest submissions first

POST /contact is rate-limited per IP (CONTACT_RATE_LIMIT). A Brevo failure
surfaces as 502 with the upstream status and body in error.detail.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.limiter import limiter
from api.models import ContactAck, ContactRequest, ContactSubmissionResponse
from auth.dependencies import require_session
from auth.models import SessionClaims
from contact.service import ContactService
from core.config import get_settings

_settings = get_settings()

router = APIRouter()


def _service(request: Request) -> ContactService:
    return request.app.state.contact_service


@router.post("/contact", response_model=ContactAck)
@limiter.limit(_settings.contact_rate_limit)
def submit_contact(request: Request, body: ContactRequest) -> ContactAck:
    """Accept a contact-form submission."""
    data = _service(request).submit(
        name=body.name,
        email=body.email,
        phone=body.phone,
        message=body.message,
        timestamp=body.timestamp,
    )
    return ContactAck(success=True, data=data)


@router.get("/contacts", response_model=list[ContactSubmissionResponse])
def list_contacts(
    request: Request,
    limit: int = Query(default=50, ge=1, le=200),
    claims: SessionClaims = Depends(require_session),
) -> list[ContactSubmissionResponse]:
    """List stored submissions for the admin inbox."""
    return [ContactSubmissionResponse.from_submission(s) for s in _service(request).list_recent(limit)]
