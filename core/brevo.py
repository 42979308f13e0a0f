"""
core/brevo.py -- Brevo (ex-Sendinblue) API client.

Two endpoints are used:
  POST /contacts    -- upsert a contact-form submission into the marketing list
  POST /smtp/email  -- send a transactional email (password-reset links)

Both go through _post(), which turns every failure into UpstreamError:
  - non-2xx answer   -> UpstreamError(status, parsed body)
  - network failure  -> UpstreamError(None, str(exc))

The client owns one requests.Session for connection pooling. It is created
once at startup (api/main.py lifespan) and injected into the services that
need it, so tests can swap in a MagicMock.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from core.errors import UpstreamError

logger = logging.getLogger("portfolio.brevo")

BREVO_API = "https://api.brevo.com/v3"


class BrevoClient:
    """Thin synchronous wrapper around the Brevo REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = BREVO_API,
        sender_email: str = "no-reply@localhost",
        sender_name: str = "Portfolio",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.sender = {"email": sender_email, "name": sender_name}
        self.timeout = timeout
        self._session = session or requests.Session()
        # Known public API -- 3 hops is generous.
        self._session.max_redirects = 3
        self._session.headers.update(
            {
                "accept": "application/json",
                "api-key": api_key,
                "content-type": "application/json",
            }
        )
        if not api_key:
            logger.warning("BREVO_API_KEY is not set -- contact forwarding and reset emails will fail")

    def add_contact(
        self,
        email: str,
        name: str,
        phone: Optional[str] = None,
        message: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create or update a Brevo contact carrying the submission as attributes."""
        payload = {
            "email": email,
            "attributes": {
                "NAME": name,
                "PHONE": phone,
                "MESSAGE": message,
            },
            "updateEnabled": True,
        }
        return self._post("/contacts", payload)

    def send_email(self, to_email: str, subject: str, html_content: str) -> dict[str, Any]:
        """Send one transactional email. Returns Brevo's {"messageId": ...} payload."""
        payload = {
            "sender": self.sender,
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html_content,
        }
        return self._post("/smtp/email", payload)

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Brevo request to %s failed: %s", path, e)
            raise UpstreamError(None, str(e)) from e

        data = _parse_body(resp)
        if not resp.ok:
            logger.warning("Brevo %s returned %d: %s", path, resp.status_code, data)
            raise UpstreamError(resp.status_code, data)
        return data if isinstance(data, dict) else {"response": data}

    def close(self) -> None:
        self._session.close()


def _parse_body(resp: requests.Response) -> Any:
    """Decode a Brevo response body.

    Updating an existing contact answers 204 with no body, and error pages
    from proxies are not always JSON -- fall back to {} / raw text.
    """
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return resp.text
