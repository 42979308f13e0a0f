"""
tests/test_health.py -- Integration tests for liveness endpoints and the error envelope.

Covers:
  - GET / plain-text liveness
  - GET /api/health returns status + version, no auth required
  - Unknown routes use the structured error envelope
  - /docs is behind the authorization gate
"""

from __future__ import annotations

from auth.tokens import create_access_token


def test_root_is_plain_text(api):
    resp = api.client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Backend is running"


def test_health_returns_version(api):
    resp = api.client.get("/api/health", headers={})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data


def test_unknown_route_uses_error_envelope(api):
    resp = api.client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "http_404"


def test_docs_require_session(api):
    assert api.client.get("/docs").status_code == 401
    token = create_access_token(1, "admin", "admin", expire_seconds=60)
    resp = api.client.get("/docs", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
