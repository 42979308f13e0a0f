"""
tests/conftest.py -- Shared test fixtures for the portfolio backend.

This module provides:
  - engine / admin_store / contact_store: isolated in-memory SQLite stores
  - mailer: MagicMock standing in for BrevoClient (no network calls)
  - auth_service / contact_service: services wired to the fixtures above
  - api: TestClient on the real FastAPI app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. Each test gets its own DB name so state never leaks between tests.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. RATE_LIMIT_ENABLED=false keeps the
login limit from tripping across many login calls; test_rate_limit.py turns
the shared limiter back on for its own tests.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import MagicMock

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Admin
from auth.service import AuthService
from auth.store import AdminStore
from auth.tokens import hash_password
from contact.service import ContactService
from contact.store import ContactStore
from core.brevo import BrevoClient
from core.database import create_db_engine

RESET_URL = "http://testserver/admin/reset-password"
SESSION_TTL = 3600


# ---------------------------------------------------------------------------
# Stores and services
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    url = f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = create_db_engine(url)
    yield eng
    eng.dispose()


@pytest.fixture
def admin_store(engine) -> AdminStore:
    return AdminStore(engine)


@pytest.fixture
def contact_store(engine) -> ContactStore:
    return ContactStore(engine)


@pytest.fixture
def mailer() -> MagicMock:
    client = MagicMock(spec=BrevoClient)
    client.send_email.return_value = {"messageId": "<test@brevo>"}
    client.add_contact.return_value = {"id": 42}
    return client


@pytest.fixture
def auth_service(admin_store, mailer) -> AuthService:
    return AuthService(
        store=admin_store,
        mailer=mailer,
        session_ttl_seconds=SESSION_TTL,
        password_reset_url=RESET_URL,
    )


@pytest.fixture
def contact_service(contact_store, mailer) -> ContactService:
    return ContactService(store=contact_store, client=mailer)


@pytest.fixture
def seeded_admin(admin_store) -> Admin:
    """An admin 'owner' / 'owner-pass-1' with email owner@example.com."""
    admin = Admin(
        username="owner",
        email="owner@example.com",
        password_hash=hash_password("owner-pass-1"),
    )
    admin.id = admin_store.create_admin(admin)
    return admin


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def _patch_lifespan(state: SimpleNamespace):
    """Return a lifespan that wires the test stores/services into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.admin_store = state.admin_store
        app.state.contact_store = state.contact_store
        app.state.brevo = state.brevo
        app.state.auth_service = state.auth_service
        app.state.contact_service = state.contact_service
        yield

    return test_lifespan


@pytest.fixture
def api(admin_store, contact_store, mailer, auth_service, contact_service) -> Generator[SimpleNamespace, None, None]:
    """Yield a namespace with .client plus the stores and the mocked Brevo client.

    follow_redirects=False and a fresh cookie jar per test: a login in one
    test must never authenticate the next.
    """
    state = SimpleNamespace(
        admin_store=admin_store,
        contact_store=contact_store,
        brevo=mailer,
        auth_service=auth_service,
        contact_service=contact_service,
    )
    app.router.lifespan_context = _patch_lifespan(state)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        state.client = client
        yield state
