"""
api/main.py -- FastAPI application entry point for the portfolio backend.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for the portfolio front-end
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan owns every process-wide resource: the database Engine (connection
pool), both stores, the Brevo client, and the two services built on them.
Route handlers reach the services through request.app.state and never
create or close resources themselves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.contact import router as contact_router
from auth.dependencies import require_session
from auth.models import SessionClaims
from auth.service import AuthService
from auth.store import AdminStore
from contact.service import ContactService
from contact.store import ContactStore
from core.brevo import BrevoClient
from core.config import get_settings
from core.database import create_db_engine
from core.errors import AppError, InternalError

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("portfolio.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared resources on startup and release them on shutdown.

    Startup order matters: the Engine first, then the stores that use it,
    then the services that use the stores.
    """
    logger.info("Portfolio API starting up")
    engine = create_db_engine(_settings.database_url)
    app.state.engine = engine
    app.state.admin_store = AdminStore(engine)
    app.state.contact_store = ContactStore(engine)
    app.state.brevo = BrevoClient(
        api_key=_settings.brevo_api_key,
        base_url=_settings.brevo_api_url,
        sender_email=_settings.mail_sender_email,
        sender_name=_settings.mail_sender_name,
    )
    app.state.auth_service = AuthService(
        store=app.state.admin_store,
        mailer=app.state.brevo,
        session_ttl_seconds=_settings.session_ttl_seconds,
        password_reset_url=_settings.password_reset_url,
        self_registration_enabled=_settings.self_registration_enabled,
    )
    app.state.contact_service = ContactService(
        store=app.state.contact_store,
        client=app.state.brevo,
        message_required=_settings.contact_message_required,
    )
    logger.info(
        "Auth initialized (transport=%s, admins_present=%s)",
        _settings.session_transport,
        app.state.admin_store.has_admins(),
    )

    yield

    app.state.brevo.close()
    engine.dispose()
    logger.info("Portfolio API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Portfolio API",
    description="Admin authentication and contact form backend for the portfolio site.",
    version=__version__,
    lifespan=lifespan,
    # Auth-protected equivalents are registered below.
    docs_url=None,
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(contact_router, prefix="/api", tags=["Contact"])


@app.get("/docs", include_in_schema=False)
async def docs(claims: SessionClaims = Depends(require_session)):
    """Swagger UI -- requires an admin session."""
    return get_swagger_ui_html(openapi_url="/openapi.json", title="Portfolio API")


@app.get("/redoc", include_in_schema=False)
async def redoc(claims: SessionClaims = Depends(require_session)):
    """ReDoc UI -- requires an admin session."""
    return get_redoc_html(openapi_url="/openapi.json", title="Portfolio API")


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail=None) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )
    if status_code == 401:
        response.headers["Cache-Control"] = "no-store"
    return response


def _render(exc: AppError) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.message, exc.detail)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors raised by the services."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _render(exc)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error_response(429, "rate_limited", "Too many requests.", str(exc))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body or query params fail type/length validation."""
    return _error_response(400, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures become a generic 500; the SQL error stays in the log."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _render(InternalError())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 unknown route, 405 wrong method) in the envelope."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _render(InternalError())


# ---------------------------------------------------------------------------
# Liveness
#
# No rate limit applied -- health checks from the hosting platform must not
# be throttled.
# ---------------------------------------------------------------------------


@app.get("/", include_in_schema=False)
async def root() -> PlainTextResponse:
    return PlainTextResponse("Backend is running")


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
