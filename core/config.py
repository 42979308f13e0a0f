"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the portfolio backend happen here. No
module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Dev mode generates a SECRET_KEY with a
      warning, production mode refuses to start without one.

Session policy:
  Two token lifetimes exist -- 7 days when the token rides in the session
  cookie, 1 hour when it is handed to the client as a bearer value. Which one
  applies is selected by SESSION_TRANSPORT; session_ttl_seconds resolves it.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or contact/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("portfolio.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'portfolio.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    session_transport: Literal["cookie", "bearer"] = "cookie"
    session_cookie_name: str = "aid"
    secure_cookies: bool = False
    cookie_token_ttl_seconds: int = 7 * 24 * 60 * 60
    bearer_token_ttl_seconds: int = 60 * 60
    reset_token_ttl_seconds: int = 15 * 60

    # ------------------------------------------------------------------
    # Admin accounts
    # ------------------------------------------------------------------

    self_registration_enabled: bool = True
    password_reset_url: str = "http://localhost:3000/admin/reset-password"
    # Read by `python main.py seed-admin` only.
    admin_username: str = ""
    admin_password: str = ""

    # ------------------------------------------------------------------
    # Contact form
    # ------------------------------------------------------------------

    contact_message_required: bool = False

    # ------------------------------------------------------------------
    # Brevo (contacts + transactional email)
    # ------------------------------------------------------------------

    brevo_api_key: str = ""
    brevo_api_url: str = "https://api.brevo.com/v3"
    mail_sender_email: str = "no-reply@localhost"
    mail_sender_name: str = "Portfolio"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"
    contact_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def session_ttl_seconds(self) -> int:
        """Token lifetime for the configured transport."""
        if self.session_transport == "cookie":
            return self.cookie_token_ttl_seconds
        return self.bearer_token_ttl_seconds

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Sessions will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
