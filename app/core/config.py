"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env and content resolution don't depend on the cwd)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) populates values from environment variables;
    constructing through a factory keeps nested groups env-aware.
    """

    return AppSettings()


def _build_contact_settings() -> "ContactSettings":
    return ContactSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    content_dir: Path = Field(
        PROJECT_ROOT / "content",
        description="Directory holding per-locale markdown content files",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on form endpoints",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_max_tracked_keys: int = Field(
        10_000,
        description="Tracked client count above which expired windows are purged",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ContactSettings(BaseSettings):
    """Contact form integrations (Cloudflare Turnstile and Formspree)."""

    turnstile_secret_key: str | None = Field(
        None,
        description="Server-side Turnstile secret; the contact form is disabled without it",
    )
    turnstile_verify_url: str = Field(
        "https://challenges.cloudflare.com/turnstile/v0/siteverify",
        description="Turnstile siteverify endpoint",
    )
    formspree_endpoint: str | None = Field(
        "https://formspree.io/f/mvolgybr",
        description="Formspree form endpoint receiving accepted submissions",
    )
    allowed_domain: str = Field(
        "opa.so",
        description="Only submissions declaring this origin domain are accepted",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Timeout for outbound verification and forwarding calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="CONTACT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    contact: ContactSettings = Field(default_factory=_build_contact_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
