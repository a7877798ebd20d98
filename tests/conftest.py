"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so that settings are
built from known values instead of a developer's local .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("CONTACT_TURNSTILE_SECRET_KEY", "turnstile-test-secret")
os.environ.setdefault("CONTACT_FORMSPREE_ENDPOINT", "https://formspree.test/f/contact")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from app.core.rate_limit import get_rate_limiter


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Give every test a fresh per-client budget."""
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()
