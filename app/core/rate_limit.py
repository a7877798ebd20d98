"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Fixed window per client IP (first hop of X-Forwarded-For when proxied).
- Denied requests get HTTP 429 with a Retry-After hint.
- Best-effort and per-process; it protects form endpoints from casual abuse,
  it is not a quota system.
"""

from __future__ import annotations

import hashlib
import logging
import threading

from fastapi import HTTPException, Request, status

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.client_ip import resolve_client_ip
from app.core.config import settings

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None
_limiter_lock = threading.Lock()


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_max_tracked_keys,
    )

    with _limiter_lock:
        if _limiter is None or _limiter_config != config:
            _limiter = InMemoryFixedWindowRateLimiter(
                max_requests=config[0],
                window_seconds=config[1],
                max_tracked_keys=config[2],
            )
            _limiter_config = config

        return _limiter


def check_rate_limit_for_key(key: str) -> RateLimitDecision:
    """Check ``key`` against the process-wide limiter."""

    return get_rate_limiter().check(key)


def build_rate_limit_key(request: Request) -> str:
    """Build the namespaced limiter key for the current request."""

    return f"ip:{resolve_client_ip(request) or 'unknown'}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client IPs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client rate limit.

    Args:
        request: FastAPI request.

    Raises:
        HTTPException: 429 Too Many Requests when the client exceeded its
            budget for the current window.
    """

    if not settings.app.rate_limit_enabled:
        return

    key = build_rate_limit_key(request)
    decision = check_rate_limit_for_key(key)
    key_hash = _hash_limiter_key(key)

    if decision.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={"key_hash": key_hash, "route": request.url.path},
        )
        return

    retry_after = decision.retry_after_seconds or 1
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "route": request.url.path,
            "limit": settings.app.rate_limit_requests,
            "window_s": settings.app.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Please try again later.",
        headers={"Retry-After": str(retry_after)},
    )
