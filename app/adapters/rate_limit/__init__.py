"""Rate limiting adapters.

The HTTP layer depends on the abstract interface only, so the in-memory
limiter can later be replaced by a shared store without touching routes.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitDecision",
]
