"""Rate limiter interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        retry_after_seconds: Seconds to wait before retrying. Only set (and
            always >= 1) when the request is denied.
    """

    allowed: bool
    retry_after_seconds: int | None = None

    @classmethod
    def allow(cls) -> "RateLimitDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, retry_after_seconds: int) -> "RateLimitDecision":
        return cls(allowed=False, retry_after_seconds=max(1, retry_after_seconds))


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` and decide whether it is allowed.

        Args:
            key: Caller identifier (e.g., client IP).

        Returns:
            RateLimitDecision describing whether the request may proceed.
        """
        raise NotImplementedError
