"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Windows start at a key's first request, not at clock-aligned boundaries.
- Bursts straddling a window boundary can briefly allow close to twice the
  nominal rate.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
MAX_REQUESTS_PER_WINDOW = 5
MAX_TRACKED_KEYS = 10_000


@dataclass
class _WindowState:
    count: int
    window_start: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key within a fixed window.

    Each key gets its own window, opened by the first request seen for it.
    Once ``max_requests`` requests were allowed inside the window, further
    requests are denied until the window has fully elapsed. Denied requests
    are not counted.

    Expired entries are swept only when the store grows past
    ``max_tracked_keys``; sweeping never changes a decision since an expired
    entry is reset on its next check anyway.
    """

    def __init__(
        self,
        *,
        max_requests: int = MAX_REQUESTS_PER_WINDOW,
        window_seconds: float = WINDOW_SECONDS,
        max_tracked_keys: int | None = MAX_TRACKED_KEYS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_requests: Maximum allowed requests per window.
            window_seconds: Window duration in seconds.
            max_tracked_keys: Store size above which expired entries are
                purged before tracking a new key (None disables purging).
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is not positive.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if max_tracked_keys is not None and max_tracked_keys < 1:
            raise ValueError("max_tracked_keys must be >= 1")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._max_tracked_keys = max_tracked_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        return len(self._state_by_key)

    def count_for(self, key: str) -> int:
        """Return the number of requests counted in the key's current window."""
        with self._lock:
            state = self._state_by_key.get(key)
            return state.count if state else 0

    def _is_expired(self, state: _WindowState, now: float) -> bool:
        return now - state.window_start > self._window_seconds

    def _retry_after(self, state: _WindowState, now: float) -> int:
        remaining = self._window_seconds - (now - state.window_start)
        return max(1, math.ceil(remaining))

    def purge_expired(self) -> int:
        """Drop entries whose window has elapsed.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, s in self._state_by_key.items() if self._is_expired(s, now)]
            for key in expired:
                del self._state_by_key[key]
            tracked = len(self._state_by_key)

        if expired:
            logger.debug(
                "rate_limit.purged",
                extra={"purged": len(expired), "tracked": tracked},
            )
        return len(expired)

    def _start_window(self, key: str, now: float) -> None:
        if (
            key not in self._state_by_key
            and self._max_tracked_keys is not None
            and len(self._state_by_key) >= self._max_tracked_keys
        ):
            self.purge_expired()
        self._state_by_key[key] = _WindowState(count=1, window_start=now)

    def check(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` and decide whether it is allowed.

        Never raises: any string key, including an empty one, is accepted.

        Args:
            key: Caller identifier (e.g., client IP).

        Returns:
            RateLimitDecision. Denied decisions carry ``retry_after_seconds``
            of at least 1.
        """
        now = self._clock()

        with self._lock:
            state = self._state_by_key.get(key)

            if state is None or self._is_expired(state, now):
                self._start_window(key, now)
                return RateLimitDecision.allow()

            if state.count >= self._max_requests:
                return RateLimitDecision.deny(self._retry_after(state, now))

            state.count += 1
            return RateLimitDecision.allow()

    def reset(self) -> None:
        """Forget all tracked keys."""
        with self._lock:
            self._state_by_key.clear()
