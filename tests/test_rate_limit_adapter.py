"""Unit tests for the in-memory fixed-window rate limiter."""

from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.base import RateLimitDecision
from app.adapters.rate_limit.in_memory import (
    MAX_REQUESTS_PER_WINDOW,
    WINDOW_SECONDS,
    InMemoryFixedWindowRateLimiter,
)


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=1000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=clock)


def test_defaults_are_five_requests_per_minute(limiter: InMemoryFixedWindowRateLimiter) -> None:
    assert MAX_REQUESTS_PER_WINDOW == 5
    assert WINDOW_SECONDS == 60
    assert limiter.max_requests == 5
    assert limiter.window_seconds == 60


def test_first_request_for_fresh_key_is_allowed(limiter: InMemoryFixedWindowRateLimiter) -> None:
    decision = limiter.check("fresh")

    assert decision == RateLimitDecision(allowed=True)
    assert decision.retry_after_seconds is None
    assert limiter.count_for("fresh") == 1


def test_sixth_request_in_window_is_denied(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    clock.return_value = 0.0
    for _ in range(5):
        assert limiter.check("ip-1").allowed is True

    blocked = limiter.check("ip-1")

    assert blocked.allowed is False
    assert blocked.retry_after_seconds is not None
    assert 1 <= blocked.retry_after_seconds <= 60


def test_window_resets_after_duration(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    clock.return_value = 0.0
    for _ in range(5):
        limiter.check("ip-1")
    assert limiter.check("ip-1").allowed is False

    clock.return_value = 61.0
    assert limiter.check("ip-1").allowed is True
    assert limiter.count_for("ip-1") == 1


def test_window_still_open_exactly_at_boundary(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    for _ in range(5):
        limiter.check("k")

    clock.return_value = 1000.0 + WINDOW_SECONDS
    blocked = limiter.check("k")

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 1


def test_denied_requests_are_not_counted(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    for _ in range(8):
        limiter.check("k")

    assert limiter.count_for("k") == 5


def test_retry_after_reflects_time_left_in_window(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    for _ in range(5):
        limiter.check("k")

    clock.return_value = 1000.0 + 20.5
    blocked = limiter.check("k")

    assert blocked.retry_after_seconds == 40


def test_retry_after_is_at_least_one_second(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    for _ in range(5):
        limiter.check("k")

    clock.return_value = 1000.0 + 59.999
    blocked = limiter.check("k")

    assert blocked.retry_after_seconds == 1


def test_window_is_anchored_at_first_request(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    clock.return_value = 1050.0
    for _ in range(5):
        limiter.check("k")

    # A clock-aligned window would have rolled over at t=1080.
    clock.return_value = 1090.0
    assert limiter.check("k").allowed is False


def test_isolated_by_key(limiter: InMemoryFixedWindowRateLimiter) -> None:
    for _ in range(5):
        limiter.check("k1")
    assert limiter.check("k1").allowed is False

    assert limiter.check("k2").allowed is True
    assert limiter.count_for("k1") == 5
    assert limiter.count_for("k2") == 1


def test_separate_instances_do_not_share_state(clock: Mock) -> None:
    first = InMemoryFixedWindowRateLimiter(max_requests=1, clock=clock)
    second = InMemoryFixedWindowRateLimiter(max_requests=1, clock=clock)

    assert first.check("k").allowed is True
    assert first.check("k").allowed is False
    assert second.check("k").allowed is True


def test_empty_key_is_accepted(limiter: InMemoryFixedWindowRateLimiter) -> None:
    assert limiter.check("").allowed is True


def test_purge_expired_drops_only_elapsed_windows(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock
) -> None:
    limiter.check("old")
    clock.return_value = 1030.0
    limiter.check("recent")

    clock.return_value = 1070.0
    removed = limiter.purge_expired()

    assert removed == 1
    assert len(limiter) == 1
    assert limiter.count_for("old") == 0
    assert limiter.count_for("recent") == 1


def test_purge_logs_remaining_tracked_keys(
    limiter: InMemoryFixedWindowRateLimiter, clock: Mock, caplog: pytest.LogCaptureFixture
) -> None:
    limiter.check("old")
    clock.return_value = 1030.0
    limiter.check("recent")
    clock.return_value = 1070.0

    with caplog.at_level("DEBUG", logger="app.adapters.rate_limit.in_memory"):
        limiter.purge_expired()

    records = [r for r in caplog.records if r.getMessage() == "rate_limit.purged"]
    assert len(records) == 1
    assert records[0].purged == 1
    assert records[0].tracked == 1


def test_store_is_purged_when_tracking_too_many_keys(clock: Mock) -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_tracked_keys=2, clock=clock)
    limiter.check("a")
    limiter.check("b")

    clock.return_value = 1061.0
    limiter.check("c")

    assert len(limiter) == 1
    assert limiter.count_for("c") == 1


def test_purge_does_not_drop_active_windows(clock: Mock) -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_tracked_keys=1, clock=clock)
    for _ in range(5):
        limiter.check("a")

    limiter.check("b")

    assert len(limiter) == 2
    assert limiter.check("a").allowed is False


def test_reset_forgets_all_keys(limiter: InMemoryFixedWindowRateLimiter) -> None:
    for _ in range(5):
        limiter.check("k")

    limiter.reset()

    assert len(limiter) == 0
    assert limiter.check("k").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_requests": 0},
        {"window_seconds": 0},
        {"max_tracked_keys": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)


def test_deny_decision_floors_retry_after() -> None:
    assert RateLimitDecision.deny(0).retry_after_seconds == 1
