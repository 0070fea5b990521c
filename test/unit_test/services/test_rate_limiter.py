"""Unit tests for the in-memory fixed-window rate limiter."""

import pytest

from bidchemz_logistics.services.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=clock)


def test_allows_up_to_the_limit(limiter):
    results = [limiter.hit("1.2.3.4") for _ in range(3)]

    assert all(r.allowed for r in results)
    assert [r.remaining for r in results] == [2, 1, 0]
    assert results[0].limit == 3
    assert results[0].retry_after == 0


def test_refuses_past_the_limit(limiter, clock):
    for _ in range(3):
        limiter.hit("1.2.3.4")
    clock.now += 20.5

    blocked = limiter.hit("1.2.3.4")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at == 1_060.0
    assert blocked.retry_after == 40


def test_window_reopens_after_expiry(limiter, clock):
    for _ in range(4):
        limiter.hit("1.2.3.4")
    clock.now += 60

    result = limiter.hit("1.2.3.4")
    assert result.allowed is True
    assert result.remaining == 2
    assert result.reset_at == 1_120.0


def test_keys_are_independent(limiter):
    for _ in range(4):
        limiter.hit("a")
    assert limiter.hit("b").allowed is True


def test_reset_clears_one_key(limiter):
    for _ in range(4):
        limiter.hit("a")
    limiter.reset("a")
    limiter.reset("never-seen")

    assert limiter.hit("a").allowed is True


def test_sweep_drops_closed_windows(limiter, clock):
    limiter.hit("a")
    clock.now += 30
    limiter.hit("b")
    clock.now += 30

    assert limiter.sweep() == 1
    assert len(limiter) == 1


def test_sweep_if_due_runs_once_per_window(limiter, clock):
    limiter.hit("a")
    clock.now += 30
    assert limiter.sweep_if_due() == 0

    clock.now += 31
    assert limiter.sweep_if_due() == 1
    assert len(limiter) == 0

    limiter.hit("b")
    clock.now += 61
    assert limiter.sweep_if_due() == 1


def test_retry_after_is_at_least_one_second(limiter, clock):
    for _ in range(3):
        limiter.hit("a")
    clock.now += 59.9
    assert limiter.hit("a").retry_after == 1


@pytest.mark.parametrize("max_requests,window", [(0, 60), (10, 0)])
def test_rejects_non_positive_configuration(max_requests, window):
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(max_requests=max_requests, window_seconds=window)
