"""Tests for the fixed-window rate limiter."""

import pytest

from stockscore.cache import RateLimiter, create_rate_limiter, enforce_rate_limit
from stockscore.core.exceptions import RateLimitError


START_MS = 1_700_000_000_000


@pytest.fixture
def limiter(clock) -> RateLimiter:
    clock.now = START_MS
    return RateLimiter(max_requests=3, window_ms=60_000, clock=clock)


class TestRateLimiter:
    def test_admits_up_to_limit(self, limiter):
        results = [limiter.check("1.2.3.4") for _ in range(4)]

        assert [r.success for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]
        assert {r.reset_at for r in results} == {START_MS + 60_000}
        assert all(r.limit == 3 for r in results)

    def test_rejected_requests_do_not_extend_window(self, limiter, clock):
        for _ in range(5):
            limiter.check("ip")
        clock.advance(60_000)
        assert limiter.check("ip").success is True

    def test_new_window_after_expiry(self, limiter, clock):
        for _ in range(3):
            limiter.check("ip")
        clock.advance(59_999)
        assert limiter.check("ip").success is False

        clock.advance(1)
        result = limiter.check("ip")
        assert result.success is True
        assert result.remaining == 2
        assert result.reset_at == START_MS + 120_000

    def test_identifiers_are_independent(self, limiter):
        for _ in range(3):
            limiter.check("a")
        assert limiter.check("a").success is False
        assert limiter.check("b").success is True

    def test_retry_after_rounds_up(self, limiter, clock):
        for _ in range(3):
            limiter.check("ip")
        clock.advance(58_500)
        rejected = limiter.check("ip")
        assert limiter.retry_after(rejected) == 2

    def test_purge_and_reset(self, limiter, clock):
        limiter.check("a")
        limiter.check("b")
        limiter.reset("a")
        assert len(limiter) == 1
        clock.advance(60_000)
        assert limiter.purge_expired() == 1
        assert len(limiter) == 0

    def test_sweeps_when_tracking_too_many(self, clock):
        clock.now = START_MS
        limiter = RateLimiter(max_requests=1, window_ms=1_000, clock=clock, max_tracked=2)
        limiter.check("a")
        limiter.check("b")
        clock.advance(1_000)
        limiter.check("c")
        assert len(limiter) == 1

    def test_drops_least_recently_seen_when_full(self, clock):
        clock.now = START_MS
        limiter = RateLimiter(max_requests=1, window_ms=60_000, clock=clock, max_tracked=2)
        limiter.check("a")
        limiter.check("b")
        assert limiter.check("a").success is False
        limiter.check("c")

        assert len(limiter) == 2
        assert limiter.check("a").success is False
        assert limiter.check("b").success is True

    def test_window_is_not_extended_by_admitted_requests(self, limiter, clock):
        limiter.check("ip")
        clock.advance(30_000)
        limiter.check("ip")
        clock.advance(30_000)
        result = limiter.check("ip")
        assert result.remaining == 2
        assert result.reset_at == START_MS + 120_000

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_requests": 0, "window_ms": 1},
            {"max_requests": 1, "window_ms": 0},
            {"max_requests": 1, "window_ms": 1, "max_tracked": 0},
        ],
    )
    def test_rejects_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            RateLimiter(**kwargs)

    def test_factory_uses_settings(self, test_settings):
        limiter = create_rate_limiter(test_settings)
        assert limiter.max_requests == test_settings.rate_limit_max_requests
        assert limiter.window_ms == test_settings.rate_limit_window_ms


class TestEnforceRateLimit:
    def test_passes_through_success(self, limiter):
        assert enforce_rate_limit(limiter, "ip").remaining == 2

    def test_raises_with_retry_after(self, limiter, clock):
        for _ in range(3):
            enforce_rate_limit(limiter, "ip")
        clock.advance(30_000)

        with pytest.raises(RateLimitError) as exc_info:
            enforce_rate_limit(limiter, "ip")

        error = exc_info.value
        assert error.status_code == 429
        assert error.headers == {"Retry-After": "30"}
        assert error.details["reset_at"] == START_MS + 60_000
        assert error.details["limit"] == 3
