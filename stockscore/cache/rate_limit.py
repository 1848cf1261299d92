"""Fixed-window rate limiting with an in-memory `cachetools.TTLCache` window store."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TTLCache

from stockscore.core.config import Settings
from stockscore.core.exceptions import RateLimitError
from stockscore.core.logging import get_logger


logger = get_logger("cache.rate_limit")


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitResult:
    """Result of rate limit check."""

    success: bool
    remaining: int
    reset_at: int  # epoch milliseconds
    limit: int


@dataclass
class RateLimitWindow:
    """Requests admitted for one identifier in the current window."""

    identifier: str
    count: int
    reset_at: int


class RateLimiter:
    """
    Fixed-window request counter per identifier.

    A window opens on the first request from an identifier and lasts
    `window_ms`. Once it has elapsed the next request opens a fresh window
    rather than continuing the old count, so up to twice the nominal rate can
    pass around a window boundary.
    """

    def __init__(
        self,
        max_requests: int,
        window_ms: int,
        clock: Callable[[], int] = _now_ms,
        max_tracked: int = 10_000,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests allowed per window
            window_ms: Window length in milliseconds
            clock: Returns the current time in epoch milliseconds
            max_tracked: Most identifiers tracked at once; expired windows are
                swept first, then the least recently seen identifier is dropped
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be positive")
        if max_tracked < 1:
            raise ValueError("max_tracked must be at least 1")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.max_tracked = max_tracked
        self._clock = clock
        # A window stays stored for window_ms; its count is bumped in place, never re-set
        self._windows: TTLCache = TTLCache(
            maxsize=max_tracked,
            ttl=window_ms / 1000,
            timer=lambda: self._clock() / 1000,
        )

    def __len__(self) -> int:
        return len(self._windows)

    def check(self, identifier: str) -> RateLimitResult:
        """
        Count a request from `identifier` and decide whether to admit it.

        Args:
            identifier: Unique identifier (e.g., IP address)

        Returns:
            RateLimitResult with admission status and remaining quota
        """
        now = self._clock()
        window = self._windows.get(identifier)

        if window is None or now >= window.reset_at:
            window = RateLimitWindow(identifier, 1, now + self.window_ms)
            self._windows[identifier] = window
            return RateLimitResult(
                success=True,
                remaining=self.max_requests - 1,
                reset_at=window.reset_at,
                limit=self.max_requests,
            )

        if window.count >= self.max_requests:
            return RateLimitResult(
                success=False,
                remaining=0,
                reset_at=window.reset_at,
                limit=self.max_requests,
            )

        window.count += 1
        return RateLimitResult(
            success=True,
            remaining=self.max_requests - window.count,
            reset_at=window.reset_at,
            limit=self.max_requests,
        )

    def retry_after(self, result: RateLimitResult, now_ms: Optional[int] = None) -> int:
        """Seconds a rejected caller should wait, rounded up."""
        now = self._clock() if now_ms is None else now_ms
        return max(0, math.ceil((result.reset_at - now) / 1000))

    def purge_expired(self) -> int:
        """Drop windows whose reset instant has passed."""
        return len(self._windows.expire())

    def reset(self, identifier: str) -> None:
        """Forget an identifier's window."""
        self._windows.pop(identifier, None)

    def clear(self) -> None:
        """Forget every window."""
        self._windows.clear()


def create_rate_limiter(settings: Settings) -> RateLimiter:
    """Build the process-wide API rate limiter from settings."""
    return RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )


def enforce_rate_limit(limiter: RateLimiter, identifier: str) -> RateLimitResult:
    """
    Check rate limit and raise exception if exceeded.

    Raises:
        RateLimitError: If rate limit exceeded, with a Retry-After header
    """
    result = limiter.check(identifier)

    if not result.success:
        retry_after = limiter.retry_after(result)
        logger.warning(
            f"Rate limit exceeded for {identifier}",
            extra={"identifier": identifier, "retry_after": retry_after},
        )
        raise RateLimitError(
            message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
            details={
                "limit": result.limit,
                "reset_at": result.reset_at,
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    return result
