"""In-memory response cache and rate limiting."""

from .cache import (
    CachedResult,
    CacheEntry,
    ResponseCache,
    cache_key,
    create_response_cache,
)
from .rate_limit import (
    RateLimiter,
    RateLimitResult,
    RateLimitWindow,
    create_rate_limiter,
    enforce_rate_limit,
)


__all__ = [
    # Cache
    "CacheEntry",
    "CachedResult",
    "ResponseCache",
    "cache_key",
    "create_response_cache",
    # Rate limiting
    "RateLimitResult",
    "RateLimitWindow",
    "RateLimiter",
    "create_rate_limiter",
    "enforce_rate_limit",
]
