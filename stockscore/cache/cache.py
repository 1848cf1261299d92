"""In-memory response cache with per-entry TTL and optional stampede protection."""

from __future__ import annotations

import asyncio
import inspect
import math
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Tuple, TypeVar, Union

from cachetools import TLRUCache

from stockscore.core.config import Settings
from stockscore.core.logging import get_logger


logger = get_logger("cache")

T = TypeVar("T")

Fetcher = Callable[[], Union[T, Awaitable[T]]]

KEY_DELIMITER = ":"


def _escape_part(part: Any) -> str:
    # Escaping keeps the join injective: ("a:b",) and ("a", "b") never collide
    return str(part).replace("%", "%25").replace(KEY_DELIMITER, "%3A")


def cache_key(namespace: str, *parts: Union[str, int, float, None]) -> str:
    """
    Build a namespaced cache key from a functional area and its parameters.

    Usage:
        cache_key("financials", "TCS", "income-statement", "annual")
            -> "financials:TCS:income-statement:annual"
    """
    return KEY_DELIMITER.join(_escape_part(p) for p in (namespace, *parts))


@dataclass(frozen=True)
class CacheEntry:
    """A stored value and how many seconds it is served for."""

    key: str
    value: Any
    ttl: float


@dataclass(frozen=True)
class CachedResult(Generic[T]):
    """Value returned by `get_or_set` along with whether it came from the cache."""

    data: T
    cached: bool


def _entry_expiry(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class _EntryStore(TLRUCache):
    """TLRUCache of `CacheEntry` that counts what it drops."""

    def __init__(self, maxsize: float, timer: Callable[[], float]):
        super().__init__(maxsize=maxsize, ttu=_entry_expiry, timer=timer)
        self.evictions = 0

    def expire(self, time: Optional[float] = None) -> List[Tuple[str, CacheEntry]]:
        expired = super().expire(time)
        if expired:
            self.evictions += len(expired)
            logger.debug(f"Cache expired {len(expired)} entries")
        return expired

    def popitem(self) -> Tuple[str, CacheEntry]:
        key, entry = super().popitem()
        self.evictions += 1
        logger.debug(f"Cache evicted (capacity): {key}")
        return key, entry


class ResponseCache:
    """
    Process-local cache-aside store on top of `cachetools.TLRUCache`.

    Each entry expires `ttl` seconds after it was set. Expired entries are
    never served and are dropped by `purge_expired()`, by `len()` and before
    every insert; at capacity the least recently used live entry goes.
    All mutations happen between await points, so a single event loop needs
    no locking.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_entries = max_entries
        self._clock = clock
        self._entries = self._new_store()
        self._inflight: Dict[str, asyncio.Future] = {}
        self.hits = 0
        self.misses = 0

    def _new_store(self) -> _EntryStore:
        maxsize = math.inf if self.max_entries is None else self.max_entries
        return _EntryStore(maxsize=maxsize, timer=self._clock)

    @property
    def evictions(self) -> int:
        return self._entries.evictions

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def _lookup(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a live value, or `default` when missing or expired."""
        entry = self._lookup(key)
        if entry is None:
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store `value` under `key` for `ttl` seconds."""
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._entries[key] = CacheEntry(key, value, ttl)
        logger.debug(f"Cache set: {key}, TTL: {ttl}s")

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        self._entries = self._new_store()
        self.hits = 0
        self.misses = 0

    def purge_expired(self) -> int:
        """Evict all expired entries. Returns the number removed."""
        return len(self._entries.expire())

    def stats(self) -> Dict[str, int]:
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }

    async def _fetch(self, fetcher: Fetcher) -> Any:
        value = fetcher()
        if inspect.isawaitable(value):
            value = await value
        return value

    async def get_or_set(
        self,
        key: str,
        ttl: float,
        fetcher: Fetcher,
    ) -> CachedResult:
        """
        Cache-aside lookup.

        On a hit returns the stored value with `cached=True`. On a miss runs
        `fetcher` (sync or async), stores the result for `ttl` seconds and
        returns it with `cached=False`. A failing fetcher stores nothing.
        Concurrent misses for the same key each run `fetcher`.
        """
        entry = self._lookup(key)
        if entry is not None:
            self.hits += 1
            logger.debug(f"Cache hit: {key}")
            return CachedResult(data=entry.value, cached=True)

        self.misses += 1
        logger.debug(f"Cache miss: {key}")
        data = await self._fetch(fetcher)
        self.set(key, data, ttl)
        return CachedResult(data=data, cached=False)

    async def get_or_set_with_lock(
        self,
        key: str,
        ttl: float,
        fetcher: Fetcher,
    ) -> CachedResult:
        """
        Cache-aside lookup with single-flight protection.

        Only one `fetcher` runs per key at a time; concurrent misses wait for
        it and share its result (or its exception).
        """
        entry = self._lookup(key)
        if entry is not None:
            self.hits += 1
            return CachedResult(data=entry.value, cached=True)

        pending = self._inflight.get(key)
        if pending is not None:
            logger.debug(f"Cache coalesced: {key}")
            data = await asyncio.shield(pending)
            return CachedResult(data=data, cached=True)

        self.misses += 1
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            data = await self._fetch(fetcher)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure does not warn at GC
            future.exception()
            raise
        else:
            self.set(key, data, ttl)
            future.set_result(data)
            return CachedResult(data=data, cached=False)
        finally:
            self._inflight.pop(key, None)


def create_response_cache(settings: Settings) -> ResponseCache:
    """Build the process-wide response cache from settings."""
    return ResponseCache(max_entries=settings.cache_max_entries)
