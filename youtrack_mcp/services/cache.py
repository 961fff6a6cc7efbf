"""
TTLCache - In-memory response cache with per-entry expiry.

Features:
- TTL (Time To Live) per entry, expired entries removed lazily on lookup
- Bounded capacity with oldest-inserted eviction
- Cached None values are distinguishable from misses via CacheResult

The capacity bound is a safety valve against unbounded growth from diverse
query parameter combinations. Eviction follows insertion order, not access.
"""

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")

MAX_CACHE_ENTRIES = 1000


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with its expiry deadline."""

    data: T
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if entry is past its TTL."""
        return now > self.expires_at


@dataclass
class CacheResult(Generic[T]):
    """Result from cache lookup."""

    data: T


class TTLCache:
    """
    Key/value store with expiry and oldest-inserted eviction.

    Usage:
        cache = TTLCache(max_size=1000)

        result = cache.get(url)
        if result is not None:
            return result.data

        data = await fetch_data()
        cache.set(url, data, ttl=timedelta(minutes=5))
    """

    def __init__(
        self,
        max_size: int = MAX_CACHE_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
        debug: bool = False,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        # dicts preserve insertion order, which is the eviction order
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._clock = clock
        self._debug = debug
        self._stats = CacheStats()

    def get(self, key: str) -> CacheResult[Any] | None:
        """
        Get value from cache.

        Returns CacheResult if found and not expired, None otherwise.
        """
        entry = self._memory.get(key)
        if entry is None:
            self._stats.misses += 1
            self._log(f"MISS: {key[:80]}")
            return None

        if entry.is_expired(self._clock()):
            del self._memory[key]
            self._stats.misses += 1
            self._log(f"EXPIRED: {key[:80]}")
            return None

        self._stats.hits += 1
        self._log(f"HIT: {key[:80]}")
        return CacheResult(data=entry.data)

    def set(self, key: str, data: Any, ttl: timedelta) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            data: Data to cache (None is a valid value)
            ttl: Time to live
        """
        if len(self._memory) >= self._max_size and key not in self._memory:
            self._evict_oldest()

        self._memory[key] = CacheEntry(
            data=data,
            expires_at=self._clock() + ttl.total_seconds(),
        )
        self._log(f"SET: {key[:80]} (TTL: {ttl.total_seconds()}s)")

    def delete(self, key: str) -> bool:
        """Delete a specific key from cache."""
        if key in self._memory:
            del self._memory[key]
            self._log(f"DELETE: {key[:80]}")
            return True
        return False

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._memory)
        self._memory.clear()
        self._log(f"CLEAR: {count} entries removed")

    def __contains__(self, key: str) -> bool:
        entry = self._memory.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        return len(self._memory)

    def _evict_oldest(self) -> None:
        """Evict the oldest inserted entry."""
        if not self._memory:
            return

        oldest_key = next(iter(self._memory))
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:80]}")

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[TTLCache] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
