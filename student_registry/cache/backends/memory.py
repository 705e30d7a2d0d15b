"""
Student Registry - Memory Cache Backend

In-memory cache implementation with per-key TTL, LRU capacity bound and a
live-key tracking set used for pattern removal.
Safe for concurrent use by tasks of a single event loop.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from ..interface import CacheInterface
from ..serialization import UNDECODABLE, from_json, to_json

logger = logging.getLogger(__name__)

# Eviction reasons reported to the eviction hook
EXPIRED = "expired"
CAPACITY = "capacity"


class MemoryCacheBackend(CacheInterface):
    """
    In-memory cache backend.

    Features:
    - Per-key TTL with lazy expiry
    - LRU eviction when max_size is reached
    - Values stored as JSON text, so callers never share mutable state with the cache
    - Live-key tracking set kept in step with the store by an eviction hook
    - One asyncio.Lock guards the store and the tracking set together
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float = 600,
        namespace: str = "registry",
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (0 = no expiry)
            namespace: Cache key namespace/prefix
            clock: Monotonic time source, in seconds
        """
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.namespace = namespace
        self._clock = clock

        # Cache storage: namespaced key -> (json payload, expiry)
        self._cache: OrderedDict[str, tuple[str, float | None]] = OrderedDict()

        # Caller-visible keys currently present in _cache
        self._tracked_keys: set[str] = set()

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0
        self._expirations = 0

        self._lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    def _strip_key(self, cache_key: str) -> str:
        return cache_key[len(self.namespace) + 1 :]

    def _is_expired(self, expiry: float | None) -> bool:
        """Check if entry is expired."""
        if expiry is None:
            return False
        return self._clock() >= expiry

    def _on_evict(self, cache_key: str, reason: str) -> None:
        """Eviction hook. Must be called with the lock held."""
        self._tracked_keys.discard(self._strip_key(cache_key))
        if reason == EXPIRED:
            self._expirations += 1
        else:
            self._evictions += 1
        logger.debug(f"Evicted key from memory cache: {cache_key} ({reason})")

    def _evict(self, cache_key: str, reason: str) -> None:
        del self._cache[cache_key]
        self._on_evict(cache_key, reason)

    def _discard(self, cache_key: str) -> bool:
        """Explicit removal. Must be called with the lock held."""
        if cache_key not in self._cache:
            return False
        del self._cache[cache_key]
        self._tracked_keys.discard(self._strip_key(cache_key))
        self._deletes += 1
        return True

    def _purge_expired(self) -> int:
        """Drop every expired entry. Must be called with the lock held."""
        expired = [k for k, (_, expiry) in self._cache.items() if self._is_expired(expiry)]
        for cache_key in expired:
            self._evict(cache_key, EXPIRED)
        return len(expired)

    async def get(self, key: str) -> Any | None:
        """Retrieve value from cache."""
        if not key:
            logger.warning("Attempted to get cache value with empty key")
            return None

        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key not in self._cache:
                self._misses += 1
                return None

            payload, expiry = self._cache[cache_key]

            if self._is_expired(expiry):
                self._evict(cache_key, EXPIRED)
                self._misses += 1
                return None

            value = from_json(key, payload)
            if value is UNDECODABLE:
                self._discard(cache_key)
                self._misses += 1
                return None

            # Move to end (mark as recently used)
            self._cache.move_to_end(cache_key)
            self._hits += 1

            return value

    async def set(
        self,
        key: str,
        value: Any,
        ttl: float | None = None,
    ) -> bool:
        """Store value in cache. A negative ttl raises ValueError."""
        if ttl is not None and ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")

        if not key:
            logger.warning("Attempted to set cache value with empty key")
            return False

        # Serialize outside the lock; raises CacheOperationError on bad values
        payload = to_json(key, value)

        async with self._lock:
            cache_key = self._make_key(key)

            if ttl is None:
                ttl = self.default_ttl

            expiry = self._clock() + ttl if ttl > 0 else None

            # Evict if at capacity and key is new
            if cache_key not in self._cache and len(self._cache) >= self.max_size:
                if not self._purge_expired():
                    oldest_key = next(iter(self._cache))
                    self._evict(oldest_key, CAPACITY)

            self._cache[cache_key] = (payload, expiry)
            self._cache.move_to_end(cache_key)
            self._tracked_keys.add(key)
            self._sets += 1

            return True

    async def remove(self, key: str) -> bool:
        """Remove key from cache."""
        if not key:
            logger.warning("Attempted to remove cache value with empty key")
            return False

        async with self._lock:
            return self._discard(self._make_key(key))

    async def remove_by_pattern(self, pattern: str) -> int:
        """Remove every tracked key matching a glob pattern, ignoring case."""
        if not pattern:
            return 0

        async with self._lock:
            self._purge_expired()

            lowered = pattern.lower()
            matches = [k for k in self._tracked_keys if fnmatch.fnmatchcase(k.lower(), lowered)]

            count = 0
            for key in matches:
                if self._discard(self._make_key(key)):
                    count += 1

            if count:
                logger.debug(
                    f"Removed {count} key(s) matching '{pattern}' from memory cache",
                    extra={"pattern": pattern, "namespace": self.namespace, "removed": count},
                )
            return count

    async def exists(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        if not key:
            return False

        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key not in self._cache:
                return False

            _, expiry = self._cache[cache_key]

            if self._is_expired(expiry):
                self._evict(cache_key, EXPIRED)
                return False

            return True

    async def clear(self) -> bool:
        """Clear all entries from cache."""
        async with self._lock:
            size = len(self._cache)
            self._cache.clear()
            self._tracked_keys.clear()
            logger.info(f"Cleared {size} entries from memory cache namespace '{self.namespace}'")
            return True

    async def tracked_keys(self) -> set[str]:
        """Snapshot of the keys currently tracked for pattern removal."""
        async with self._lock:
            self._purge_expired()
            return set(self._tracked_keys)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        async with self._lock:
            self._purge_expired()
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "backend": "memory",
                "size": len(self._cache),
                "tracked_keys": len(self._tracked_keys),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "sets": self._sets,
                "deletes": self._deletes,
                "evictions": self._evictions,
                "expirations": self._expirations,
                "namespace": self.namespace,
            }

    async def close(self) -> None:
        """Close cache and release resources."""
        logger.debug(f"Memory cache backend closed for namespace '{self.namespace}'")
