"""
intercache — Memory Cache Backend

In-process storage with LRU eviction and TTL support.
Safe for concurrent tasks within one event loop; entries are not shared
between processes.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any

from ..interface import MISSING, CacheBackendInterface

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheBackendInterface):
    """
    In-memory cache backend with LRU eviction.

    Features:
    - LRU eviction when max_size is reached
    - Per-key TTL support
    - Namespaced keys
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 3600,
        namespace: str = "intercache",
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (0 = no expiry)
            namespace: Cache key namespace/prefix
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.max_size = max_size
        self.default_ttl = max(0, int(default_ttl))
        self.namespace = namespace

        # key -> (value, expiry_time)
        self._cache: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0

        self._lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    def _is_expired(self, expiry: float | None) -> bool:
        if expiry is None:
            return False
        return time.monotonic() > expiry

    async def get(self, key: str) -> Any:
        """Retrieve value from cache."""
        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key not in self._cache:
                self._misses += 1
                return MISSING

            value, expiry = self._cache[cache_key]

            if self._is_expired(expiry):
                del self._cache[cache_key]
                self._misses += 1
                return MISSING

            # Mark as recently used
            self._cache.move_to_end(cache_key)
            self._hits += 1

            return value

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Store value in cache."""
        async with self._lock:
            cache_key = self._make_key(key)

            if ttl is None:
                ttl = self.default_ttl

            expiry = time.monotonic() + ttl if ttl > 0 else None

            # Evict if at capacity and key is new
            if cache_key not in self._cache and len(self._cache) >= self.max_size:
                evicted_key, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted key from memory cache: {evicted_key}")

            self._cache[cache_key] = (value, expiry)
            self._cache.move_to_end(cache_key)
            self._sets += 1

            return True

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key in self._cache:
                del self._cache[cache_key]
                self._deletes += 1
                return True

            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key not in self._cache:
                return False

            _, expiry = self._cache[cache_key]

            if self._is_expired(expiry):
                del self._cache[cache_key]
                return False

            return True

    async def clear(self) -> bool:
        """Clear all entries from cache."""
        async with self._lock:
            size = len(self._cache)
            self._cache.clear()
            self._deletes += size
            logger.info(f"Cleared {size} entries from memory cache namespace '{self.namespace}'")
            return True

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        async with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "backend": "memory",
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "sets": self._sets,
                "deletes": self._deletes,
                "evictions": self._evictions,
                "namespace": self.namespace,
            }

    async def close(self) -> None:
        """Memory backend holds no external resources."""
        logger.debug(f"Memory cache backend closed for namespace '{self.namespace}'")
