"""
intercache — Cache Manager

Registry resolving logical cache names to Cache instances.

Caches are registered during initialization; afterwards the manager is only
read, so lookups need no locking.
"""

import logging

from ..errors import UnknownCacheError
from .cache import Cache

logger = logging.getLogger(__name__)


class CacheManager:
    """Maps cache names to Cache instances."""

    def __init__(self, caches: list[Cache] | None = None):
        self._caches: dict[str, Cache] = {}
        for cache in caches or []:
            self.add_cache(cache)

    def add_cache(self, cache: Cache) -> None:
        """Register a cache. A cache registered under an existing name replaces it."""
        if cache.name in self._caches:
            logger.warning(
                f"Cache '{cache.name}' is already registered, replacing it",
                extra={"cache_name": cache.name},
            )
        self._caches[cache.name] = cache
        logger.debug(f"Registered cache '{cache.name}'", extra={"cache_name": cache.name, "ttl": cache.ttl})

    def get_cache(self, name: str) -> Cache:
        """
        Look up a cache by name.

        Raises:
            UnknownCacheError: If no cache is registered under name
        """
        try:
            return self._caches[name]
        except KeyError:
            raise UnknownCacheError(name, {"registered": sorted(self._caches)}) from None

    def has_cache(self, name: str) -> bool:
        return name in self._caches

    @property
    def cache_names(self) -> list[str]:
        return list(self._caches)

    async def close(self) -> None:
        """Close every distinct backend once, including backends shared by several caches."""
        closed: set[int] = set()
        for name, cache in self._caches.items():
            backend = cache.backend
            if id(backend) in closed:
                continue
            closed.add(id(backend))
            try:
                await backend.close()
                logger.info("Closed backend of cache: %s", name)
            except Exception as e:
                logger.error(
                    "Error closing backend of cache '%s': %s",
                    name,
                    e,
                    extra={"cache_name": name, "error": str(e)},
                    exc_info=True,
                )

    def __len__(self) -> int:
        return len(self._caches)

    def __contains__(self, name: object) -> bool:
        return name in self._caches
