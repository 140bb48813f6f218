"""
intercache — Named Cache

A Cache is one named, independently configured cache region: a name, a
default TTL and the storage backend it writes to. Caches that share a backend
also share its entries, and flushing one flushes the other.
"""

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from ..errors import BackendError, IntercacheError
from .interface import CacheBackendInterface

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Cache:
    """
    Named, TTL-aware wrapper around one storage backend.

    Any failure coming out of the backend is surfaced as BackendError tagged
    with the cache name.
    """

    def __init__(self, name: str, backend: CacheBackendInterface, ttl: int = 0):
        if not name:
            raise ValueError("cache name must not be empty")
        if ttl < 0:
            raise ValueError("ttl must be non-negative")

        self._name = name
        self._backend = backend
        self._ttl = ttl

    @property
    def name(self) -> str:
        return self._name

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def backend(self) -> CacheBackendInterface:
        return self._backend

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except BackendError as e:
            if e.cache is None:
                raise BackendError(operation, cache=self._name, reason=e.reason, details=dict(e.details)) from e
            raise
        except IntercacheError:
            raise
        except Exception as e:
            raise BackendError(
                operation,
                cache=self._name,
                reason=str(e),
                details={"error_type": type(e).__name__},
            ) from e

    async def get(self, key: str) -> Any:
        """Return the cached value, or MISSING when the key is absent or expired."""
        return await self._call("get", self._backend.get(key))

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """
        Store a value; ttl defaults to this cache's TTL (0 = no expiry).

        Raises:
            BackendError: If the backend fails or refuses the write
        """
        effective_ttl = self._ttl if ttl is None else ttl
        stored = await self._call("set", self._backend.set(key, value, effective_ttl))
        if not stored:
            raise BackendError(
                "set",
                cache=self._name,
                reason="backend refused the write",
                details={"key": key},
            )

    async def delete(self, key: str) -> None:
        await self._call("delete", self._backend.delete(key))

    async def contains(self, key: str) -> bool:
        return await self._call("exists", self._backend.exists(key))

    async def flush_all(self) -> None:
        """Remove every entry visible to this cache's backend, including entries of caches sharing it."""
        await self._call("clear", self._backend.clear())
        logger.info(f"Flushed cache '{self._name}'", extra={"cache_name": self._name})

    def __repr__(self) -> str:
        return f"Cache(name={self._name!r}, ttl={self._ttl}, namespace={self._backend.namespace!r})"
