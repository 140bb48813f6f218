"""
intercache — Cache Backend Interface

Defines the abstract interface that all storage backends must implement,
and the MISSING sentinel that reports a cache miss.
"""

from abc import ABC, abstractmethod
from typing import Any, Final


class _Missing:
    """Type of the MISSING sentinel."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


# Returned by get() on a miss; a stored None/0/""/False is a hit.
MISSING: Final = _Missing()


class CacheBackendInterface(ABC):
    """
    Abstract base class for storage backends.

    Backends raise on failure instead of returning a fallback value so that
    the layers above can tell a miss from a broken backend.
    """

    namespace: str

    @abstractmethod
    async def get(self, key: str) -> Any:
        """
        Retrieve a value from the backend.

        Args:
            key: Cache key

        Returns:
            Cached value if found and not expired, MISSING otherwise
        """
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Store a value in the backend.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds (None = use default, 0 = no expiry)

        Returns:
            True if stored
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if key was deleted, False if key didn't exist
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """
        Remove every entry in this backend's namespace.

        Returns:
            True if the backend was cleared
        """
        pass

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get backend statistics.

        Returns:
            Dictionary with statistics (hits, misses, size, etc.)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the backend and release resources.

        Should be called during graceful shutdown.
        """
        pass
