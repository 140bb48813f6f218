"""
intercache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest

from intercache.cache import MISSING, Cache, CacheBackendInterface, CacheManager
from intercache.cache.backends.memory import MemoryCacheBackend
from intercache.errors import BackendError
from intercache.interception import CacheFailure, MethodInterceptor
from intercache.keys import SimpleHashKeyGenerator

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


class RecordingBackend(CacheBackendInterface):
    """
    Dict-backed backend that records every call and can be told to fail.

    Attributes:
        calls: (operation, key) tuples in call order
        fail_on: Operations that raise BackendError
    """

    MUTATIONS = ("set", "delete", "clear")

    def __init__(self, namespace: str = "recording", fail_on: tuple[str, ...] = ()):
        self.namespace = namespace
        self.fail_on = set(fail_on)
        self.data: dict[str, Any] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.closed = False

    def _record(self, operation: str, key: str | None = None) -> None:
        self.calls.append((operation, key))
        if operation in self.fail_on:
            raise BackendError(operation, reason="simulated outage")

    @property
    def mutations(self) -> list[tuple[str, str | None]]:
        return [call for call in self.calls if call[0] in self.MUTATIONS]

    async def get(self, key: str) -> Any:
        self._record("get", key)
        return self.data.get(key, MISSING)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        self._record("set", key)
        self.data[key] = value
        return True

    async def delete(self, key: str) -> bool:
        self._record("delete", key)
        return self.data.pop(key, MISSING) is not MISSING

    async def exists(self, key: str) -> bool:
        self._record("exists", key)
        return key in self.data

    async def clear(self) -> bool:
        self._record("clear")
        self.data.clear()
        return True

    async def get_stats(self) -> dict[str, Any]:
        return {"backend": "recording", "size": len(self.data)}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def products_backend() -> RecordingBackend:
    return RecordingBackend(namespace="test:products")


@pytest.fixture
def cache_manager(products_backend: RecordingBackend) -> CacheManager:
    """Manager with a recording 'products' cache and a memory 'archive' cache."""
    return CacheManager(
        [
            Cache("products", products_backend, ttl=600),
            Cache("archive", MemoryCacheBackend(max_size=100, default_ttl=0, namespace="test:archive")),
        ]
    )


@pytest.fixture
def failures() -> list[CacheFailure]:
    return []


@pytest.fixture
def interceptor(cache_manager: CacheManager, failures: list[CacheFailure]) -> MethodInterceptor:
    return MethodInterceptor(
        cache_manager=cache_manager,
        key_generator=SimpleHashKeyGenerator(),
        error_reporter=failures.append,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove intercache settings inherited from the developer's environment."""
    for name in list(os.environ):
        if name.startswith("INTERCACHE_") or name in ("REDIS_URL", "LOG_FORMAT"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset loaded config and global wiring after each test to prevent state leakage."""
    yield
    from intercache.config import reset_config
    from intercache.wiring import reset_wiring

    reset_wiring()
    reset_config()


@pytest.fixture
def make_backend() -> type[RecordingBackend]:
    """The RecordingBackend class, for tests that need several instances."""
    return RecordingBackend
