"""
intercache — Cache Manager Tests
"""

import pytest

from intercache.cache import Cache, CacheManager
from intercache.errors import UnknownCacheError


class TestCacheManager:
    def test_unknown_cache(self) -> None:
        manager = CacheManager()

        with pytest.raises(UnknownCacheError) as exc_info:
            manager.get_cache("x")

        assert exc_info.value.name == "x"
        assert exc_info.value.details["cache_name"] == "x"

    def test_returns_same_instance(self, make_backend: type) -> None:
        manager = CacheManager()
        cache = Cache("x", make_backend())
        manager.add_cache(cache)

        assert manager.get_cache("x") is cache
        assert manager.get_cache("x") is manager.get_cache("x")

    def test_re_registration_overwrites(self, make_backend: type) -> None:
        first = Cache("products", make_backend())
        second = Cache("products", make_backend())
        manager = CacheManager([first])

        manager.add_cache(second)

        assert manager.get_cache("products") is second
        assert len(manager) == 1

    def test_names_and_membership(self, make_backend: type) -> None:
        manager = CacheManager([Cache("a", make_backend()), Cache("b", make_backend())])

        assert manager.cache_names == ["a", "b"]
        assert manager.has_cache("a")
        assert "b" in manager
        assert not manager.has_cache("c")

    def test_unknown_cache_lists_registered(self, make_backend: type) -> None:
        manager = CacheManager([Cache("b", make_backend()), Cache("a", make_backend())])

        with pytest.raises(UnknownCacheError) as exc_info:
            manager.get_cache("c")

        assert exc_info.value.details["registered"] == ["a", "b"]

    async def test_close_closes_shared_backend_once(self, make_backend: type) -> None:
        shared = make_backend()
        own = make_backend()
        closes: list[str] = []

        async def close_shared() -> None:
            closes.append("shared")

        shared.close = close_shared
        manager = CacheManager([Cache("a", shared), Cache("b", shared), Cache("c", own)])

        await manager.close()

        assert closes == ["shared"]
        assert own.closed is True

    async def test_close_continues_after_failure(self, make_backend: type) -> None:
        broken = make_backend()
        healthy = make_backend()

        async def failing_close() -> None:
            raise RuntimeError("boom")

        broken.close = failing_close
        manager = CacheManager([Cache("broken", broken), Cache("healthy", healthy)])

        await manager.close()

        assert healthy.closed is True
