"""
intercache — Wiring Tests

Tests building the global interceptor from configuration and the environment.
"""

from pathlib import Path

import pytest

from intercache import cacheable, config_from_mapping
from intercache.cache import MISSING
from intercache.config import ReadFailurePolicy
from intercache.errors import ConfigurationError
from intercache.keys import SimpleHashKeyGenerator
from intercache.wiring import bootstrap, create_interceptor, get_cache_manager, get_interceptor, shutdown


@pytest.fixture
def env_caches(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INTERCACHE_CACHES", "products,prices")
    monkeypatch.setenv("INTERCACHE_CACHE_PRICES_TTL", "60")


class TestCreateInterceptor:
    def test_from_config(self) -> None:
        config = config_from_mapping(
            {
                "interception": {"enabled": False, "read_failure_policy": "raise"},
                "caches": {"products": {}},
            }
        )

        interceptor = create_interceptor(config)

        assert interceptor.cache_manager.cache_names == ["products"]
        assert isinstance(interceptor.key_generator, SimpleHashKeyGenerator)
        assert interceptor.read_failure_policy is ReadFailurePolicy.RAISE
        assert interceptor.enabled is False

    def test_does_not_register_globally(self, env_caches: None) -> None:
        create_interceptor(config_from_mapping({"caches": {"local": {}}}))

        assert get_cache_manager().cache_names == ["products", "prices"]


class TestBootstrap:
    def test_refuses_to_rewire_while_wired(self) -> None:
        first = bootstrap(config_from_mapping({"caches": {"a": {}}}))

        with pytest.raises(ConfigurationError, match="shutdown"):
            bootstrap(config_from_mapping({"caches": {"b": {}}}))

        assert get_interceptor() is first
        assert get_cache_manager().cache_names == ["a"]

    async def test_rewire_after_shutdown(self) -> None:
        first = bootstrap(config_from_mapping({"caches": {"a": {}}}))
        backend = first.cache_manager.get_cache("a").backend
        closes: list[str] = []

        async def spy_close() -> None:
            closes.append(backend.namespace)

        backend.close = spy_close

        await shutdown()
        second = bootstrap(config_from_mapping({"caches": {"b": {}}}))

        assert closes == ["intercache:a"]
        assert second is not first
        assert get_cache_manager().cache_names == ["b"]

    def test_lazy_bootstrap_from_environment(self, env_caches: None) -> None:
        interceptor = get_interceptor()

        assert get_interceptor() is interceptor
        assert interceptor.cache_manager.get_cache("prices").ttl == 60
        assert interceptor.cache_manager.get_cache("products").ttl == 3600

    def test_invalid_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("INTERCACHE_CACHES", "products")
        monkeypatch.setenv("INTERCACHE_CACHE_PRODUCTS_MAX_SIZE", "0")

        with pytest.raises(ConfigurationError):
            get_interceptor()

    def test_error_reporter_passed_through(self) -> None:
        reported: list = []
        interceptor = bootstrap(config_from_mapping({}), error_reporter=reported.append)

        assert interceptor.error_reporter == reported.append

    async def test_decorated_call_uses_env_caches(self, env_caches: None) -> None:
        calls: list[str] = []

        @cacheable("prices", key="sku")
        async def price(sku: str) -> float:
            calls.append(sku)
            return 9.5

        assert await price("ABC") == 9.5
        assert await price("ABC") == 9.5
        assert calls == ["ABC"]
        assert await get_cache_manager().get_cache("prices").get("ABC") == 9.5

    async def test_disabled_interception(self, monkeypatch: pytest.MonkeyPatch, env_caches: None) -> None:
        monkeypatch.setenv("INTERCACHE_ENABLED", "false")
        calls: list[str] = []

        @cacheable("products", key="sku")
        async def find(sku: str) -> str:
            calls.append(sku)
            return sku

        await find("ABC")
        await find("ABC")

        assert calls == ["ABC", "ABC"]
        assert await get_cache_manager().get_cache("products").get("ABC") is MISSING


class TestShutdown:
    async def test_closes_shared_backend_once(self, env_caches: None) -> None:
        first = bootstrap(config_from_mapping({"caches": {"products": {}, "view": {"shared_backend": "products"}}}))
        backend = first.cache_manager.get_cache("products").backend
        closes: list[str] = []

        async def spy_close() -> None:
            closes.append(backend.namespace)

        backend.close = spy_close

        await shutdown()

        assert closes == ["intercache:products"]
        # The next lookup wires a fresh interceptor from the environment
        assert get_interceptor() is not first
        assert get_cache_manager().cache_names == ["products", "prices"]

    async def test_noop_when_not_wired(self) -> None:
        await shutdown()
