"""
intercache — Caching Decorator Tests
"""

from typing import Any

import pytest

from intercache.cache import CacheManager
from intercache.errors import ConfigurationError
from intercache.interception import (
    CacheMetadata,
    CacheMode,
    MethodInterceptor,
    cache_evict,
    cache_update,
    cacheable,
)
from intercache.keys import SimpleHashKeyGenerator


class TestDeclaration:
    def test_metadata_attached(self, interceptor: MethodInterceptor) -> None:
        @cache_evict(["products", "archive"], key="sku", interceptor=interceptor)
        async def save(sku: str) -> None: ...

        metadata: CacheMetadata = save.cache_metadata  # type: ignore[attr-defined]
        assert metadata.mode is CacheMode.CACHE_EVICT
        assert metadata.cache_names == ("products", "archive")
        assert metadata.key == "sku"

    def test_wraps_function(self, interceptor: MethodInterceptor) -> None:
        @cacheable("products", interceptor=interceptor)
        async def find_product(sku: str) -> dict:
            """Load a product."""
            return {}

        assert find_product.__name__ == "find_product"
        assert find_product.__doc__ == "Load a product."

    def test_rejects_sync_function(self, interceptor: MethodInterceptor) -> None:
        with pytest.raises(ConfigurationError, match="coroutine"):

            @cacheable("products", interceptor=interceptor)
            def find_product(sku: str) -> dict:
                return {}

    @pytest.mark.parametrize(
        "declare",
        [
            lambda: cacheable([]),
            lambda: cacheable("products", key=""),
            lambda: cache_update(["products", ""]),
        ],
    )
    def test_invalid_declaration(self, declare: Any) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            declare()
        assert exc_info.value.details["validation_errors"]


class ProductService:
    def __init__(self, interceptor: MethodInterceptor):
        self.loads: list[tuple[str, str]] = []

        @cacheable("products", interceptor=interceptor)
        async def find(sku: str, locale: str = "en") -> dict:
            self.loads.append((sku, locale))
            return {"sku": sku, "locale": locale}

        self.find = find


class TestInvocation:
    async def test_methods_share_cache_across_instances(self, interceptor: MethodInterceptor) -> None:
        loads: list[str] = []

        class Repository:
            @cacheable("products", key="sku", interceptor=interceptor)
            async def find(self, sku: str) -> dict:
                loads.append(sku)
                return {"sku": sku}

        first, second = Repository(), Repository()

        assert await first.find("ABC") == {"sku": "ABC"}
        assert await second.find("ABC") == {"sku": "ABC"}
        assert loads == ["ABC"]

    async def test_default_and_explicit_arguments_share_key(self, interceptor: MethodInterceptor) -> None:
        service = ProductService(interceptor)

        await service.find("ABC")
        await service.find("ABC", "en")
        await service.find(sku="ABC", locale="en")
        await service.find("ABC", locale="de")

        assert service.loads == [("ABC", "en"), ("ABC", "de")]

    async def test_generated_key_uses_all_arguments(
        self, interceptor: MethodInterceptor, products_backend: Any
    ) -> None:
        await ProductService(interceptor).find("ABC", "de")

        expected = SimpleHashKeyGenerator().generate_key(["ABC", "de"])
        assert products_backend.mutations == [("set", expected)]

    async def test_keyword_only_and_var_kwargs(self, interceptor: MethodInterceptor) -> None:
        calls: list[dict] = []

        @cacheable("products", interceptor=interceptor)
        async def search(query: str, *, limit: int = 10, **filters: Any) -> int:
            calls.append(filters)
            return len(calls)

        assert await search("shoes", color="red", size=42) == 1
        assert await search("shoes", size=42, color="red") == 1
        assert await search("shoes", size=43, color="red") == 2

    async def test_bad_arguments_raise_before_caching(
        self, interceptor: MethodInterceptor, products_backend: Any
    ) -> None:
        @cacheable("products", interceptor=interceptor)
        async def find(sku: str) -> str:
            return sku

        with pytest.raises(TypeError):
            await find()

        assert products_backend.calls == []

    async def test_update_and_evict_round(self, interceptor: MethodInterceptor, cache_manager: CacheManager) -> None:
        @cache_update("products", key="result['sku']", interceptor=interceptor)
        async def save(payload: dict) -> dict:
            return dict(payload, saved=True)

        @cache_evict("products", key="sku", interceptor=interceptor)
        async def delete(sku: str) -> bool:
            return True

        products = cache_manager.get_cache("products")

        await save({"sku": "ABC"})
        assert await products.get("ABC") == {"sku": "ABC", "saved": True}

        assert await delete("ABC") is True
        assert not await products.contains("ABC")


class TestGlobalInterceptor:
    async def test_uses_wired_interceptor_at_call_time(
        self, monkeypatch: pytest.MonkeyPatch, interceptor: MethodInterceptor
    ) -> None:
        from intercache import wiring

        calls: list[str] = []

        @cacheable("products", key="sku")
        async def find(sku: str) -> str:
            calls.append(sku)
            return sku.lower()

        # Declared before wiring exists; resolved on the first call
        monkeypatch.setattr(wiring, "get_interceptor", lambda: interceptor)

        assert await find("ABC") == "abc"
        assert await find("ABC") == "abc"
        assert calls == ["ABC"]
