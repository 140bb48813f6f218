"""
intercache — Caching Decorators

Attach caching metadata to coroutine functions and route their calls
through a MethodInterceptor.

Example:
    >>> @cacheable("products", key="sku")
    ... async def find_product(sku: str) -> dict:
    ...     return await repository.load(sku)
    >>>
    >>> @cache_evict("products", all_entries=True)
    ... async def import_catalog(rows: list[dict]) -> int:
    ...     ...
"""

import functools
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from pydantic import ValidationError

from ..errors import ConfigurationError
from .interceptor import MethodInterceptor
from .metadata import CacheMetadata, CacheMode, CallContext

AsyncFunc = Callable[..., Awaitable[Any]]


def _build_metadata(mode: CacheMode, cache_names: str | Sequence[str], **options: Any) -> CacheMetadata:
    try:
        return CacheMetadata(mode=mode, cache_names=cache_names, **options)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid {mode.value} declaration",
            details={"validation_errors": e.errors(include_url=False)},
        ) from e


def _intercepted(metadata: CacheMetadata, interceptor: MethodInterceptor | None) -> Callable[[AsyncFunc], AsyncFunc]:
    def decorator(func: AsyncFunc) -> AsyncFunc:
        if not inspect.iscoroutinefunction(func):
            raise ConfigurationError(
                f"{metadata.mode.value} can only decorate coroutine functions",
                details={"function": getattr(func, "__qualname__", repr(func))},
            )

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            context = CallContext.from_call(func, args, kwargs)
            active = interceptor
            if active is None:
                # Deferred so decorated modules can be imported before wiring
                from ..wiring import get_interceptor

                active = get_interceptor()
            return await active.intercept(metadata, context, lambda: func(*args, **kwargs))

        wrapper.cache_metadata = metadata  # type: ignore[attr-defined]
        return wrapper

    return decorator


def cacheable(
    cache_names: str | Sequence[str],
    key: str | None = None,
    interceptor: MethodInterceptor | None = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """
    Serve the call from cache when possible; otherwise execute and cache the result.

    Args:
        cache_names: Cache name or names, read and written in order
        key: Key expression over the arguments (default: key generator over all arguments)
        interceptor: Interceptor to use (default: the globally wired one)
    """
    return _intercepted(_build_metadata(CacheMode.CACHEABLE, cache_names, key=key), interceptor)


def cache_evict(
    cache_names: str | Sequence[str],
    key: str | None = None,
    all_entries: bool = False,
    interceptor: MethodInterceptor | None = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """
    Execute the call, then remove its entry (or every entry) from the caches.

    Args:
        cache_names: Cache name or names
        key: Key expression over the arguments
        all_entries: Flush the caches entirely; key is ignored
        interceptor: Interceptor to use (default: the globally wired one)
    """
    metadata = _build_metadata(CacheMode.CACHE_EVICT, cache_names, key=key, all_entries=all_entries)
    return _intercepted(metadata, interceptor)


def cache_update(
    cache_names: str | Sequence[str],
    key: str | None = None,
    interceptor: MethodInterceptor | None = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """
    Always execute the call, then store its result in the caches.

    Args:
        cache_names: Cache name or names
        key: Key expression over the arguments and ``result``
        interceptor: Interceptor to use (default: the globally wired one)
    """
    return _intercepted(_build_metadata(CacheMode.CACHE_UPDATE, cache_names, key=key), interceptor)
