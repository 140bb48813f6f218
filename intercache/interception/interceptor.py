"""
intercache — Method Interceptor

Decides, for one intercepted call, whether to serve a cached value, execute
and cache, execute and evict, or execute and update.

Protocols:
- CACHEABLE: read each cache in order and return the first hit; on a full
  miss execute once and write the result to every cache
- CACHE_EVICT: execute, then delete the key (or flush everything when
  all_entries is set) in every cache
- CACHE_UPDATE: execute, then store the result in every cache

A failing wrapped method propagates unchanged and no cache is touched.
Writes and evictions after a successful execution are best-effort: a
BackendError is reported and the result is still returned. A failure on one
cache does not stop the remaining caches from being written or evicted.
Stopping early would leave an evicted entry alive in every later cache, and
those caches would serve data the method just invalidated. Concurrent misses
on the same key each execute the method; there is no single-flight.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..cache import MISSING, Cache, CacheManager
from ..config import ReadFailurePolicy
from ..errors import BackendError, ExpressionEvaluationError
from ..keys import ExpressionEvaluator, KeyGenerator
from .metadata import CacheMetadata, CacheMode, CallContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheFailure:
    """A cache error that did not abort the intercepted call."""

    cache_name: str
    operation: str
    mode: CacheMode
    error: BackendError


ErrorReporter = Callable[[CacheFailure], None]


def log_cache_failure(failure: CacheFailure) -> None:
    """Default reporter: log the failure."""
    logger.error(
        f"Cache {failure.operation} failed on '{failure.cache_name}' during {failure.mode.value}: {failure.error}",
        extra={
            "cache_name": failure.cache_name,
            "operation": failure.operation,
            "mode": failure.mode.value,
            "error": failure.error.to_dict(),
        },
    )


class MethodInterceptor:
    """
    Orchestrates caching around intercepted calls.

    Args:
        cache_manager: Resolves cache names
        key_generator: Builds keys from ordered arguments when no key expression is set
        evaluator: Evaluates key expressions
        read_failure_policy: MISS treats a failed read as a miss, RAISE propagates it
        error_reporter: Receives best-effort failures (defaults to logging)
        enabled: When False, calls are executed without touching any cache
    """

    def __init__(
        self,
        cache_manager: CacheManager,
        key_generator: KeyGenerator,
        evaluator: ExpressionEvaluator | None = None,
        read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.MISS,
        error_reporter: ErrorReporter | None = None,
        enabled: bool = True,
    ):
        self.cache_manager = cache_manager
        self.key_generator = key_generator
        self.evaluator = evaluator or ExpressionEvaluator()
        self.read_failure_policy = read_failure_policy
        self.error_reporter = error_reporter or log_cache_failure
        self.enabled = enabled

    async def intercept(
        self,
        metadata: CacheMetadata,
        context: CallContext,
        invoke: Callable[[], Any],
    ) -> Any:
        """
        Run one intercepted call.

        Args:
            metadata: Caching descriptor of the call site
            context: Arguments of this call
            invoke: Zero-argument callable running the wrapped method; may
                return an awaitable. Called at most once.

        Returns:
            The method's result, or the cached value on a CACHEABLE hit
        """
        if not self.enabled:
            return await self._invoke(invoke)

        if metadata.mode == CacheMode.CACHEABLE:
            return await self._cacheable(metadata, context, invoke)
        if metadata.mode == CacheMode.CACHE_EVICT:
            return await self._evict(metadata, context, invoke)
        if metadata.mode == CacheMode.CACHE_UPDATE:
            return await self._update(metadata, context, invoke)

        raise ValueError(f"Unsupported cache mode: {metadata.mode}")

    # ------------ Protocols ------------

    async def _cacheable(self, metadata: CacheMetadata, context: CallContext, invoke: Callable[[], Any]) -> Any:
        caches: list[Cache] = []
        key: str | None = None

        for name in metadata.cache_names:
            cache = self.cache_manager.get_cache(name)
            caches.append(cache)
            if key is None:
                key = self.resolve_key(metadata, context.bindings, context)

            value = await self._read(cache, key, metadata.mode)
            if value is not MISSING:
                logger.debug(f"Cache hit in '{name}'", extra={"cache_name": name, "key": key})
                return value

        logger.debug(
            "Cache miss, executing method",
            extra={"cache_names": list(metadata.cache_names), "key": key},
        )
        result = await self._invoke(invoke)

        if key is not None:
            for cache in caches:
                await self._mutate(cache, "set", metadata.mode, cache.set(key, result))

        return result

    async def _evict(self, metadata: CacheMetadata, context: CallContext, invoke: Callable[[], Any]) -> Any:
        caches = [self.cache_manager.get_cache(name) for name in metadata.cache_names]

        # Eviction targets an existing entry, so the key only depends on arguments
        key = self.resolve_key(metadata, context.bindings, context) if metadata.uses_key else None

        result = await self._invoke(invoke)

        for cache in caches:
            if key is None:
                await self._mutate(cache, "clear", metadata.mode, cache.flush_all())
            else:
                await self._mutate(cache, "delete", metadata.mode, cache.delete(key))

        return result

    async def _update(self, metadata: CacheMetadata, context: CallContext, invoke: Callable[[], Any]) -> Any:
        caches = [self.cache_manager.get_cache(name) for name in metadata.cache_names]

        result = await self._invoke(invoke)
        key = self.resolve_key(metadata, context.with_result(result), context)

        for cache in caches:
            await self._mutate(cache, "set", metadata.mode, cache.set(key, result))

        return result

    # ------------ Helpers ------------

    def resolve_key(self, metadata: CacheMetadata, bindings: Mapping[str, Any], context: CallContext) -> str:
        """
        Resolve the cache key of a call.

        The key expression, when present, is evaluated against bindings and
        rendered with str(); otherwise the key generator hashes the ordered
        arguments.

        Raises:
            ExpressionEvaluationError: If the expression fails or yields None or a non-scalar
            UnsupportedKeyTypeError: If an argument cannot be hashed by the key generator
        """
        if metadata.key is None:
            return self.key_generator.generate_key(list(context.arguments))

        value = self.evaluator.evaluate(metadata.key, bindings)
        if value is None:
            raise ExpressionEvaluationError(metadata.key, "expression evaluated to None")
        if not isinstance(value, (str, int, float, bool)):
            raise ExpressionEvaluationError(
                metadata.key, f"expression must evaluate to a scalar, got {type(value).__name__}"
            )
        return str(value)

    async def _read(self, cache: Cache, key: str, mode: CacheMode) -> Any:
        try:
            return await cache.get(key)
        except BackendError as e:
            if self.read_failure_policy == ReadFailurePolicy.RAISE:
                raise
            self._report(CacheFailure(cache.name, "get", mode, e))
            logger.warning(
                f"Treating failed read of '{cache.name}' as a miss",
                extra={"cache_name": cache.name, "key": key},
            )
            return MISSING

    async def _mutate(self, cache: Cache, operation: str, mode: CacheMode, awaitable: Any) -> None:
        try:
            await awaitable
        except BackendError as e:
            self._report(CacheFailure(cache.name, operation, mode, e))

    def _report(self, failure: CacheFailure) -> None:
        try:
            self.error_reporter(failure)
        except Exception as e:
            logger.error(
                f"Cache error reporter failed: {e}",
                extra={"cache_name": failure.cache_name, "error": str(e)},
                exc_info=True,
            )

    @staticmethod
    async def _invoke(invoke: Callable[[], Any]) -> Any:
        result = invoke()
        if inspect.isawaitable(result):
            result = await result
        return result
