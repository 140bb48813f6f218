"""
intercache — Wiring

Assembles the cache manager, key generator and interceptor from
configuration, and holds the process-wide instances used by the decorators.

Initialization (bootstrap) must finish before concurrent use; afterwards the
wired objects are only read.

Usage:
    from intercache import bootstrap, shutdown

    bootstrap(config_from_mapping({"caches": {"products": {"ttl_seconds": 600}}}))
    ...
    await shutdown()
"""

import logging

from .cache import CacheManager, build_cache_manager
from .config import IntercacheConfig, get_config
from .errors import ConfigurationError
from .interception import MethodInterceptor
from .interception.interceptor import ErrorReporter
from .keys import ExpressionEvaluator, create_key_generator
from .observability import setup_logging

logger = logging.getLogger(__name__)

_interceptor: MethodInterceptor | None = None


def create_interceptor(
    config: IntercacheConfig,
    cache_manager: CacheManager | None = None,
    error_reporter: ErrorReporter | None = None,
) -> MethodInterceptor:
    """Build an interceptor from configuration without registering it globally."""
    return MethodInterceptor(
        cache_manager=cache_manager if cache_manager is not None else build_cache_manager(config),
        key_generator=create_key_generator(config.key_generator),
        evaluator=ExpressionEvaluator(),
        read_failure_policy=config.interception.read_failure_policy,
        error_reporter=error_reporter,
        enabled=config.interception.enabled,
    )


def bootstrap(
    config: IntercacheConfig | None = None,
    configure_logging: bool = False,
    error_reporter: ErrorReporter | None = None,
) -> MethodInterceptor:
    """
    Wire the global interceptor.

    Args:
        config: Configuration (loaded from the environment if not provided)
        configure_logging: Install the JSON/text handler from config
        error_reporter: Receives best-effort cache failures

    Returns:
        The global MethodInterceptor

    Raises:
        ConfigurationError: If an interceptor is already wired; its backends
            must be closed with shutdown() first
    """
    global _interceptor

    if _interceptor is not None:
        raise ConfigurationError(
            "Interceptor already wired; await shutdown() before bootstrapping again",
            details={"caches": _interceptor.cache_manager.cache_names},
        )

    if config is None:
        config = get_config()

    if configure_logging:
        setup_logging(config.log_level, config.log_format)

    _interceptor = create_interceptor(config, error_reporter=error_reporter)
    logger.info(
        "Interceptor wired with %d cache(s)",
        len(_interceptor.cache_manager),
        extra={
            "caches": _interceptor.cache_manager.cache_names,
            "key_generator": config.key_generator.value,
            "interception_enabled": config.interception.enabled,
        },
    )
    return _interceptor


def get_interceptor() -> MethodInterceptor:
    """
    Get the global interceptor, wiring it from the environment on first use.
    """
    if _interceptor is None:
        logger.debug("Interceptor not wired yet, bootstrapping from environment")
        return bootstrap()

    return _interceptor


def get_cache_manager() -> CacheManager:
    """Get the CacheManager of the global interceptor."""
    return get_interceptor().cache_manager


async def shutdown() -> None:
    """
    Close all cache backends and drop the global interceptor.

    MUST be called during graceful shutdown so network backends release
    their connections.
    """
    global _interceptor

    if _interceptor is None:
        logger.debug("Nothing wired, nothing to close")
        return

    await _interceptor.cache_manager.close()
    _interceptor = None
    logger.info("All cache backends closed")


def reset_wiring() -> None:
    """
    Drop the global interceptor without closing backends.

    Warning: Only use this in testing contexts.
    """
    global _interceptor
    _interceptor = None
