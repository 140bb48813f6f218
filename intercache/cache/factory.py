"""
intercache — Cache Factory

Builds storage backends and named caches from configuration, and assembles
a CacheManager holding every configured cache.

Key points:
- One backend constructor per CacheBackend value
- Redis is imported lazily so the memory backend works without it
- A cache with `shared_backend` reuses the backend of the cache it names

Examples:
    from intercache.cache.factory import build_cache_manager
    from intercache.config import config_from_mapping

    config = config_from_mapping({"caches": {"products": {"ttl_seconds": 600}}})
    manager = build_cache_manager(config)
    products = manager.get_cache("products")
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import CacheBackend, CacheConfig, IntercacheConfig
from ..errors import ConfigurationError
from .backends.memory import MemoryCacheBackend
from .cache import Cache
from .interface import CacheBackendInterface
from .manager import CacheManager

logger = logging.getLogger(__name__)


def _create_memory_backend(config: CacheConfig, namespace: str) -> CacheBackendInterface:
    return MemoryCacheBackend(
        max_size=config.max_size,
        default_ttl=config.ttl_seconds,
        namespace=namespace,
    )


def _create_redis_backend(config: CacheConfig, namespace: str) -> CacheBackendInterface:
    """Construct a redis backend with lazy import."""
    if not config.redis_url:
        raise ConfigurationError(
            "redis_url must be set for a redis cache",
            details={"backend": "redis", "namespace": namespace},
        )

    try:
        from .backends.redis import RedisCacheBackend
    except ImportError as e:
        logger.error(
            "Redis backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Redis backend selected but redis client is unavailable. Install with: pip install 'redis>=5.0.0'",
            details={"package": "redis>=5.0.0", "error": str(e), "backend": "redis"},
        ) from e

    return RedisCacheBackend(
        redis_url=config.redis_url,
        namespace=namespace,
        default_ttl=config.ttl_seconds,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
    )


_BACKEND_FACTORIES: dict[CacheBackend, Callable[[CacheConfig, str], CacheBackendInterface]] = {
    CacheBackend.MEMORY: _create_memory_backend,
    CacheBackend.REDIS: _create_redis_backend,
}


def create_backend(config: CacheConfig, namespace: str) -> CacheBackendInterface:
    """
    Create a storage backend for one cache definition.

    Raises:
        ConfigurationError: If the backend is unknown or cannot be constructed
    """
    factory = _BACKEND_FACTORIES.get(config.backend)
    if factory is None:
        raise ConfigurationError(
            f"Unknown cache backend: {config.backend}",
            details={"backend": str(config.backend), "supported": [b.value for b in _BACKEND_FACTORIES]},
        )

    try:
        return factory(config, namespace)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error creating %s backend for namespace '%s': %s",
            config.backend.value,
            namespace,
            e,
            extra={"backend": config.backend.value, "namespace": namespace, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create {config.backend.value} backend for namespace '{namespace}': {e}",
            details={"backend": config.backend.value, "namespace": namespace, "error": str(e)},
        ) from e


def build_cache_manager(config: IntercacheConfig) -> CacheManager:
    """
    Create every configured cache and register it with a new CacheManager.

    Caches owning a backend are built first, then caches sharing one.
    """
    manager = CacheManager()
    backends: dict[str, CacheBackendInterface] = {}

    owners = [name for name, c in config.caches.items() if c.shared_backend is None]
    sharers = [name for name, c in config.caches.items() if c.shared_backend is not None]

    for name in owners:
        cache_config = config.caches[name]
        namespace = config.namespace_for(name)
        logger.info(
            "Creating cache '%s' with backend: %s",
            name,
            cache_config.backend.value,
            extra={"cache_name": name, "backend": cache_config.backend.value, "namespace": namespace},
        )
        backends[name] = create_backend(cache_config, namespace)

    for name in sharers:
        target = config.caches[name].shared_backend
        assert target is not None
        backends[name] = backends[target]
        logger.info(
            "Cache '%s' shares the backend of '%s'",
            name,
            target,
            extra={"cache_name": name, "shared_backend": target},
        )

    # Register in configuration order
    for name, cache_config in config.caches.items():
        manager.add_cache(Cache(name, backends[name], ttl=cache_config.ttl_seconds))

    return manager
