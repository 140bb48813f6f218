"""
intercache — Cache Module

Named caches over pluggable storage backends, and the manager resolving them.

- interface.py: Abstract backend interface and the MISSING sentinel
- backends/: Backend implementations (memory always, redis on demand)
- cache.py: Named, TTL-aware Cache
- manager.py: CacheManager registry
- factory.py: Builds backends and a CacheManager from configuration

Usage:
    from intercache.cache import MISSING, build_cache_manager

    manager = build_cache_manager(config)
    products = manager.get_cache("products")
    await products.set("ABC", product)
    if (value := await products.get("ABC")) is not MISSING:
        ...
"""

from .cache import Cache
from .factory import build_cache_manager, create_backend
from .interface import MISSING, CacheBackendInterface
from .manager import CacheManager

__all__ = [
    "Cache",
    "CacheManager",
    "CacheBackendInterface",
    "MISSING",
    "build_cache_manager",
    "create_backend",
]
