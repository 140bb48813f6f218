"""
intercache — Cache Abstraction and Method Interception

Named caches over pluggable backends, deterministic key generation, and
declarative read-through / eviction / update caching for coroutine methods.
"""

__version__ = "1.0.0"

from .cache import MISSING, Cache, CacheManager
from .config import IntercacheConfig, config_from_mapping, load_config
from .errors import (
    BackendError,
    CacheError,
    ConfigurationError,
    ExpressionEvaluationError,
    IntercacheError,
    UnknownCacheError,
    UnsupportedKeyTypeError,
)
from .interception import (
    CacheMetadata,
    CacheMode,
    CallContext,
    MethodInterceptor,
    cache_evict,
    cache_update,
    cacheable,
)
from .keys import KeyGenerator, SimpleHashKeyGenerator
from .wiring import bootstrap, get_cache_manager, get_interceptor, shutdown

__all__ = [
    # Caches
    "Cache",
    "CacheManager",
    "MISSING",
    # Keys
    "KeyGenerator",
    "SimpleHashKeyGenerator",
    # Interception
    "CacheMode",
    "CacheMetadata",
    "CallContext",
    "MethodInterceptor",
    "cacheable",
    "cache_evict",
    "cache_update",
    # Configuration and wiring
    "IntercacheConfig",
    "config_from_mapping",
    "load_config",
    "bootstrap",
    "get_interceptor",
    "get_cache_manager",
    "shutdown",
    # Errors
    "IntercacheError",
    "ConfigurationError",
    "CacheError",
    "UnknownCacheError",
    "BackendError",
    "UnsupportedKeyTypeError",
    "ExpressionEvaluationError",
]
