"""
intercache — Method Interception

Metadata records, the MethodInterceptor state machine, and the decorators
that route calls through it.
"""

from .decorators import cache_evict, cache_update, cacheable
from .interceptor import CacheFailure, MethodInterceptor, log_cache_failure
from .metadata import CacheMetadata, CacheMode, CallContext

__all__ = [
    "CacheMode",
    "CacheMetadata",
    "CallContext",
    "MethodInterceptor",
    "CacheFailure",
    "log_cache_failure",
    "cacheable",
    "cache_evict",
    "cache_update",
]
