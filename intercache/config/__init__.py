"""
intercache — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import config_from_mapping, get_config, load_config, reload_config, reset_config
from .schemas import (
    CacheBackend,
    CacheConfig,
    Environment,
    InterceptionConfig,
    IntercacheConfig,
    KeyGeneratorType,
    LogFormat,
    LogLevel,
    ReadFailurePolicy,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    "config_from_mapping",
    # Main config
    "IntercacheConfig",
    # Enums
    "Environment",
    "CacheBackend",
    "KeyGeneratorType",
    "ReadFailurePolicy",
    "LogLevel",
    "LogFormat",
    # Config sections
    "CacheConfig",
    "InterceptionConfig",
]
