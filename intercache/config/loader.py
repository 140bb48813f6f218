"""
intercache — Configuration Loader

Loads and validates configuration from environment variables and .env files,
or from an already-parsed mapping (e.g. a YAML/TOML section).
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import IntercacheConfig

logger = logging.getLogger(__name__)

_config_instance: IntercacheConfig | None = None

# Per-cache environment settings: INTERCACHE_CACHE_<NAME>_<SUFFIX>
_CACHE_ENV_FIELDS = {
    "BACKEND": "backend",
    "TTL": "ttl_seconds",
    "MAX_SIZE": "max_size",
    "NAMESPACE": "namespace",
    "SHARED_BACKEND": "shared_backend",
    "REDIS_URL": "redis_url",
    "REDIS_MAX_CONNECTIONS": "redis_max_connections",
    "REDIS_SOCKET_TIMEOUT": "redis_socket_timeout",
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _cache_env_prefix(name: str) -> str:
    return "INTERCACHE_CACHE_" + name.upper().replace("-", "_").replace(".", "_") + "_"


def _caches_from_env() -> dict[str, dict[str, Any]]:
    """Collect cache definitions declared through INTERCACHE_CACHES."""
    names = [n.strip() for n in os.getenv("INTERCACHE_CACHES", "").split(",") if n.strip()]

    # Redis becomes the default backend when a global REDIS_URL is present
    default_redis_url = os.getenv("REDIS_URL")
    default_backend = "redis" if default_redis_url else "memory"

    caches: dict[str, dict[str, Any]] = {}
    for name in names:
        prefix = _cache_env_prefix(name)
        settings: dict[str, Any] = {
            "backend": default_backend,
            "ttl_seconds": os.getenv("INTERCACHE_DEFAULT_TTL", "3600"),
            "redis_url": default_redis_url,
        }
        for suffix, field in _CACHE_ENV_FIELDS.items():
            value = os.getenv(prefix + suffix)
            if value is not None and value != "":
                settings[field] = value
        caches[name] = settings

    return caches


def config_from_mapping(data: Mapping[str, Any]) -> IntercacheConfig:
    """
    Build a validated configuration from a plain mapping.

    Args:
        data: Mapping shaped like IntercacheConfig (nested dicts allowed)

    Returns:
        Validated IntercacheConfig instance

    Raises:
        ConfigurationError: If the mapping does not validate
    """
    try:
        return IntercacheConfig.model_validate(dict(data))
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(include_url=False)},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your cache definitions.",
            details={"validation_errors": e.errors(include_url=False)},
        ) from e


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> IntercacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated IntercacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict: dict[str, Any] = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "log_format": os.getenv("LOG_FORMAT", "json").lower(),
        "namespace_prefix": os.getenv("INTERCACHE_NAMESPACE", "intercache"),
        "key_generator": os.getenv("INTERCACHE_KEY_GENERATOR", "simple_hash"),
        "interception": {
            "enabled": _env_flag("INTERCACHE_ENABLED", "true"),
            "read_failure_policy": os.getenv("INTERCACHE_READ_FAILURE_POLICY", "miss").lower(),
        },
        "caches": _caches_from_env(),
    }

    _config_instance = config_from_mapping(config_dict)
    logger.info(
        f"Configuration loaded successfully (environment: {_config_instance.environment.value})",
        extra={
            "environment": _config_instance.environment.value,
            "caches": sorted(_config_instance.caches),
        },
    )
    return _config_instance


def get_config() -> IntercacheConfig:
    """
    Get the current configuration instance, loading it on first access.
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> IntercacheConfig:
    """Force reload configuration."""
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Drop the loaded configuration. Only use this in tests."""
    global _config_instance
    _config_instance = None
