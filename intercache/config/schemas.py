"""
intercache — Configuration Schemas

Typed configuration models using Pydantic for validation and type safety.
All configuration is validated once at startup, before any cache is wired.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMORY = "memory"
    REDIS = "redis"


class KeyGeneratorType(str, Enum):
    """Registered key generator implementations."""

    SIMPLE_HASH = "simple_hash"


class ReadFailurePolicy(str, Enum):
    """What the interceptor does when a cache read fails."""

    MISS = "miss"  # report, then treat as a cache miss
    RAISE = "raise"  # propagate the BackendError to the caller


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


class CacheConfig(BaseModel):
    """Configuration of one named cache region."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Cache backend to use")
    ttl_seconds: int = Field(default=3600, ge=0, description="Default TTL in seconds (0 = no expiry)")
    max_size: int = Field(default=1000, ge=1, description="Max cache entries (memory backend)")
    namespace: str | None = Field(default=None, description="Key namespace (defaults to '<prefix>:<cache name>')")
    shared_backend: str | None = Field(
        default=None,
        description="Name of another cache whose backend this cache shares (flushes affect both)",
    )

    # Redis-specific settings (only used when backend=redis)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: int = Field(default=5, ge=1, description="Redis socket timeout in seconds")

    @model_validator(mode="after")
    def validate_redis_url(self) -> "CacheConfig":
        """Ensure redis_url is provided when backend is redis."""
        if self.backend == CacheBackend.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when cache backend is 'redis'")
        return self


class InterceptionConfig(BaseModel):
    """Method interception settings."""

    enabled: bool = Field(default=True, description="Route decorated calls through the interceptor")
    read_failure_policy: ReadFailurePolicy = Field(
        default=ReadFailurePolicy.MISS,
        description="Behaviour when a cache read fails during a cacheable lookup",
    )


class IntercacheConfig(BaseModel):
    """Root configuration."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Logging output format")

    namespace_prefix: str = Field(default="intercache", min_length=1, description="Prefix for cache namespaces")
    key_generator: KeyGeneratorType = Field(
        default=KeyGeneratorType.SIMPLE_HASH,
        description="Key generator used when no key expression is given",
    )
    interception: InterceptionConfig = Field(default_factory=InterceptionConfig)
    caches: dict[str, CacheConfig] = Field(default_factory=dict, description="Named cache definitions")

    @field_validator("caches")
    @classmethod
    def validate_cache_names(cls, v: dict[str, CacheConfig]) -> dict[str, CacheConfig]:
        """Cache names must be non-blank."""
        for name in v:
            if not name or not name.strip():
                raise ValueError("cache names must be non-empty")
        return v

    @model_validator(mode="after")
    def validate_shared_backends(self) -> "IntercacheConfig":
        """Shared backends must point at a configured, non-sharing cache."""
        for name, cache in self.caches.items():
            target = cache.shared_backend
            if target is None:
                continue
            if target == name:
                raise ValueError(f"cache '{name}' cannot share its own backend")
            if target not in self.caches:
                raise ValueError(f"cache '{name}' shares the backend of unknown cache '{target}'")
            if self.caches[target].shared_backend is not None:
                raise ValueError(f"cache '{name}' shares the backend of '{target}', which itself shares a backend")
        return self

    def namespace_for(self, name: str) -> str:
        """Resolve the backend namespace of a configured cache."""
        cache = self.caches[name]
        return cache.namespace or f"{self.namespace_prefix}:{name}"

    model_config = ConfigDict(validate_assignment=True)
