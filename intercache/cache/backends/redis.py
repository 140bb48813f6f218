"""
intercache — Redis Cache Backend

Asynchronous Redis storage with:
- JSON serialization for values
- Per-key TTL support
- Namespace prefixing so several caches can live in one Redis database

Requires: redis>=5.0 with asyncio support

Example:
    backend = RedisCacheBackend(redis_url="redis://localhost:6379", namespace="intercache:products")
    await backend.set("ABC", {"sku": "ABC"}, ttl=60)
    value = await backend.get("ABC")
"""

from __future__ import annotations

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...errors import BackendError
from ..interface import MISSING, CacheBackendInterface

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackendInterface):
    """
    Redis cache backend with JSON serialization and TTL.

    Notes:
    - Keys are prefixed with the configured namespace.
    - Values are stored as UTF-8 JSON strings; a stored None round-trips as
      None and is distinct from a miss.
    - TTL is applied via Redis EX seconds (None -> default_ttl, 0 -> no expiry).
    - Redis and serialization failures raise BackendError.
    """

    def __init__(
        self,
        redis_url: str,
        namespace: str = "intercache",
        default_ttl: int = 3600,
        max_connections: int = 10,
        socket_timeout: int = 5,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "intercache"
        self.default_ttl = max(0, int(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Lazy connection; connects on first command
        self._client = Redis.from_url(  # type: ignore[call-overload]
            url=redis_url,
            decode_responses=True,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    @staticmethod
    def _to_json(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    @staticmethod
    def _from_json(data: str | bytes) -> Any:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return json.loads(data)
        except ValueError as e:
            # Written by someone else; hand back the raw payload
            logger.warning(
                f"Failed to decode JSON from cache, returning raw data: {e}",
                extra={"data_preview": data[:100], "error": str(e)},
            )
            return data

    def _ttl_seconds(self, ttl: int | None) -> int | None:
        """
        Normalize TTL:
        - None -> default_ttl
        - 0 or negative -> no expiry (return None)
        - positive -> provided ttl
        """
        if ttl is None:
            ttl = self.default_ttl
        ttl = int(ttl)
        return ttl if ttl > 0 else None

    def _failure(self, operation: str, error: Exception, **extra: Any) -> BackendError:
        logger.error(
            f"Redis {operation} failed in namespace '{self.namespace}': {error}",
            extra={"namespace": self.namespace, "operation": operation, "error": str(error), **extra},
        )
        return BackendError(
            operation,
            reason=str(error),
            details={"backend": "redis", "namespace": self.namespace, **extra},
        )

    # ------------ Core Interface ------------

    async def get(self, key: str) -> Any:
        """Retrieve a value by key."""
        try:
            data = await self._client.get(self._make_key(key))
        except RedisError as e:
            raise self._failure("get", e, key=key) from e

        if data is None:
            self._misses += 1
            return MISSING

        self._hits += 1
        return self._from_json(data)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a value with optional TTL."""
        try:
            payload = self._to_json(value)
        except (TypeError, ValueError) as e:
            raise self._failure("set", e, key=key, value_type=type(value).__name__) from e

        try:
            # redis-py returns True or 'OK' depending on decode_responses
            res = await self._client.set(name=self._make_key(key), value=payload, ex=self._ttl_seconds(ttl))
        except RedisError as e:
            raise self._failure("set", e, key=key, ttl=ttl) from e

        success = bool(res)
        if success:
            self._sets += 1
        return success

    async def delete(self, key: str) -> bool:
        """Delete a single key."""
        try:
            deleted = await self._client.delete(self._make_key(key))
        except RedisError as e:
            raise self._failure("delete", e, key=key) from e

        if deleted:
            self._deletes += 1
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(await self._client.exists(self._make_key(key)))
        except RedisError as e:
            raise self._failure("exists", e, key=key) from e

    async def clear(self) -> bool:
        """
        Clear all entries under the namespace.

        Implementation: SCAN match "<namespace>:*" and DEL in batches.
        """
        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        try:
            while True:
                cursor, keys = await self._client.scan(cursor=cursor, match=pattern, count=batch_size)
                if keys:
                    total_deleted += await self._client.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise self._failure("clear", e, deleted=total_deleted) from e

        self._deletes += total_deleted
        logger.info(f"Cleared {total_deleted} keys from namespace '{self.namespace}'")
        return True

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and Redis connectivity."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": "redis",
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())
            info = await self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
        except RedisError as e:
            # Stats stay usable when INFO is restricted or the server is down
            logger.warning(f"Failed to get Redis INFO (restricted or unavailable): {e}", extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info(f"Closed Redis cache backend for namespace '{self.namespace}'")
        except RedisError as e:
            logger.error(
                f"Error closing Redis client: {e}", extra={"namespace": self.namespace, "error": str(e)}, exc_info=True
            )
