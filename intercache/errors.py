"""
intercache — Core Error Types

Defines the exception hierarchy for the cache layer and the interceptor.
All exceptions inherit from IntercacheError so calling code can tell cache
failures apart from failures raised by the wrapped methods themselves.
"""

from typing import Any


class IntercacheError(Exception):
    """Base exception for all intercache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Structured form of the error, used in log records."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(IntercacheError):
    """Raised when configuration or wiring is invalid."""


class CacheError(IntercacheError):
    """Base exception for cache-related errors."""


class UnknownCacheError(CacheError):
    """Raised when a cache name is not registered with the manager."""

    def __init__(self, name: str, details: dict[str, Any] | None = None):
        message = f"Unknown cache: {name}"
        error_details = details or {}
        error_details["cache_name"] = name
        super().__init__(message, error_details)
        self.name = name


class BackendError(CacheError):
    """Raised when a storage backend operation fails."""

    def __init__(
        self,
        operation: str,
        cache: str | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        target = f"cache '{cache}'" if cache else "cache backend"
        message = f"Backend {operation} failed for {target}"
        if reason:
            message += f": {reason}"

        error_details = details or {}
        error_details.update({"operation": operation, "cache_name": cache})
        super().__init__(message, error_details)
        self.operation = operation
        self.cache = cache
        self.reason = reason


class UnsupportedKeyTypeError(CacheError):
    """Raised when a key generator receives a non-scalar value."""

    def __init__(self, value: Any, position: int | None = None):
        message = f"Unsupported key parameter type: {type(value).__name__}"
        details: dict[str, Any] = {"value_type": type(value).__name__}
        if position is not None:
            details["position"] = position
        super().__init__(message, details)
        self.value = value


class ExpressionEvaluationError(CacheError):
    """Raised when a key expression cannot be evaluated."""

    def __init__(self, expression: str, reason: str):
        message = f"Cannot evaluate key expression '{expression}': {reason}"
        super().__init__(message, {"expression": expression, "reason": reason})
        self.expression = expression
        self.reason = reason
