"""
intercache — Interception Metadata

Immutable records describing a call site's caching behaviour and the data
available at one intercepted invocation.
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CacheMode(str, Enum):
    """Caching protocol applied to an intercepted call."""

    CACHEABLE = "cacheable"
    CACHE_EVICT = "cache_evict"
    CACHE_UPDATE = "cache_update"


class CacheMetadata(BaseModel):
    """
    Parsed caching descriptor of one call site.

    Attributes:
        mode: Which protocol the interceptor runs
        cache_names: Target caches, in the order they are read and written
        key: Optional key expression; the key generator is used when absent
        all_entries: CACHE_EVICT only; flush whole caches instead of one key
    """

    mode: CacheMode
    cache_names: tuple[str, ...] = Field(min_length=1)
    key: str | None = None
    all_entries: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("cache_names", mode="before")
    @classmethod
    def normalize_cache_names(cls, v: Any) -> Any:
        """Accept a single name; drop duplicates while keeping order."""
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return tuple(dict.fromkeys(v))
        return v

    @field_validator("cache_names")
    @classmethod
    def validate_cache_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if any(not name or not name.strip() for name in v):
            raise ValueError("cache names must be non-empty strings")
        return v

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("key expression must not be blank")
        return v

    @model_validator(mode="after")
    def validate_all_entries(self) -> "CacheMetadata":
        if self.all_entries and self.mode != CacheMode.CACHE_EVICT:
            raise ValueError("all_entries is only valid for cache_evict")
        return self

    @property
    def uses_key(self) -> bool:
        """False when the call flushes whole caches and no key is resolved."""
        return not (self.mode == CacheMode.CACHE_EVICT and self.all_entries)


_IMPLICIT_RECEIVERS = ("self", "cls")


@dataclass(frozen=True)
class CallContext:
    """
    Runtime data of one intercepted invocation.

    Attributes:
        arguments: Argument values in call order (receiver excluded)
        bindings: Argument values by parameter name, for key expressions
    """

    arguments: tuple[Any, ...] = ()
    bindings: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @classmethod
    def from_call(cls, func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> "CallContext":
        """
        Bind a call's arguments to func's signature.

        Defaults are applied, a leading self/cls is dropped, *args are
        flattened in order and **kwargs are appended sorted by name.

        Raises:
            TypeError: If the arguments do not match the signature
        """
        signature = inspect.signature(func)
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()

        parameters = list(signature.parameters.values())
        ordered: list[Any] = []
        bindings: dict[str, Any] = {}

        for index, param in enumerate(parameters):
            if param.name not in bound.arguments:
                continue
            value = bound.arguments[param.name]

            if index == 0 and param.name in _IMPLICIT_RECEIVERS:
                continue

            bindings[param.name] = value
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                ordered.extend(value)
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                for name in sorted(value):
                    ordered.append(value[name])
                    bindings.setdefault(name, value[name])
            else:
                ordered.append(value)

        return cls(arguments=tuple(ordered), bindings=bindings)

    def with_result(self, result: Any) -> Mapping[str, Any]:
        """Bindings extended with the return value as ``result``."""
        return {**self.bindings, "result": result}
