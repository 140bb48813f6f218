"""
intercache — Key Generators

Turn the arguments of an intercepted call into a deterministic cache key.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Any

from ..config import KeyGeneratorType
from ..errors import ConfigurationError, UnsupportedKeyTypeError

SCALAR_TYPES = (str, int, float, bool)


class KeyGenerator(ABC):
    """Stateless, deterministic transformation from call arguments to a key."""

    @abstractmethod
    def generate_key(self, params: Any) -> str:
        """
        Build a cache key.

        Args:
            params: A single value, or a list/tuple of values in call order

        Returns:
            Key string; equal inputs always give equal keys
        """
        pass


class SimpleHashKeyGenerator(KeyGenerator):
    """
    Sums the MD5 digests of the parameters and hashes the total.

    Parameters must be scalars (str, int, float, bool) or None. Because the
    digests are added, swapping two arguments yields the same key.
    """

    SEED = 1234
    NULL_VALUE = 5678

    @staticmethod
    def _digest(value: Any) -> str:
        return hashlib.md5(str(value).encode("utf-8")).hexdigest()

    def generate_key(self, params: Any) -> str:
        parameters = params if isinstance(params, (list, tuple)) else [params]

        accumulator = self.SEED
        for position, parameter in enumerate(parameters):
            if parameter is None:
                accumulator += self.NULL_VALUE
            elif isinstance(parameter, SCALAR_TYPES):
                accumulator += int(self._digest(parameter), 16)
            else:
                raise UnsupportedKeyTypeError(parameter, position)

        return self._digest(accumulator)


_KEY_GENERATORS: dict[KeyGeneratorType, type[KeyGenerator]] = {
    KeyGeneratorType.SIMPLE_HASH: SimpleHashKeyGenerator,
}


def create_key_generator(generator_id: KeyGeneratorType | str) -> KeyGenerator:
    """Instantiate a registered key generator by id."""
    try:
        return _KEY_GENERATORS[KeyGeneratorType(generator_id)]()
    except (KeyError, ValueError):
        raise ConfigurationError(
            f"Unknown key generator: {generator_id}",
            details={"key_generator": str(generator_id), "supported": [k.value for k in _KEY_GENERATORS]},
        ) from None
