"""Named store of reusable validators.

A registry lets configuration refer to validators by name (see the ``ref``
field option of :class:`~dataknobs_guard.factory.StructFactory`).

Example:
    ```python
    from dataknobs_guard import Guard, ValidatorRegistry

    registry = ValidatorRegistry()
    registry.register("zipcode", Guard.string().pattern(r"^\\d{5}$"))
    registry.get("zipcode")("12345")
    ```
"""

import logging
import threading
from typing import Dict, Iterator, List

from .exceptions import NotFoundError, OperationError, SchemaError
from .validator import Validator

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Thread-safe registry of validators keyed by name.

    Args:
        name: Name for this registry instance (used in errors and logs)
    """

    def __init__(self, name: str = "validators"):
        self._name = name
        self._items: Dict[str, Validator] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str, validator: Validator, allow_overwrite: bool = False) -> None:
        """Register a validator by key.

        Args:
            key: Unique name for the validator
            validator: Validator to register
            allow_overwrite: Whether to replace an existing entry

        Raises:
            SchemaError: If validator is not a Validator
            OperationError: If key is taken and allow_overwrite is False
        """
        if not isinstance(validator, Validator):
            raise SchemaError(
                f"Only validators can be registered, got {type(validator).__name__}",
                context={"key": key, "registry": self._name},
            )
        with self._lock:
            if not allow_overwrite and key in self._items:
                raise OperationError(
                    f"Validator '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = validator
        logger.debug(f"Registered validator '{key}' in {self._name}")

    def unregister(self, key: str) -> Validator:
        """Unregister and return a validator.

        Raises:
            NotFoundError: If key is not registered
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Validator not found: {key}",
                    context={"key": key, "registry": self._name},
                )
            return self._items.pop(key)

    def get(self, key: str) -> Validator:
        """Get a validator by key.

        Raises:
            NotFoundError: If key is not registered
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Validator not found: {key}",
                    context={"key": key, "registry": self._name, "available_keys": list(self._items.keys())},
                )
            return self._items[key]

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_keys())

    def __repr__(self) -> str:
        return f"ValidatorRegistry(name={self._name!r}, count={self.count()})"


__all__ = ["ValidatorRegistry"]
