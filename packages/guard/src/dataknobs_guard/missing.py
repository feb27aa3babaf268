"""Marker for absent values.

Python has a single "no value" object (``None``), but validation has to tell
"explicitly null" apart from "not provided at all". ``MISSING`` plays the part
of the latter: it is what a struct validator passes for an absent key and what
a validator called with no arguments receives.
"""

from __future__ import annotations

from typing import Any


class _MissingType:
    """Singleton type of :data:`MISSING`."""

    _instance: _MissingType | None = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _MissingType:
        return self

    def __deepcopy__(self, memo: dict) -> _MissingType:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingType()


def is_missing(value: Any) -> bool:
    """Return True if value is the MISSING marker."""
    return value is MISSING


def is_nullish(value: Any) -> bool:
    """Return True for ``None`` or ``MISSING``."""
    return value is None or value is MISSING
