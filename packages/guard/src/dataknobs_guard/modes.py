"""Completion modes for struct validators."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .exceptions import SchemaError


class CompletionMode(str, Enum):
    """How a struct validator treats missing schema keys and extra input keys.

    - STRICT: missing keys are validated as MISSING; extra keys fail as
      unknown properties; every schema key appears in the output.
    - DEFINED: missing keys are validated as MISSING; extra keys are dropped;
      keys resolving to MISSING are removed from the output.
    - PARTIAL: only keys present in the input are validated; extra keys are
      dropped; keys resolving to MISSING are removed from the output.
    - ALL: missing keys are validated as MISSING; extra keys pass through
      unvalidated.
    """

    STRICT = "STRICT"
    DEFINED = "DEFINED"
    PARTIAL = "PARTIAL"
    ALL = "ALL"

    @classmethod
    def parse(cls, value: Any) -> CompletionMode:
        """Accept a CompletionMode or its case-insensitive name.

        Raises:
            SchemaError: If value is not a known mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise SchemaError(
            f"Invalid completion mode: {value!r}",
            context={"mode": value, "allowed": [mode.value for mode in cls]},
        )

    @property
    def fills_missing(self) -> bool:
        """Whether absent schema keys are validated as MISSING."""
        return self is not CompletionMode.PARTIAL

    @property
    def drops_missing(self) -> bool:
        """Whether keys resolving to MISSING are removed from the output."""
        return self in (CompletionMode.DEFINED, CompletionMode.PARTIAL)


__all__ = ["CompletionMode"]
