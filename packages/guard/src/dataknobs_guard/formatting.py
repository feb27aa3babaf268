"""Human-readable rendering of values inside error messages."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from string import Template
from typing import Any

from .missing import MISSING

NEGATION_PREFIX = "not"


def format_value(value: Any) -> str:
    """Render a value for display in a validation message.

    Rules are checked in order: sequences become a parenthesized,
    comma-joined list of formatted elements; dates and times become
    ISO-8601 text; regex patterns become their source text; mappings
    become compact JSON; ``None`` becomes ``null``; :data:`MISSING`
    becomes ``undefined``; booleans become ``TRUE``/``FALSE``; everything
    else uses ``str``.

    Rendering never raises. A sequence that contains itself renders the
    repeated reference as ``(...)``, and a mapping JSON cannot encode
    (non-string keys, cycles) falls back to ``repr``.

    Args:
        value: Value to render

    Returns:
        Display string
    """
    return _format(value, set())


def _format(value: Any, seen: set[int]) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        if id(value) in seen:
            return "(...)"
        seen.add(id(value))
        try:
            return f"({', '.join(_format(v, seen) for v in value)})"
        finally:
            seen.discard(id(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, Mapping):
        try:
            return json.dumps(dict(value), separators=(",", ":"), default=str)
        except (TypeError, ValueError, RecursionError):
            return repr(value)
    if value is None:
        return "null"
    if value is MISSING:
        return "undefined"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def is_negated(comparison: str | None) -> bool:
    """Check whether a comparison name is a negated one (``notEquals``, ``notIn``)."""
    return bool(comparison) and comparison.startswith(NEGATION_PREFIX)  # type: ignore[union-attr]


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Fill ``${name}`` placeholders in template.

    Unknown placeholders are left untouched.
    """
    return Template(template).safe_substitute(
        {key: format_value(value) for key, value in variables.items()}
    )


def describe_type(value: Any) -> str:
    """Short, language-neutral name of a value's kind for type-mismatch messages."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime, date)):
        return "date"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if callable(value):
        return "function"
    return type(value).__name__
