"""Leaf validators for primitive kinds, arrays and objects.

Each class is a :class:`~dataknobs_guard.validator.Validator` whose ``create``
installs a type check (with light coercion, in the manner of the dataknobs
data coercer) and whose extra chain methods are thin wrappers around
``test``/``transform``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from numbers import Real
from re import Pattern as RegexPattern
from typing import TYPE_CHECKING, Any

from .checks import strict_equals
from .exceptions import SchemaError, ValidationError
from .formatting import describe_type
from .validator import Validator

if TYPE_CHECKING:
    from .modes import CompletionMode

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)
IPV4_PATTERN = re.compile(r"^((25[0-5]|(2[0-4]|1\d|[1-9]|)\d)(\.(?!$)|$)){4}$")

BOOLEAN_STRINGS = {
    "true": True,
    "false": False,
    "t": True,
    "f": False,
    "yes": True,
    "no": False,
    "y": True,
    "n": False,
    "on": True,
    "off": False,
    "1": True,
    "0": False,
}


def _type_error(value: Any, expected: str, message: str | None) -> ValidationError:
    return ValidationError(
        message or "Expected value to be ${expected}, got ${type}",
        got=value,
        expected=expected,
        comparison="type",
        type=describe_type(value),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class StringValidator(Validator[str]):
    """Validator for ``str`` values."""

    @classmethod
    def create(cls, message: str | None = None) -> StringValidator:
        def _string(value: Any, *extra: Any) -> str:
            if not isinstance(value, str):
                raise _type_error(value, "string", message)
            return value

        return cls(_string)

    def trim(self) -> StringValidator:
        return self.transform(str.strip)

    def lower(self) -> StringValidator:
        return self.transform(str.lower)

    def upper(self) -> StringValidator:
        return self.transform(str.upper)

    def min_length(self, length: int, message: str | None = None) -> StringValidator:
        if length < 0:
            raise SchemaError(f"min length cannot be negative: {length}")
        return self.test(
            lambda value: len(value) >= length,
            message or "Expected string to have at least ${expected} characters, got ${got}",
            length,
        )

    def max_length(self, length: int, message: str | None = None) -> StringValidator:
        if length < 0:
            raise SchemaError(f"max length cannot be negative: {length}")
        return self.test(
            lambda value: len(value) <= length,
            message or "Expected string to have at most ${expected} characters, got ${got}",
            length,
        )

    def length(self, length: int, message: str | None = None) -> StringValidator:
        if length < 0:
            raise SchemaError(f"length cannot be negative: {length}")
        return self.test(
            lambda value: len(value) == length,
            message or "Expected string to have exactly ${expected} characters, got ${got}",
            length,
        )

    def pattern(self, pattern: str | RegexPattern, message: str | None = None) -> StringValidator:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.test(
            lambda value: regex.search(value) is not None,
            message or "Expected value to match pattern ${expected}, got ${got}",
            regex,
        )

    def email(self, message: str | None = None) -> StringValidator:
        return self.pattern(EMAIL_PATTERN, message or "Expected a valid email address, got ${got}")

    def url(self, message: str | None = None) -> StringValidator:
        return self.pattern(URL_PATTERN, message or "Expected a valid URL, got ${got}")

    def uuid(self, message: str | None = None) -> StringValidator:
        return self.pattern(UUID_PATTERN, message or "Expected a valid UUID, got ${got}")

    def ipv4(self, message: str | None = None) -> StringValidator:
        return self.pattern(IPV4_PATTERN, message or "Expected a valid IPv4 address, got ${got}")

    def not_empty(self, message: str | None = None) -> StringValidator:
        return self.test(lambda value: len(value) > 0, message or "Expected non-empty string")

    def starts_with(self, prefix: str, message: str | None = None) -> StringValidator:
        return self.test(
            lambda value: value.startswith(prefix),
            message or "Expected string to start with ${expected}, got ${got}",
            prefix,
        )

    def ends_with(self, suffix: str, message: str | None = None) -> StringValidator:
        return self.test(
            lambda value: value.endswith(suffix),
            message or "Expected string to end with ${expected}, got ${got}",
            suffix,
        )

    def contains(self, substring: str, message: str | None = None) -> StringValidator:
        return self.test(
            lambda value: substring in value,
            message or "Expected string to contain ${expected}, got ${got}",
            substring,
        )


class NumberValidator(Validator[float]):
    """Validator for real numbers. Numeric strings are parsed; booleans are rejected."""

    @classmethod
    def create(cls, message: str | None = None) -> NumberValidator:
        def _number(value: Any, *extra: Any) -> int | float:
            if _is_number(value) and not (isinstance(value, float) and math.isnan(value)):
                return value
            if isinstance(value, str):
                text = value.strip()
                try:
                    return int(text)
                except ValueError:
                    pass
                try:
                    parsed = float(text)
                except ValueError:
                    parsed = math.nan
                if not math.isnan(parsed):
                    return parsed
            raise _type_error(value, "number", message)

        return cls(_number)

    def min(self, minimum: float, message: str | None = None) -> NumberValidator:
        return self.test(
            lambda value: value >= minimum,
            message or "Expected value (${got}) to be greater than or equal to ${expected}",
            minimum,
        )

    def max(self, maximum: float, message: str | None = None) -> NumberValidator:
        return self.test(
            lambda value: value <= maximum,
            message or "Expected value (${got}) to be less than or equal to ${expected}",
            maximum,
        )

    def range(self, minimum: float, maximum: float, message: str | None = None) -> NumberValidator:
        if minimum > maximum:
            raise SchemaError(f"min ({minimum}) cannot be greater than max ({maximum})")
        return self.test(
            lambda value: minimum <= value <= maximum,
            message or "Expected value (${got}) to be between ${expected}",
            [minimum, maximum],
        )

    def gt(self, bound: float, message: str | None = None) -> NumberValidator:
        return self.test(
            lambda value: value > bound,
            message or "Expected value (${got}) to be greater than ${expected}",
            bound,
        )

    def lt(self, bound: float, message: str | None = None) -> NumberValidator:
        return self.test(
            lambda value: value < bound,
            message or "Expected value (${got}) to be less than ${expected}",
            bound,
        )

    def integer(self, message: str | None = None) -> NumberValidator:
        return self.test(
            lambda value: float(value).is_integer(),
            message or "Expected integer, got ${got}",
        )

    def positive(self, message: str | None = None) -> NumberValidator:
        return self.test(lambda value: value > 0, message or "Expected positive number, got ${got}")

    def negative(self, message: str | None = None) -> NumberValidator:
        return self.test(lambda value: value < 0, message or "Expected negative number, got ${got}")

    def finite(self, message: str | None = None) -> NumberValidator:
        return self.test(lambda value: math.isfinite(value), message or "Expected finite number, got ${got}")

    def multiple_of(self, base: float, message: str | None = None) -> NumberValidator:
        if base == 0:
            raise SchemaError("multiple_of base cannot be zero")
        return self.test(
            lambda value: value % base == 0,
            message or "Expected value (${got}) to be a multiple of ${expected}",
            base,
        )


class IntegerValidator(Validator[int]):
    """Validator for arbitrary-precision integers. Integral strings and floats are converted."""

    @classmethod
    def create(cls, message: str | None = None) -> IntegerValidator:
        def _integer(value: Any, *extra: Any) -> int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if isinstance(value, str):
                try:
                    return int(value.strip())
                except ValueError:
                    pass
            raise _type_error(value, "integer", message)

        return cls(_integer)

    def min(self, minimum: int, message: str | None = None) -> IntegerValidator:
        return self.test(
            lambda value: value >= minimum,
            message or "Expected value (${got}) to be greater than or equal to ${expected}",
            minimum,
        )

    def max(self, maximum: int, message: str | None = None) -> IntegerValidator:
        return self.test(
            lambda value: value <= maximum,
            message or "Expected value (${got}) to be less than or equal to ${expected}",
            maximum,
        )

    def range(self, minimum: int, maximum: int, message: str | None = None) -> IntegerValidator:
        if minimum > maximum:
            raise SchemaError(f"min ({minimum}) cannot be greater than max ({maximum})")
        return self.test(
            lambda value: minimum <= value <= maximum,
            message or "Expected value (${got}) to be between ${expected}",
            [minimum, maximum],
        )

    def positive(self, message: str | None = None) -> IntegerValidator:
        return self.test(lambda value: value > 0, message or "Expected positive integer, got ${got}")

    def negative(self, message: str | None = None) -> IntegerValidator:
        return self.test(lambda value: value < 0, message or "Expected negative integer, got ${got}")

    def pow(self, exponent: int) -> IntegerValidator:
        if exponent < 0:
            raise SchemaError(f"Exponent cannot be negative: {exponent}", context={"exponent": exponent})
        return self.transform(lambda value: value**exponent)


class BooleanValidator(Validator[bool]):
    """Validator for booleans; common textual and numeric spellings are accepted."""

    @classmethod
    def create(cls, message: str | None = None) -> BooleanValidator:
        def _boolean(value: Any, *extra: Any) -> bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, (str, int)):
                converted = BOOLEAN_STRINGS.get(str(value).strip().lower())
                if converted is not None:
                    return converted
            raise _type_error(value, "boolean", message)

        return cls(_boolean)

    def true(self, message: str | None = None) -> BooleanValidator:
        return self.equals(True, message)

    def false(self, message: str | None = None) -> BooleanValidator:
        return self.equals(False, message)


class DateValidator(Validator[datetime]):
    """Validator for dates. Accepts datetime/date objects, ISO-8601 text and epoch seconds."""

    @classmethod
    def create(cls, message: str | None = None) -> DateValidator:
        def _date(value: Any, *extra: Any) -> datetime:
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime(value.year, value.month, value.day)
            if isinstance(value, str):
                try:
                    return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
                except ValueError:
                    pass
            elif _is_number(value):
                try:
                    return datetime.fromtimestamp(value)
                except (OverflowError, OSError, ValueError):
                    pass
            raise _type_error(value, "date", message)

        return cls(_date)

    def min(self, minimum: datetime, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value >= minimum,
            message or "Expected date (${got}) to be on or after ${expected}",
            minimum,
        )

    def max(self, maximum: datetime, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value <= maximum,
            message or "Expected date (${got}) to be on or before ${expected}",
            maximum,
        )

    def before(self, bound: datetime, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value < bound,
            message or "Expected date (${got}) to be before ${expected}",
            bound,
        )

    def after(self, bound: datetime, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value > bound,
            message or "Expected date (${got}) to be after ${expected}",
            bound,
        )

    def past(self, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value < datetime.now(value.tzinfo),
            message or "Expected a date in the past, got ${got}",
        )

    def future(self, message: str | None = None) -> DateValidator:
        return self.test(
            lambda value: value > datetime.now(value.tzinfo),
            message or "Expected a date in the future, got ${got}",
        )


class ArrayValidator(Validator[list]):
    """Validator for lists (tuples are accepted and converted)."""

    @classmethod
    def create(cls, message: str | None = None) -> ArrayValidator:
        def _array(value: Any, *extra: Any) -> list:
            if isinstance(value, (list, tuple)):
                return list(value)
            raise _type_error(value, "array", message)

        return cls(_array)

    def of(self, schema: Any, message: str | None = None, mode: str | CompletionMode | None = None) -> ArrayValidator:
        """Validate every element against schema, aggregating per-index failures.

        Args:
            schema: Element schema node (validator, sample value, list or mapping)
            message: Aggregate error message
            mode: Completion mode for object elements
        """
        from .struct import compile_schema, elements_step

        element = compile_schema(schema, mode=mode)
        return self.transform(elements_step(element, message))

    def min_length(self, length: int, message: str | None = None) -> ArrayValidator:
        return self.test(
            lambda value: len(value) >= length,
            message or f"Expected array to have at least {length} element{'' if length == 1 else 's'}",
            length,
        )

    def max_length(self, length: int, message: str | None = None) -> ArrayValidator:
        return self.test(
            lambda value: len(value) <= length,
            message or f"Expected array to have at most {length} element{'' if length == 1 else 's'}",
            length,
        )

    def not_empty(self, message: str | None = None) -> ArrayValidator:
        return self.test(lambda value: len(value) > 0, message or "Expected non-empty array")

    def unique(self, message: str | None = None) -> ArrayValidator:
        def _unique(items: Sequence[Any]) -> bool:
            seen: list[Any] = []
            for item in items:
                if any(strict_equals(item, other) for other in seen):
                    return False
                seen.append(item)
            return True

        return self.test(_unique, message or "Expected array with unique elements")


class ObjectValidator(Validator[dict]):
    """Validator for mappings (converted to ``dict``)."""

    @classmethod
    def create(cls, message: str | None = None) -> ObjectValidator:
        def _object(value: Any, *extra: Any) -> dict:
            if isinstance(value, Mapping):
                return dict(value)
            raise _type_error(value, "object", message)

        return cls(_object)

    def schema(
        self,
        schema: Mapping[str, Any],
        mode: str | CompletionMode | None = None,
        message: str | None = None,
    ) -> ObjectValidator:
        """Validate the object against a field schema (see compile_schema)."""
        from .struct import compile_schema

        if not isinstance(schema, Mapping):
            raise SchemaError("Object schema must be a mapping", context={"type": type(schema).__name__})
        return self.transform(compile_schema(schema, mode=mode, message=message).step)

    def keys(self, required: Sequence[str], message: str | None = None) -> ObjectValidator:
        return self.test(
            lambda value: all(key in value for key in required),
            message or "Expected object to have keys: ${expected}",
            list(required),
        )


__all__ = [
    "ArrayValidator",
    "BooleanValidator",
    "DateValidator",
    "IntegerValidator",
    "NumberValidator",
    "ObjectValidator",
    "StringValidator",
]
