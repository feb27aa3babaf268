"""Entry point for building validators.

Example:
    ```python
    from dataknobs_guard import Guard

    email = Guard.string().trim().email()
    port = Guard.integer().range(1, 65535)
    user = Guard.struct({"email": email, "port": port.optional(8080)})
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .checks import promote
from .config import GuardSettings
from .exceptions import PathSegment, SchemaError, ValidationError
from .guards import (
    ArrayValidator,
    BooleanValidator,
    DateValidator,
    IntegerValidator,
    NumberValidator,
    ObjectValidator,
    StringValidator,
)
from .modes import CompletionMode
from .result import defer, is_deferred
from .struct import compile_schema
from .validator import Validator


def _union_step(alternatives: Sequence[Validator], message: str | None) -> Callable[..., Any]:
    """Try alternatives in order; the first success wins."""

    def _failed(value: Any, errors: list[ValidationError]) -> ValidationError:
        error = ValidationError(
            message or "Value ${got} did not match any of ${count} alternatives",
            got=value,
            comparison="union",
        )
        for child in errors:
            error.add_child(child)
        return error

    async def _continue(value: Any, pending: Any, start: int, errors: list[ValidationError]) -> Any:
        try:
            return await pending
        except Exception as exc:
            errors.append(promote(exc, value, "union"))
        for alternative in alternatives[start:]:
            try:
                output = alternative.call(value)
                if is_deferred(output):
                    output = await output
                return output
            except Exception as exc:
                errors.append(promote(exc, value, "union"))
        raise _failed(value, errors)

    def _union(value: Any, *extra: Any) -> Any:
        errors: list[ValidationError] = []
        for index, alternative in enumerate(alternatives):
            try:
                output = alternative.call(value)
            except Exception as exc:
                errors.append(promote(exc, value, "union"))
                continue
            if is_deferred(output):
                return defer(_continue(value, output, index + 1, errors), output)
            return output
        raise _failed(value, errors)

    return _union


class Guard:
    """Static constructors for every validator kind."""

    @staticmethod
    def any() -> Validator:
        """Accept any value unchanged."""
        return Validator.create()

    @staticmethod
    def string(message: str | None = None) -> StringValidator:
        return StringValidator.create(message)

    @staticmethod
    def number(message: str | None = None) -> NumberValidator:
        return NumberValidator.create(message)

    @staticmethod
    def integer(message: str | None = None) -> IntegerValidator:
        return IntegerValidator.create(message)

    bigint = integer

    @staticmethod
    def boolean(message: str | None = None) -> BooleanValidator:
        return BooleanValidator.create(message)

    @staticmethod
    def date(message: str | None = None) -> DateValidator:
        return DateValidator.create(message)

    @staticmethod
    def array(message: str | None = None) -> ArrayValidator:
        return ArrayValidator.create(message)

    @staticmethod
    def object(message: str | None = None) -> ObjectValidator:
        return ObjectValidator.create(message)

    @staticmethod
    def custom(fn: Callable[..., Any]) -> Validator:
        """Wrap a callable; any exception it raises becomes a ValidationError."""
        return Validator.from_function(fn)

    @staticmethod
    def union(validators: Sequence[Validator | Callable[..., Any]], message: str | None = None) -> Validator:
        """Accept values matching any of validators (tried in order).

        Raises:
            SchemaError: If validators is empty
        """
        if not validators:
            raise SchemaError("At least one validator must be provided to union")
        alternatives = [v if isinstance(v, Validator) else Validator.from_function(v) for v in validators]
        return Validator(_union_step(alternatives, message))

    @staticmethod
    def struct(
        schema: Any,
        mode: str | CompletionMode | None = None,
        path: Sequence[PathSegment] = (),
        message: str | None = None,
        settings: GuardSettings | None = None,
    ) -> Validator:
        """Compile a schema tree into one validator (see compile_schema)."""
        return compile_schema(schema, mode=mode, path=path, message=message, settings=settings)


__all__ = ["Guard"]
