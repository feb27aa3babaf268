"""Step builders shared by :class:`~dataknobs_guard.validator.Validator`.

A *step* is a plain callable ``(value, *extra) -> output | awaitable``. The
builders here produce steps for predicate tests, equality and membership
checks and optional values. They raise :class:`ValidationError` on bad input
and :class:`SchemaError` when built with bad arguments.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from numbers import Number
from typing import Any

from .exceptions import SchemaError, ValidationError
from .missing import MISSING, is_nullish
from .result import defer, is_deferred, wrap

Step = Callable[..., Any]


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion.

    ``int`` and ``float`` compare numerically with each other, but never with
    ``bool``; every other pair must have the same type.
    """
    if left is right:
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Number) and isinstance(right, Number):
        return left == right
    return type(left) is type(right) and left == right


def contains(candidates: Iterable[Any], value: Any) -> bool:
    """Membership using :func:`strict_equals`."""
    return any(strict_equals(candidate, value) for candidate in candidates)


def unique_candidates(values: Iterable[Any], argument: str = "values") -> list[Any]:
    """De-duplicate membership candidates, preserving order.

    Raises:
        SchemaError: If values is empty or holds only ``None``/``MISSING``
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise SchemaError(
            f'Argument "{argument}" must be a non-empty list',
            context={"argument": argument, "type": type(values).__name__},
        )
    candidates: list[Any] = []
    for value in values:
        if not contains(candidates, value):
            candidates.append(value)
    if not candidates or all(is_nullish(candidate) for candidate in candidates):
        raise SchemaError(
            f'Argument "{argument}" must be a non-empty list',
            context={"argument": argument},
        )
    return candidates


def promote(exc: Exception, value: Any, comparison: str) -> ValidationError:
    """Turn an arbitrary exception raised by user code into a ValidationError."""
    if isinstance(exc, ValidationError):
        return exc
    return ValidationError(
        "${reason}",
        got=value,
        comparison=comparison,
        reason=str(exc) or type(exc).__name__,
    )


def guard_step(fn: Step, comparison: str) -> Step:
    """Wrap fn so that any exception it raises (now or when awaited) is a ValidationError."""

    def _guarded(*args: Any) -> Any:
        value = args[0] if args else MISSING
        try:
            output = fn(*args)
        except ValidationError:
            raise
        except Exception as exc:
            raise promote(exc, value, comparison) from exc
        if not is_deferred(output):
            return output

        async def _awaited() -> Any:
            try:
                return await output
            except ValidationError:
                raise
            except Exception as exc:
                raise promote(exc, value, comparison) from exc

        return defer(_awaited(), output)

    return _guarded


def predicate_step(
    predicate: Callable[[Any], Any],
    message: str | None = None,
    expected: Any = MISSING,
    comparison: str = "test",
) -> Callable[[Any], Any]:
    """Build a step that passes its input through when predicate holds.

    The predicate may return an awaitable; the step is then deferred too.
    """
    checked = guard_step(predicate, comparison)

    def _verdict(passed: Any, value: Any) -> Any:
        if not passed:
            raise ValidationError(message, got=value, expected=expected, comparison=comparison)
        return value

    def _test(value: Any) -> Any:
        return wrap(checked(value)).then(lambda passed: _verdict(passed, value)).unwrap()

    return _test


def optional_step(step: Step, default: Any = MISSING) -> Step:
    """Build a step that substitutes default for a ``None``/``MISSING`` first argument.

    A callable default is treated as a generator and invoked (it may be
    deferred). If the value is still ``None``/``MISSING`` afterwards it is
    returned as is, without running step.
    """

    def _generator_error(got: Any, exc: Exception) -> ValidationError:
        return ValidationError(
            "Error generating default value: ${reason}",
            got=got,
            comparison="optional",
            reason=str(exc) or type(exc).__name__,
        )

    def _failed(value: Any, exc: Exception) -> ValidationError:
        if isinstance(exc, ValidationError):
            return ValidationError(
                "Default value ${got} failed validation",
                got=value,
                comparison="optional",
                children=[exc],
            )
        return ValidationError(
            "Error while validating optional value - ${got}",
            got=value,
            comparison="optional",
        )

    def _run(args: tuple[Any, ...], substituted: bool) -> Any:
        value = args[0]
        if is_nullish(value):
            return value
        try:
            output = step(*args)
        except ValidationError as exc:
            if not substituted:
                raise
            raise _failed(value, exc) from exc
        except Exception as exc:
            raise _failed(value, exc) from exc
        if not is_deferred(output):
            return output

        async def _awaited() -> Any:
            try:
                return await output
            except ValidationError as exc:
                if not substituted:
                    raise
                raise _failed(value, exc) from exc
            except Exception as exc:
                raise _failed(value, exc) from exc

        return defer(_awaited(), output)

    def _optional(*args: Any) -> Any:
        args = args or (MISSING,)
        if not is_nullish(args[0]) or default is MISSING:
            return _run(args, substituted=False)
        try:
            produced = default() if callable(default) else default
        except Exception as exc:
            raise _generator_error(args[0], exc) from exc
        if not is_deferred(produced):
            return _run((produced, *args[1:]), substituted=True)

        async def _deferred() -> Any:
            try:
                value = await produced
            except Exception as exc:
                raise _generator_error(args[0], exc) from exc
            output = _run((value, *args[1:]), substituted=True)
            if is_deferred(output):
                output = await output
            return output

        return defer(_deferred(), produced)

    return _optional


__all__ = [
    "Step",
    "contains",
    "guard_step",
    "optional_step",
    "promote",
    "strict_equals",
    "predicate_step",
    "unique_candidates",
]
