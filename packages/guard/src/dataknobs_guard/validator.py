"""The Validator abstraction: an immutable, chainable unit of validation.

A :class:`Validator` wraps a single step function. Chain methods never mutate
the validator they are called on; each returns a new validator whose step runs
the previous step and then the new one, so a partially built chain can be
shared and extended independently.

Synchronous evaluation is preserved whenever possible: a chain only becomes
deferred (returns an awaitable) when one of its steps actually returns an
awaitable.

Example:
    ```python
    from dataknobs_guard import Validator

    positive = Validator.create().test(lambda v: v > 0, "Must be positive")
    positive(5)            # 5
    positive(-1)           # raises ValidationError
    error, value = positive.safe_call(-1)
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from .checks import (
    Step,
    contains,
    guard_step,
    optional_step,
    predicate_step,
    strict_equals,
    unique_candidates,
)
from .exceptions import AsyncValidatorError, ValidationError
from .missing import MISSING
from .result import Result, SafeResult, is_deferred, wrap

T = TypeVar("T")
V = TypeVar("V", bound="Validator")


def _identity(value: Any = MISSING, *extra: Any) -> Any:
    return value


class Validator(Generic[T]):
    """Immutable validator wrapping a step ``(value, *extra) -> output | awaitable``.

    The step is expected to raise :class:`ValidationError` on bad input. Use
    :meth:`create` (or ``Guard.custom``) to wrap arbitrary callables so that
    any other exception they raise is promoted to a ValidationError.

    Args:
        step: The step function
    """

    def __init__(self, step: Step):
        self._step = step

    @classmethod
    def create(cls: type[V], message: str | None = None) -> V:
        """Create a validator that accepts any value unchanged.

        Subclasses override this to install their type check; message is the
        error message used when that check fails.
        """
        return cls(_identity)

    @classmethod
    def from_function(cls: type[V], fn: Callable[..., Any], comparison: str = "custom") -> V:
        """Wrap an arbitrary callable as a validator.

        Exceptions other than ValidationError raised by fn are promoted to
        ValidationError with the given comparison.
        """
        return cls(guard_step(fn, comparison))

    @property
    def step(self) -> Step:
        """The wrapped step function."""
        return self._step

    def evaluate(self, *args: Any) -> Result:
        """Run the step and classify the outcome as Ready or Pending.

        Raises:
            ValidationError: If the step fails synchronously
        """
        return wrap(self._step(*(args or (MISSING,))))

    def call(self, *args: Any) -> Any:
        """Validate the input.

        Returns:
            The output value, or an awaitable resolving to it when the chain
            contains an asynchronous step

        Raises:
            ValidationError: If validation fails synchronously. A deferred
                result raises it when awaited instead.
        """
        return self.evaluate(*args).unwrap()

    def __call__(self, *args: Any) -> Any:
        return self.call(*args)

    def as_function(self) -> Callable[..., Any]:
        """Return a plain function that validates its arguments."""

        def _validate(*args: Any) -> Any:
            return self.call(*args)

        _validate.__name__ = f"{type(self).__name__.lower()}_call"
        _validate.__doc__ = f"Validate input with {self!r}."
        return _validate

    def safe_call(self, *args: Any) -> SafeResult:
        """Validate without raising on bad input.

        Returns:
            SafeResult unpacking as ``(error, value)``

        Raises:
            AsyncValidatorError: If the validator turns out to be asynchronous;
                use :meth:`safe_call_async` for those
        """
        try:
            result = self.evaluate(*args)
        except ValidationError as error:
            return SafeResult.failure(error)
        if result.is_pending:
            result.discard()  # type: ignore[union-attr]
            raise AsyncValidatorError(
                "safe_call() used on an asynchronous validator; use safe_call_async() instead",
                context={"validator": repr(self)},
            )
        return SafeResult.success(result.value)  # type: ignore[union-attr]

    validate = safe_call

    async def safe_call_async(self, *args: Any) -> SafeResult:
        """Awaitable counterpart of :meth:`safe_call`; accepts any validator."""
        try:
            output = self.call(*args)
            if is_deferred(output):
                output = await output
        except ValidationError as error:
            return SafeResult.failure(error)
        return SafeResult.success(output)

    def transform(self, fn: Callable[[Any], Any], cls: type[V] | None = None) -> V:
        """Return a validator that runs this one, then applies fn to its output.

        If both this step and fn answer immediately the composed call answers
        immediately; otherwise it is deferred and runs them in order.

        Args:
            fn: Transformation applied to the output (may return an awaitable)
            cls: Validator class of the result (defaults to this class)
        """
        target = cls or type(self)
        step = self._step
        applied = guard_step(fn, "transform")

        def _transformed(*args: Any) -> Any:
            return wrap(step(*args)).then(applied).unwrap()

        return target(_transformed)  # type: ignore[return-value]

    def test(
        self: V,
        predicate: Callable[[Any], Any],
        message: str | None = None,
        expected: Any = MISSING,
    ) -> V:
        """Fail with ``comparison="test"`` unless predicate(output) is truthy.

        The output passes through unchanged. predicate may return an awaitable.
        """
        return self.transform(predicate_step(predicate, message, expected, "test"))

    def _check(self: V, predicate: Callable[[Any], Any], message: str | None, expected: Any, comparison: str) -> V:
        return self.transform(predicate_step(predicate, message, expected, comparison))

    def equals(self: V, value: Any, message: str | None = None) -> V:
        """Output must be strictly equal to value."""
        return self._check(lambda output: strict_equals(output, value), message, value, "equals")

    def not_equals(self: V, value: Any, message: str | None = None) -> V:
        """Output must not be strictly equal to value."""
        return self._check(lambda output: not strict_equals(output, value), message, value, "notEquals")

    def is_in(self: V, values: Iterable[Any], message: str | None = None) -> V:
        """Output must be one of values.

        Raises:
            SchemaError: If values is empty or only holds None/MISSING
        """
        candidates = unique_candidates(values)
        return self._check(
            lambda output: contains(candidates, output),
            message or "Expected value to be in ${expected}, but got ${got}",
            candidates,
            "in",
        )

    one_of = is_in

    def not_in(self: V, values: Iterable[Any], message: str | None = None) -> V:
        """Output must not be one of values.

        Raises:
            SchemaError: If values is empty or only holds None/MISSING
        """
        candidates = unique_candidates(values)
        return self._check(
            lambda output: not contains(candidates, output),
            message or "Expected value not to be in ${expected}, but got ${got}",
            candidates,
            "notIn",
        )

    def optional(self: V, default: Any = MISSING) -> V:
        """Accept ``None``/``MISSING`` input.

        Args:
            default: Value (or zero-argument generator, possibly async)
                substituted for a missing input before validation. Without a
                default, a missing input is returned unchanged.
        """
        return type(self)(optional_step(self._step, default))

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


__all__ = ["Validator"]
