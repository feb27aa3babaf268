"""Result types for synchronous/deferred validation.

Every step of a validator either produces its value immediately or hands back
an awaitable. :class:`Ready` and :class:`Pending` make that explicit so that
combinators can state how they map ``(Ready|Pending) x (Ready|Pending)``:

- ``Ready.then(f)`` is ``Ready`` when ``f`` answers immediately, otherwise
  ``Pending``.
- ``Pending.then(f)`` is always ``Pending`` and runs ``f`` after the awaited
  value resolves.

No deferral is introduced unless some step actually returns an awaitable.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Coroutine, Generator, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .exceptions import ValidationError
from .missing import MISSING

T = TypeVar("T")


def is_deferred(value: Any) -> bool:
    """Check whether value is a deferred (awaitable) result."""
    return inspect.isawaitable(value)


class Deferred:
    """Awaitable wrapping a coroutine together with the awaitables it will await.

    Deferred steps create their inner awaitables eagerly. Keeping them as
    dependencies lets :func:`discard` close the whole chain when the result
    is dropped without being awaited.
    """

    def __init__(self, coroutine: Coroutine[Any, Any, Any], *dependencies: Any):
        self._coroutine = coroutine
        self._dependencies = dependencies

    def __await__(self) -> Generator[Any, None, Any]:
        return self._coroutine.__await__()

    def close(self) -> None:
        """Close the coroutine and, transitively, every dependency."""
        self._coroutine.close()
        for dependency in self._dependencies:
            discard(dependency)


def defer(coroutine: Coroutine[Any, Any, Any], *dependencies: Any) -> Deferred:
    """Wrap coroutine, recording the awaitables it depends on."""
    return Deferred(coroutine, *(d for d in dependencies if is_deferred(d)))


def discard(awaitable: Any) -> None:
    """Drop an awaitable without running it, closing anything it would have awaited."""
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()


@dataclass(frozen=True)
class Ready(Generic[T]):
    """A value that is available now."""

    value: T

    is_pending = False

    def then(self, fn: Callable[[T], Any]) -> Result:
        """Apply fn to the value."""
        return evaluate(fn, self.value)

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Pending(Generic[T]):
    """A value that will be available once ``awaitable`` resolves."""

    awaitable: Awaitable[T]

    is_pending = True

    def then(self, fn: Callable[[T], Any]) -> Pending:
        """Apply fn to the value once it resolves; fn may itself be deferred."""
        source = self.awaitable

        async def _chained() -> Any:
            value = await source
            output = fn(value)
            if is_deferred(output):
                output = await output
            return output

        return Pending(defer(_chained(), source))

    def unwrap(self) -> Awaitable[T]:
        return self.awaitable

    def discard(self) -> None:
        """Drop the awaitable without running it."""
        discard(self.awaitable)


Result = Union[Ready[Any], Pending[Any]]


def wrap(value: Any) -> Result:
    """Classify a raw step output as Ready or Pending."""
    if is_deferred(value):
        return Pending(value)
    return Ready(value)


def evaluate(fn: Callable[..., Any], *args: Any) -> Result:
    """Call fn and classify its output. Exceptions raised synchronously propagate."""
    return wrap(fn(*args))


async def settle_all(awaitables: Iterable[Awaitable[Any]]) -> list[Any]:
    """Run awaitables concurrently and wait for every one of them.

    All awaitables are scheduled before any is awaited. Failures do not
    short-circuit: each entry of the returned list is either the resolved
    value or the ``Exception`` it raised.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
    return list(outcomes)


@dataclass
class SafeResult:
    """Outcome of a non-raising validation call.

    Unpacks as ``(error, value)``; exactly one of them is meaningful. ``value``
    is :data:`~dataknobs_guard.missing.MISSING` on failure.
    """

    error: ValidationError | None
    value: Any = MISSING

    @property
    def valid(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    def __iter__(self) -> Iterator[Any]:
        return iter((self.error, self.value))

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int) -> Any:
        return (self.error, self.value)[index]

    @classmethod
    def success(cls, value: Any) -> SafeResult:
        return cls(error=None, value=value)

    @classmethod
    def failure(cls, error: ValidationError) -> SafeResult:
        return cls(error=error, value=MISSING)


__all__ = [
    "Deferred",
    "Ready",
    "Pending",
    "Result",
    "SafeResult",
    "defer",
    "discard",
    "evaluate",
    "is_deferred",
    "settle_all",
    "wrap",
]
