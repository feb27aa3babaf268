"""Exception hierarchy for dataknobs_guard.

Two kinds of failure exist and are kept apart:

- Setup-time errors (:class:`SchemaError`, :class:`AsyncValidatorError`) are
  programming errors: bad combinator arguments, unsupported schema nodes,
  misuse of ``safe_call``. They are raised immediately and never aggregated.
- :class:`ValidationError` is the expected, recoverable outcome of calling a
  validator with bad input. Composite validators aggregate many of them as
  ``children`` of a single parent error.

Example:
    ```python
    from dataknobs_guard import Guard, ValidationError

    user = Guard.struct({"name": Guard.string(), "age": Guard.number().min(0)})
    try:
        user({"name": 1, "age": -1})
    except ValidationError as e:
        for failure in e.flatten():
            print(failure.path_string, failure.message)
    ```
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Dict, Union

from .formatting import format_value, is_negated, render_template
from .missing import MISSING

PathSegment = Union[str, int]


class GuardError(Exception):
    """Base exception for all dataknobs_guard errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class SchemaError(GuardError):
    """Raised at setup time when a validator or schema is built incorrectly.

    Examples are an empty membership list, an unsupported schema node or an
    invalid factory configuration. These are never produced while validating
    a value.
    """

    pass


class AsyncValidatorError(GuardError):
    """Raised when ``safe_call`` is used on a validator that turned out to be asynchronous."""

    pass


class NotFoundError(GuardError):
    """Raised when a named validator is not registered."""

    pass


class OperationError(GuardError):
    """Raised when a registry operation cannot be performed."""

    pass


def format_path(path: Sequence[PathSegment]) -> str:
    """Render path segments as ``address.zipcode`` / ``items[2]``."""
    rendered = ""
    for segment in path:
        if isinstance(segment, int):
            rendered += f"[{segment}]"
        elif rendered:
            rendered += f".{segment}"
        else:
            rendered = str(segment)
    return rendered


class ValidationError(GuardError):
    """Raised when a value fails validation.

    The message may be a template with ``${name}`` placeholders bound to the
    context (``got``, ``expected``, ``comparison``, ``key``, ``path`` and any
    extra keyword). ``got`` and ``expected`` are rendered with
    :func:`~dataknobs_guard.formatting.format_value`.

    An error with non-empty ``children`` is an aggregate: its own message
    describes the aggregate and each child carries the detail of one failed
    field or element, with ``path`` scoped to its position.

    Args:
        message: Message or message template. When omitted a default is
            derived from ``got``/``expected``/``comparison``.
        got: The value received
        expected: The expected value or a description of it
        comparison: Name of the check that failed (``equals``, ``notIn``, ...)
        key: Field name or index the error belongs to
        path: Path segments from the root of the validated value
        children: Child errors for aggregate failures
        **extra: Additional context values usable in the template
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        got: Any = MISSING,
        expected: Any = MISSING,
        comparison: str | None = None,
        key: PathSegment | None = None,
        path: Sequence[PathSegment] = (),
        children: Sequence[ValidationError] = (),
        **extra: Any,
    ):
        context: Dict[str, Any] = dict(extra)
        if got is not MISSING:
            context["got"] = got
        if expected is not MISSING:
            context["expected"] = expected
        if comparison is not None:
            context["comparison"] = comparison
        if key is not None:
            context["key"] = key
        self.template = message if message is not None else self._default_template(got, expected, comparison)
        self.path: tuple[PathSegment, ...] = tuple(path)
        self.children: list[ValidationError] = list(children)
        super().__init__(self._render(context), context=context)

    @staticmethod
    def _default_template(got: Any, expected: Any, comparison: str | None) -> str:
        negation = "not " if is_negated(comparison) else ""
        if got is not MISSING and expected is not MISSING:
            return f"Expected value {negation}to be ${{expected}}, but got ${{got}}"
        if expected is not MISSING:
            return f"Expected value to {negation}be ${{expected}}"
        if got is not MISSING:
            return "Unexpected value: ${got}"
        return "Validation failed"

    def _render(self, context: Dict[str, Any]) -> str:
        variables = dict(context)
        variables["path"] = self.path_string
        variables["count"] = len(self.children)
        return render_template(self.template, variables)

    @property
    def message(self) -> str:
        """The rendered message."""
        return str(self)

    @property
    def got(self) -> Any:
        return self.context.get("got", MISSING)

    @property
    def expected(self) -> Any:
        return self.context.get("expected", MISSING)

    @property
    def comparison(self) -> str | None:
        return self.context.get("comparison")

    @property
    def key(self) -> PathSegment | None:
        return self.context.get("key")

    @property
    def path_string(self) -> str:
        """Dotted/bracketed rendering of ``path``."""
        return format_path(self.path)

    def add_child(self, error: ValidationError, segment: PathSegment | None = None) -> ValidationError:
        """Attach a child failure, scoping it (and its descendants) under segment.

        Args:
            error: The child failure
            segment: Field name or index of the child within this value

        Returns:
            Self for chaining
        """
        if segment is not None:
            error.context.setdefault("key", segment)
            error._prefix_path((segment,))
        self.children.append(error)
        self.args = (self._render(self.context),)
        return self

    def _prefix_path(self, prefix: Sequence[PathSegment]) -> None:
        self.path = tuple(prefix) + self.path
        self.args = (self._render(self.context),)
        for child in self.children:
            child._prefix_path(prefix)

    def scoped(self, prefix: Sequence[PathSegment]) -> ValidationError:
        """Prefix this error's path (and its descendants') with prefix."""
        if prefix:
            self._prefix_path(prefix)
        return self

    def flatten(self) -> list[ValidationError]:
        """Return the leaf failures, depth first."""
        if not self.children:
            return [self]
        leaves: list[ValidationError] = []
        for child in self.children:
            leaves.extend(child.flatten())
        return leaves

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        location = f" at {self.path_string!r}" if self.path else ""
        return f"{type(self).__name__}({self.message!r}{location}, children={len(self.children)})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data: Dict[str, Any] = {
            "message": self.message,
            "path": self.path_string,
        }
        if self.key is not None:
            data["key"] = self.key
        if self.comparison is not None:
            data["comparison"] = self.comparison
        if "got" in self.context:
            data["got"] = format_value(self.got)
        if "expected" in self.context:
            data["expected"] = format_value(self.expected)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


__all__ = [
    "GuardError",
    "SchemaError",
    "AsyncValidatorError",
    "NotFoundError",
    "OperationError",
    "ValidationError",
    "PathSegment",
    "format_path",
]
