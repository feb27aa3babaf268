"""Struct compiler: one composite validator per nested schema.

A schema node is one of:

- a :class:`~dataknobs_guard.validator.Validator` (or plain callable), used as is
- a sample value selecting a default validator for its kind: ``str``,
  ``bool``, a number (``0`` and ``0.0`` alike), ``datetime``/``date``,
  or a compiled regex (a string matching the pattern); the ``int`` type
  object selects the integer validator
- a list/tuple with one element: the element schema of an array
  (an empty list accepts any list)
- a mapping of field name to schema node

:func:`compile_schema` walks the tree once and returns a validator; calling it
never re-walks the schema. Composite validators run every field/element
validator, start all deferred ones before awaiting any, and raise exactly one
aggregate :class:`ValidationError` whose children carry per-key paths.

Example:
    ```python
    from dataknobs_guard import Guard, compile_schema

    user = compile_schema(
        {
            "name": Guard.string().min_length(1),
            "age": Guard.number().min(0),
            "address": {"zipcode": "00000"},
            "tags": [str],
        },
        mode="DEFINED",
    )
    ```
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

from .checks import promote
from .config import DEFAULT_SETTINGS, GuardSettings
from .exceptions import PathSegment, SchemaError, ValidationError
from .formatting import describe_type
from .guards import (
    ArrayValidator,
    BooleanValidator,
    DateValidator,
    IntegerValidator,
    NumberValidator,
    ObjectValidator,
    StringValidator,
)
from .missing import MISSING
from .modes import CompletionMode
from .result import defer, is_deferred, settle_all
from .validator import Validator

logger = logging.getLogger(__name__)

_TYPE_SAMPLES: Dict[type, Callable[[], Validator]] = {
    str: StringValidator.create,
    bool: BooleanValidator.create,
    int: IntegerValidator.create,
    float: NumberValidator.create,
    datetime: DateValidator.create,
    date: DateValidator.create,
    list: ArrayValidator.create,
    dict: ObjectValidator.create,
}


@dataclass(frozen=True)
class StructOptions:
    """Options fixed for a compiled struct validator.

    Attributes:
        mode: Completion mode for every object node of the tree
        path: Path prefix applied to errors raised by the top-level node
        message: Aggregate error message of the top-level node
    """

    mode: CompletionMode = CompletionMode.STRICT
    path: Tuple[PathSegment, ...] = ()
    message: str | None = None


class _Collector:
    """Gathers per-segment outcomes of one composite call."""

    def __init__(self) -> None:
        self.output: Dict[PathSegment, Any] = {}
        self.failures: Dict[PathSegment, ValidationError] = {}
        self.pending: List[Tuple[PathSegment, Any, Any]] = []
        self.order: List[PathSegment] = []

    def run(self, segment: PathSegment, validator: Validator, value: Any) -> None:
        self.order.append(segment)
        try:
            result = validator.evaluate(value)
        except Exception as exc:
            self.failures[segment] = promote(exc, value, "struct")
            return
        if result.is_pending:
            self.pending.append((segment, value, result.unwrap()))
        else:
            self.output[segment] = result.unwrap()

    def fail(self, segment: PathSegment, error: ValidationError) -> None:
        self.order.append(segment)
        self.failures[segment] = error

    def keep(self, segment: PathSegment, value: Any) -> None:
        self.order.append(segment)
        self.output[segment] = value

    def finish(self, build: Callable[[Dict[PathSegment, Any]], Any], aggregate: Callable[[], ValidationError]) -> Any:
        """Return build(outputs) or, when any segment failed, raise the aggregate.

        Returns an awaitable instead when some segments are still pending.
        """
        if not self.pending:
            return self._conclude(build, aggregate)

        async def _settled() -> Any:
            outcomes = await settle_all(awaitable for _, _, awaitable in self.pending)
            for (segment, value, _), outcome in zip(self.pending, outcomes):
                if isinstance(outcome, Exception):
                    self.failures[segment] = promote(outcome, value, "struct")
                else:
                    self.output[segment] = outcome
            self.pending = []
            return self._conclude(build, aggregate)

        return defer(_settled(), *(awaitable for _, _, awaitable in self.pending))

    def _conclude(self, build: Callable[[Dict[PathSegment, Any]], Any], aggregate: Callable[[], ValidationError]) -> Any:
        if self.failures:
            error = aggregate()
            for segment in self.order:
                if segment in self.failures:
                    error.add_child(self.failures[segment], segment)
            logger.debug(f"{len(self.failures)} of {len(self.order)} entries failed validation")
            raise error
        ordered = {segment: self.output[segment] for segment in self.order if segment in self.output}
        return build(ordered)


def fields_step(
    validators: Mapping[str, Validator],
    mode: CompletionMode,
    message: str,
) -> Callable[..., Any]:
    """Build the per-call step of an object node."""
    schema_keys = list(validators)

    def _aggregate() -> ValidationError:
        return ValidationError(message, comparison="struct")

    def _build(output: Dict[PathSegment, Any]) -> Dict[Any, Any]:
        result: Dict[Any, Any] = {}
        for key, value in output.items():
            if value is MISSING:
                if mode.drops_missing:
                    continue
                value = None
            result[key] = value
        return result

    def _fields(value: Any, *extra: Any) -> Any:
        if not isinstance(value, Mapping):
            raise ValidationError(
                "Expected value to be an object, got ${type}",
                got=value,
                expected="object",
                comparison="type",
                type=describe_type(value),
            )
        working = dict(value)
        if mode.fills_missing:
            for key in schema_keys:
                if key not in working:
                    working[key] = MISSING

        collector = _Collector()
        for key, item in working.items():
            validator = validators.get(key)
            if validator is not None:
                collector.run(key, validator, item)
            elif mode is CompletionMode.STRICT:
                collector.fail(
                    key,
                    ValidationError('Unknown property passed "${key}"', got=item, comparison="unknownProperty", key=key),
                )
            elif mode is CompletionMode.ALL:
                collector.keep(key, item)
        return collector.finish(_build, _aggregate)

    return _fields


def elements_step(element: Validator, message: str | None = None) -> Callable[[Sequence[Any]], Any]:
    """Build the per-call step mapping element over a list, aggregating per-index failures."""
    aggregate_message = message or DEFAULT_SETTINGS.array_message

    def _aggregate() -> ValidationError:
        return ValidationError(aggregate_message, comparison="array")

    def _build(output: Dict[PathSegment, Any]) -> List[Any]:
        return list(output.values())

    def _elements(items: Sequence[Any]) -> Any:
        collector = _Collector()
        for index, item in enumerate(items):
            collector.run(index, element, item)
        return collector.finish(_build, _aggregate)

    return _elements


def _scoped(validator: Validator, path: Tuple[PathSegment, ...]) -> Validator:
    """Prefix every error raised by validator with path."""
    if not path:
        return validator
    step = validator.step

    def _with_path(*args: Any) -> Any:
        try:
            output = step(*args)
        except ValidationError as error:
            raise error.scoped(path)
        if not is_deferred(output):
            return output

        async def _awaited() -> Any:
            try:
                return await output
            except ValidationError as error:
                raise error.scoped(path)

        return defer(_awaited(), output)

    return type(validator)(_with_path)


def _compile_node(node: Any, mode: CompletionMode, message: str | None, settings: GuardSettings) -> Validator:
    if isinstance(node, Validator):
        return node
    if isinstance(node, type) and node in _TYPE_SAMPLES:
        return _TYPE_SAMPLES[node]()
    if isinstance(node, bool):
        return BooleanValidator.create()
    if isinstance(node, (int, float)):
        return NumberValidator.create()
    if isinstance(node, str):
        return StringValidator.create()
    if isinstance(node, re.Pattern):
        return StringValidator.create().pattern(node)
    if isinstance(node, (datetime, date)):
        return DateValidator.create()
    if isinstance(node, (list, tuple)):
        if len(node) == 0:
            return ArrayValidator.create()
        if len(node) > 1:
            raise SchemaError(
                "Array schema must declare exactly one element schema",
                context={"length": len(node)},
            )
        element = _compile_node(node[0], mode, None, settings)
        return ArrayValidator.create().transform(elements_step(element, message or settings.array_message))
    if isinstance(node, Mapping):
        validators: Dict[str, Validator] = {}
        for key, child in node.items():
            validators[key] = _compile_node(child, mode, f"{key} contains elements which are not valid", settings)
        logger.debug(f"Compiled object node with {len(validators)} keys in {mode.value} mode")
        return ObjectValidator(fields_step(validators, mode, message or settings.message))
    if callable(node):
        return Validator.from_function(node)
    raise SchemaError(
        f"Unsupported schema type: {type(node).__name__}",
        context={"type": type(node).__name__},
    )


def compile_schema(
    schema: Any,
    mode: str | CompletionMode | None = None,
    path: Sequence[PathSegment] = (),
    message: str | None = None,
    settings: GuardSettings | None = None,
) -> Validator:
    """Compile a schema tree into one validator.

    Args:
        schema: Schema node (see module docstring)
        mode: Completion mode for every object node (defaults to settings.default_mode)
        path: Path prefix for errors raised by the compiled validator
        message: Aggregate error message of the top-level node
        settings: Defaults for mode and messages

    Returns:
        The compiled validator

    Raises:
        SchemaError: If the schema contains an unsupported node or bad arguments
    """
    active = settings or DEFAULT_SETTINGS
    options = StructOptions(
        mode=CompletionMode.parse(mode) if mode is not None else active.default_mode,
        path=tuple(path),
        message=message,
    )
    validator = _compile_node(schema, options.mode, options.message, active)
    return _scoped(validator, options.path)


def Struct(  # noqa: N802
    schema: Any,
    message: str | None = None,
    mode: str | CompletionMode | None = None,
    path: Sequence[PathSegment] = (),
    settings: GuardSettings | None = None,
) -> Validator:
    """Shorthand for :func:`compile_schema` with the message first."""
    return compile_schema(schema, mode=mode, path=path, message=message, settings=settings)


__all__ = [
    "StructOptions",
    "Struct",
    "compile_schema",
    "elements_step",
    "fields_step",
]
