"""DataKnobs Guard Package - Composable value validation.

The `dataknobs-guard` package validates untyped input (API payloads, config
objects) and coerces it into trusted values. Validators are immutable chains
of steps that stay synchronous unless a step is asynchronous, and nested
schemas compile into one validator that reports every failure with its path.

Modules:
    validator: The Validator class (chaining, equality, membership, optional values)
    guards: Leaf validators for strings, numbers, integers, booleans, dates, arrays and objects
    guard: The Guard entry point (including union and custom validators)
    struct: Schema compilation with STRICT, DEFINED, PARTIAL and ALL completion modes
    result: Ready/Pending results and SafeResult
    config: GuardSettings loaded from dicts, environment variables or YAML
    registry: Named validator registry
    factory: Struct validators built from configuration
    exceptions: Custom exceptions for error handling

Quick Examples:

    Chain checks:

    ```python
    from dataknobs_guard import Guard

    username = Guard.string().trim().min_length(3).not_in(["admin", "root"])
    username("  alice ")  # 'alice'
    ```

    Compile a schema:

    ```python
    from dataknobs_guard import Guard, ValidationError, compile_schema

    user = compile_schema(
        {
            "name": Guard.string(),
            "age": Guard.integer().min(0).optional(),
            "address": {"zipcode": "00000"},
        },
        mode="DEFINED",
    )
    try:
        user({"name": "Bob", "address": {"zipcode": 12345}})
    except ValidationError as e:
        print([f.path_string for f in e.flatten()])  # ['address.zipcode']
    ```

    Validate without raising:

    ```python
    error, value = user.safe_call({"name": "Bob", "address": {"zipcode": "12345"}})
    ```

    Asynchronous steps:

    ```python
    async def exists(name):
        return await users.exists(name)

    taken = Guard.string().test(exists, "Unknown user ${got}")
    await taken("alice")
    ```
"""

from .config import DEFAULT_SETTINGS, GuardSettings
from .exceptions import (
    AsyncValidatorError,
    GuardError,
    NotFoundError,
    OperationError,
    PathSegment,
    SchemaError,
    ValidationError,
    format_path,
)
from .factory import StructFactory, struct_factory
from .formatting import format_value
from .guard import Guard
from .guards import (
    ArrayValidator,
    BooleanValidator,
    DateValidator,
    IntegerValidator,
    NumberValidator,
    ObjectValidator,
    StringValidator,
)
from .missing import MISSING, is_missing, is_nullish
from .modes import CompletionMode
from .registry import ValidatorRegistry
from .result import Pending, Ready, SafeResult, is_deferred
from .struct import Struct, StructOptions, compile_schema
from .validator import Validator

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "Validator",
    "Guard",
    "SafeResult",
    "Ready",
    "Pending",
    "is_deferred",
    # Leaf validators
    "StringValidator",
    "NumberValidator",
    "IntegerValidator",
    "BooleanValidator",
    "DateValidator",
    "ArrayValidator",
    "ObjectValidator",
    # Struct compilation
    "compile_schema",
    "Struct",
    "StructOptions",
    "CompletionMode",
    # Missing values
    "MISSING",
    "is_missing",
    "is_nullish",
    # Formatting
    "format_value",
    "format_path",
    # Configuration
    "GuardSettings",
    "DEFAULT_SETTINGS",
    # Registry and factory
    "ValidatorRegistry",
    "StructFactory",
    "struct_factory",
    # Exceptions
    "GuardError",
    "ValidationError",
    "SchemaError",
    "AsyncValidatorError",
    "NotFoundError",
    "OperationError",
    "PathSegment",
]
