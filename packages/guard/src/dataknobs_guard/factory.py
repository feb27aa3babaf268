"""Factory for building struct validators from configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Dict, List

from .config import DEFAULT_SETTINGS, GuardSettings
from .exceptions import SchemaError
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
from .registry import ValidatorRegistry
from .struct import compile_schema
from .validator import Validator

logger = logging.getLogger(__name__)

FIELD_TYPES: Dict[str, Callable[[], Validator]] = {
    "string": StringValidator.create,
    "number": NumberValidator.create,
    "integer": IntegerValidator.create,
    "bigint": IntegerValidator.create,
    "boolean": BooleanValidator.create,
    "date": DateValidator.create,
    "array": ArrayValidator.create,
    "object": ObjectValidator.create,
    "any": Validator.create,
}

# check type -> (validator method, config keys passed positionally)
CHECK_TYPES: Dict[str, tuple[str, tuple[str, ...]]] = {
    "min": ("min", ("value",)),
    "max": ("max", ("value",)),
    "range": ("range", ("min", "max")),
    "length": ("length", ("value",)),
    "min_length": ("min_length", ("value",)),
    "max_length": ("max_length", ("value",)),
    "pattern": ("pattern", ("pattern",)),
    "in": ("is_in", ("values",)),
    "not_in": ("not_in", ("values",)),
    "equals": ("equals", ("value",)),
    "not_equals": ("not_equals", ("value",)),
}


class StructFactory:
    """Factory for creating struct validators from configuration.

    Configuration Options:
        name (str): Struct name (used in logs)
        mode (str): Completion mode (default: settings.default_mode)
        message (str): Aggregate error message
        path (list): Path prefix for reported errors
        fields (list): List of field definitions

    Field Definition Options:
        name (str): Field name
        type (str): string, number, integer, bigint, boolean, date, array, object or any
        required (bool): Whether the field must be present (default: True)
        default (any): Value substituted when a non-required field is missing
        checks (list): List of check definitions
        fields (list): Nested field definitions (type object)
        items (dict): Element definition (type array)
        ref (str): Name of a registered validator used instead of type

    Example Configuration:
        ```yaml
        name: signup
        mode: DEFINED
        fields:
          - name: username
            type: string
            checks:
              - type: length
                value: 8
              - type: pattern
                pattern: "^[a-z0-9_]+$"
          - name: age
            type: integer
            required: false
            checks:
              - type: range
                min: 13
                max: 120
          - name: tags
            type: array
            items:
              type: string
        ```

    Args:
        registry: Registry used to resolve ``ref`` fields
        settings: Defaults for mode and messages
    """

    def __init__(self, registry: ValidatorRegistry | None = None, settings: GuardSettings | None = None):
        self.registry = registry
        self.settings = settings or DEFAULT_SETTINGS

    def create(self, **config: Any) -> Validator:
        """Create a struct validator from configuration.

        Args:
            **config: Struct configuration

        Returns:
            Compiled struct validator

        Raises:
            SchemaError: If the configuration is invalid
        """
        name = config.get("name", "unnamed_struct")
        mode = CompletionMode.parse(config["mode"]) if config.get("mode") else self.settings.default_mode

        logger.info(f"Creating struct validator: {name}")

        schema = self._build_fields(config.get("fields", []), mode)
        return compile_schema(
            schema,
            mode=mode,
            path=config.get("path", ()),
            message=config.get("message"),
            settings=self.settings,
        )

    def _build_fields(self, field_configs: List[Mapping[str, Any]], mode: CompletionMode) -> Dict[str, Validator]:
        schema: Dict[str, Validator] = {}
        for field_config in field_configs:
            field_name = field_config.get("name")
            if not field_name:
                raise SchemaError("Field configuration missing 'name'", context={"field": dict(field_config)})
            if field_name in schema:
                raise SchemaError(f"Duplicate field: {field_name}", context={"field": field_name})
            schema[field_name] = self._build_field(field_config, mode, field_name)
        return schema

    def _build_field(self, field_config: Mapping[str, Any], mode: CompletionMode, field_name: str) -> Validator:
        """Build the validator for one field (or array element) definition."""
        ref = field_config.get("ref")
        if ref:
            if self.registry is None:
                raise SchemaError(f"Field '{field_name}' uses ref '{ref}' but no registry is configured")
            validator = self.registry.get(ref)
        else:
            field_type = str(field_config.get("type", "string")).lower()
            if field_type not in FIELD_TYPES:
                raise SchemaError(
                    f"Unknown field type: {field_type}",
                    context={"field": field_name, "type": field_type, "available": list(FIELD_TYPES)},
                )
            validator = self._build_typed(field_type, field_config, mode, field_name)

        for check_config in field_config.get("checks", []):
            validator = self._apply_check(validator, check_config, field_name)

        if not field_config.get("required", True):
            validator = validator.optional(field_config.get("default", MISSING))
        return validator

    def _build_typed(
        self, field_type: str, field_config: Mapping[str, Any], mode: CompletionMode, field_name: str
    ) -> Validator:
        if field_type == "object" and "fields" in field_config:
            nested = self._build_fields(field_config["fields"], mode)
            return compile_schema(
                nested,
                mode=mode,
                message=field_config.get("message", f"{field_name} contains elements which are not valid"),
                settings=self.settings,
            )
        if field_type == "array" and "items" in field_config:
            element = self._build_field(field_config["items"], mode, f"{field_name}[]")
            return ArrayValidator.create().of(element, message=field_config.get("message"), mode=mode)
        return FIELD_TYPES[field_type]()

    def _apply_check(self, validator: Validator, check_config: Mapping[str, Any], field_name: str) -> Validator:
        check_type = str(check_config.get("type", "")).lower()
        if check_type not in CHECK_TYPES:
            raise SchemaError(
                f"Unknown check type: {check_type}",
                context={"field": field_name, "type": check_type, "available": list(CHECK_TYPES)},
            )
        method_name, keys = CHECK_TYPES[check_type]
        method = getattr(validator, method_name, None)
        if method is None:
            raise SchemaError(
                f"Check '{check_type}' is not supported by {type(validator).__name__}",
                context={"field": field_name, "type": check_type},
            )
        missing = [key for key in keys if key not in check_config]
        if missing:
            raise SchemaError(
                f"Check '{check_type}' on field '{field_name}' is missing: {', '.join(missing)}",
                context={"field": field_name, "type": check_type, "missing": missing},
            )
        args = [check_config[key] for key in keys]
        return method(*args, message=check_config.get("message"))


# Create singleton instance for registration
struct_factory = StructFactory()


__all__ = ["CHECK_TYPES", "FIELD_TYPES", "StructFactory", "struct_factory"]
