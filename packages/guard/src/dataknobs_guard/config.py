"""Settings for struct compilation and the factory.

Settings are plain values passed explicitly to :func:`compile_schema` and
:class:`~dataknobs_guard.factory.StructFactory`; there is no process-wide
mutable configuration.

Sources:
    - ``GuardSettings.from_dict({...})``
    - ``GuardSettings.from_env()`` reading ``DATAKNOBS_GUARD_*`` variables
    - ``GuardSettings.from_yaml("guard.yaml")``

Example:
    ```yaml
    default_mode: DEFINED
    message: "Request payload is invalid"
    log_level: DEBUG
    ```
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from .exceptions import SchemaError
from .modes import CompletionMode

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAKNOBS_GUARD_"
PACKAGE_LOGGER = "dataknobs_guard"


@dataclass(frozen=True)
class GuardSettings:
    """Defaults used when compiling struct validators.

    Attributes:
        default_mode: Completion mode used when compile_schema gets no mode
        message: Aggregate error message for object nodes
        array_message: Aggregate error message for array nodes
        log_level: Optional level applied to the package logger by apply_logging
    """

    default_mode: CompletionMode = CompletionMode.STRICT
    message: str = "Validation failed"
    array_message: str = "Array elements failed validation"
    log_level: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_mode", CompletionMode.parse(self.default_mode))
        if not isinstance(self.message, str) or not self.message:
            raise SchemaError("Setting 'message' must be a non-empty string", context={"message": self.message})
        if not isinstance(self.array_message, str) or not self.array_message:
            raise SchemaError(
                "Setting 'array_message' must be a non-empty string",
                context={"array_message": self.array_message},
            )
        if self.log_level is not None:
            level = str(self.log_level).upper()
            if not isinstance(logging.getLevelName(level), int):
                raise SchemaError(f"Invalid log level: {self.log_level}", context={"log_level": self.log_level})
            object.__setattr__(self, "log_level", level)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GuardSettings:
        """Create settings from a dictionary. Unknown keys are ignored with a warning."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown guard setting: {key}")
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GuardSettings:
        """Create settings from ``DATAKNOBS_GUARD_<FIELD>`` environment variables."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            name = f"{ENV_PREFIX}{f.name.upper()}"
            if name in env:
                values[f.name] = env[name]
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GuardSettings:
        """Load settings from a YAML file.

        Raises:
            SchemaError: If the file does not hold a mapping
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise SchemaError(
                f"Guard settings file must contain a mapping: {path}",
                context={"path": str(path), "type": type(data).__name__},
            )
        logger.debug(f"Loaded guard settings from {path}")
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> GuardSettings:
        """Return a copy with some values replaced, skipping ``None`` overrides."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def apply_logging(self) -> None:
        """Set the package logger level when log_level is configured."""
        if self.log_level:
            logging.getLogger(PACKAGE_LOGGER).setLevel(self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_mode": self.default_mode.value,
            "message": self.message,
            "array_message": self.array_message,
            "log_level": self.log_level,
        }


DEFAULT_SETTINGS = GuardSettings()


__all__ = ["GuardSettings", "DEFAULT_SETTINGS", "ENV_PREFIX"]
