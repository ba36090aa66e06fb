"""Configuration validation framework with schema definitions.

Provides declarative schema definitions (ConfigField, ConfigItems) for
validating the configuration file sections. Supports type checking, required
fields, custom validators and fuzzy matching for typo detection.

Used by:
- Spicewall.from_file() before building the runtime objects
- 'spicewall validate' CLI for static configuration checking
"""

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]


@dataclass
class ConfigField:
    """Describes an expected configuration field for validation.

    Attributes:
        name: The configuration key name
        field_type: Expected type (str, int, bool, list, dict) or tuple of types for union
        required: Whether the field is required
        default: Default value if not provided
        description: Human-readable description for error messages
        validator: Custom validator function returning list of error messages
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    default: Any = None
    description: str = ""
    validator: Callable[[Any], list[str]] | None = None

    @property
    def type_name(self) -> str:
        """Return human-readable type name (e.g., 'str or list')."""
        if isinstance(self.field_type, tuple):
            return " or ".join(typ.__name__ for typ in self.field_type)
        return self.field_type.__name__


class ConfigItems(list):
    """A list of ConfigField items."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def defaults(self) -> dict[str, Any]:
        """Return the default value of every field having one."""
        return {prop.name: prop.default for prop in self if prop.default is not None}


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        section: Config section name
        field: Field name that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error

    Returns:
        Formatted error message
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


class ConfigValidator:
    """Validates a configuration section against a schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        """Initialize the validator.

        Args:
            config: The configuration dictionary to validate
            section: Name of the section for error messages
            logger: Logger instance for warnings
        """
        self.config = config
        self.section = section
        self.log = logger

    def validate(self, schema: ConfigItems) -> list[str]:
        """Validate configuration against schema.

        Args:
            schema: List of ConfigField definitions

        Returns:
            List of error messages (empty if validation passed)
        """
        errors = []

        for field_def in schema:
            value = self.config.get(field_def.name)

            if field_def.required and value is None:
                errors.append(
                    format_config_error(
                        self.section,
                        field_def.name,
                        "Missing required field",
                        f"Add '{field_def.name}' to [{self.section}]",
                    )
                )
                continue

            if value is None:
                continue

            type_error = self._check_type(field_def, value)
            if type_error:
                errors.append(type_error)
                continue

            if field_def.validator:
                errors.extend(
                    format_config_error(self.section, field_def.name, validation_error)
                    for validation_error in field_def.validator(value)
                )

        return errors

    def _check_type(self, field_def: ConfigField, value: Any) -> str | None:
        """Check if value matches expected type.

        Args:
            field_def: Field definition
            value: Value to check

        Returns:
            Error message if type mismatch, None otherwise
        """
        expected = field_def.field_type if isinstance(field_def.field_type, tuple) else (field_def.field_type,)
        for single_type in expected:
            # bool is a subclass of int, never accept it as a number
            if single_type in (int, float) and isinstance(value, bool):
                continue
            if single_type is float and isinstance(value, int):
                return None
            if isinstance(value, single_type):
                return None
        return format_config_error(
            self.section,
            field_def.name,
            f"Expected {field_def.type_name}, got {type(value).__name__}",
        )

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log warnings for unknown configuration keys.

        Args:
            schema: List of ConfigField definitions

        Returns:
            List of warning messages
        """
        warnings = []
        known_keys = [f.name for f in schema]

        for key in self.config:
            if key in known_keys:
                continue

            matches = difflib.get_close_matches(key, known_keys, n=1)
            if matches:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{matches[0]}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)

        return warnings
