"""Configuration schemas for the [spicewall] section and the backend sections."""

import logging
from collections.abc import Callable
from typing import Any

from .backends import BackendDescriptor, BackendError, get_available_backends, get_backend
from .constants import DESCRIPTION_MAX_LENGTH, DESCRIPTION_MIN_LENGTH
from .validation import ConfigField, ConfigItems, ConfigValidator

__all__ = [
    "MAIN_SECTION",
    "SPICEWALL_SCHEMA",
    "backend_schema",
    "validate_config",
]

MAIN_SECTION = "spicewall"


def _validate_backend_names(value: list[Any]) -> list[str]:
    available = get_available_backends()
    return [f"Unknown backend {name!r}. Available: {', '.join(available)}" for name in value if name not in available]


SPICEWALL_SCHEMA = ConfigItems(
    ConfigField(
        "backends",
        list,
        default=["wallhaven"],
        description="Backends to enable",
        validator=_validate_backend_names,
    ),
    ConfigField("preferences", str, description="Path of the preferences file"),
)

QUERY_SCHEMA = ConfigItems(
    ConfigField("description", str, required=True, description="Label of the saved query"),
    ConfigField("url", str, required=True, description="Search URL"),
    ConfigField("active", bool, default=True, description="Fetch wallpapers from this query"),
)


def _api_key_validator(descriptor: BackendDescriptor) -> Callable[[str], list[str]]:
    def validate(value: str) -> list[str]:
        if value and not descriptor.validate_api_key(value):
            return ["Invalid API key format"]
        return []

    return validate


def _queries_validator(descriptor: BackendDescriptor) -> Callable[[list[Any]], list[str]]:
    def validate(value: list[Any]) -> list[str]:
        errors: list[str] = []
        silent_logger = logging.getLogger(f"spicewall.validate.{descriptor.service_name}")
        for index, item in enumerate(value):
            if not isinstance(item, dict):
                errors.append(f"Query #{index + 1}: expected a table, got {type(item).__name__}")
                continue
            item_errors = ConfigValidator(item, f"{descriptor.service_name}.queries.{index + 1}", silent_logger).validate(QUERY_SCHEMA)
            errors.extend(item_errors)
            if item_errors:
                continue
            if not descriptor.validate_description(item["description"]):
                errors.append(
                    f"Query #{index + 1}: description must be {DESCRIPTION_MIN_LENGTH} to {DESCRIPTION_MAX_LENGTH} characters, without control characters"
                )
            if not descriptor.validate_search_url(item["url"].strip()):
                errors.append(f"Query #{index + 1}: unsupported URL {item['url']!r}")
                continue
            # the URL pattern alone may accept pages the converter can't handle
            try:
                descriptor.to_api_url(item["url"])
            except BackendError as e:
                errors.append(f"Query #{index + 1}: {e.message}")
        return errors

    return validate


def backend_schema(descriptor: BackendDescriptor) -> ConfigItems:
    """Return the schema of the configuration section of `descriptor`.

    Args:
        descriptor: Backend whose section is described.

    Returns:
        The schema of the [<service_name>] section.
    """
    return ConfigItems(
        ConfigField(
            "api_key",
            str,
            description=f"{descriptor.display_name} API key",
            validator=_api_key_validator(descriptor),
        ),
        ConfigField(
            "queries",
            list,
            description="Saved queries, as tables with description, url and active",
            validator=_queries_validator(descriptor),
        ),
    )


def validate_config(config: dict[str, Any], log: logging.Logger) -> tuple[list[str], list[str]]:
    """Validate a whole configuration.

    Args:
        config: Parsed configuration file
        log: Logger receiving the unknown-key warnings

    Returns:
        Tuple of (errors, warnings)
    """
    main = config.get(MAIN_SECTION, {})
    if not isinstance(main, dict):
        return ([f"[{MAIN_SECTION}] must be a table"], [])

    validator = ConfigValidator(main, MAIN_SECTION, log)
    errors = validator.validate(SPICEWALL_SCHEMA)
    warnings = validator.warn_unknown_keys(SPICEWALL_SCHEMA)
    if errors:
        return (errors, warnings)

    for name in main.get("backends", SPICEWALL_SCHEMA.defaults()["backends"]):
        section = config.get(name, {})
        if not isinstance(section, dict):
            errors.append(f"[{name}] must be a table")
            continue
        schema = backend_schema(get_backend(name))
        section_validator = ConfigValidator(section, name, log)
        errors.extend(section_validator.validate(schema))
        warnings.extend(section_validator.warn_unknown_keys(schema))

    return (errors, warnings)
