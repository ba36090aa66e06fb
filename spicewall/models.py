"""Exceptions and shared enums."""

from enum import IntEnum

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ExitCode",
    "SpicewallError",
]


class SpicewallError(Exception):
    """Base class for errors raised by spicewall."""


class ConfigError(SpicewallError):
    """The configuration file is missing, can't be parsed or is invalid."""


class ConfigNotFoundError(ConfigError):
    """The configuration file doesn't exist."""


class ExitCode(IntEnum):
    """Exit codes for the spicewall command."""

    SUCCESS = 0
    USAGE_ERROR = 1  # Invalid arguments or invalid configuration
    ENV_ERROR = 2  # Missing config file
    KEY_ERROR = 3  # API key rejected or service unreachable
