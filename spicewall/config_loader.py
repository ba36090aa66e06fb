"""Configuration file loading utilities."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .constants import CONFIG_FILE
from .models import ConfigError, ConfigNotFoundError

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader", "expand_path"]


def expand_path(path: str | Path) -> Path:
    """Expand `~` and environment variables in `path`."""
    return Path(os.path.expandvars(str(path))).expanduser()


class ConfigLoader:
    """Loads the TOML configuration file."""

    def __init__(self, log: logging.Logger) -> None:
        """Initialize the config loader.

        Args:
            log: Logger instance for status and error messages
        """
        self.log = log
        self._config: dict[str, Any] = {}
        self.path: Path | None = None

    @property
    def config(self) -> dict[str, Any]:
        """Return the loaded configuration."""
        return self._config

    def load(self, config_filename: str | Path = "") -> dict[str, Any]:
        """Load the configuration file.

        Args:
            config_filename: Optional path to the config file.
                If empty, uses the default CONFIG_FILE location.

        Returns:
            The loaded configuration dictionary.

        Raises:
            ConfigNotFoundError: If the file is not found.
            ConfigError: If the file has syntax errors.
        """
        fname = expand_path(config_filename) if config_filename else CONFIG_FILE
        if not fname.exists():
            self.log.critical("Config file not found! Please create %s", fname)
            msg = f"Config file not found: {fname}"
            raise ConfigNotFoundError(msg)

        self.log.info("Loading %s", fname)
        with fname.open("rb") as f:
            try:
                self._config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                self.log.critical("Problem reading %s: %s", fname, e)
                msg = f"Invalid TOML in {fname}: {e}"
                raise ConfigError(msg) from e
        self.path = fname
        return self._config
