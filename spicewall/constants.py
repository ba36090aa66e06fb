"""Shared constants for spicewall."""

import os
from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "DEFAULT_PREFERENCES_FILE",
    "DESCRIPTION_MAX_LENGTH",
    "DESCRIPTION_MIN_LENGTH",
    "HTTP_TIMEOUT_SECONDS",
    "QUERY_ID_LENGTH",
    "USER_AGENT",
    "VERSION",
]

VERSION = "0.1.0"

# Config file paths - use XDG_CONFIG_HOME with fallback to ~/.config
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
_xdg_state_home = Path(os.environ.get("XDG_STATE_HOME") or Path.home() / ".local" / "state")
CONFIG_FILE = _xdg_config_home / "spicewall" / "config.toml"
DEFAULT_PREFERENCES_FILE = _xdg_state_home / "spicewall" / "prefs.json"

# HTTP settings for the API key check
HTTP_TIMEOUT_SECONDS = 30
USER_AGENT = f"spicewall/{VERSION}"

# Saved query descriptions (bounds shared by every backend)
DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 150

# Number of hex digits kept from the sha256 of a saved query
QUERY_ID_LENGTH = 16
