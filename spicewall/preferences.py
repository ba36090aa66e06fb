"""Preference stores and the per-backend namespaced view.

A preference store is a flat string key/value map. Backends never touch
keys directly: they go through BackendPreferences, which only accepts the
suffixes declared by the backend descriptor.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .backends import API_KEY_SUFFIX
from .models import ConfigError

if TYPE_CHECKING:
    from .backends import BackendDescriptor

__all__ = [
    "BackendPreferences",
    "JsonFilePreferences",
    "MemoryPreferences",
    "PreferenceStore",
]

_log = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    """String key/value storage used to persist settings."""

    def get_string(self, key: str, default: str = "") -> str:
        """Return the value stored for `key`, or `default`."""
        ...

    def set_string(self, key: str, value: str) -> None:
        """Store `value` under `key`."""
        ...

    def remove(self, key: str) -> None:
        """Forget `key`. Missing keys are ignored."""
        ...


class MemoryPreferences:
    """Preference store kept in memory."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get_string(self, key: str, default: str = "") -> str:
        """Return the value stored for `key`, or `default`."""
        return self._values.get(key, default)

    def set_string(self, key: str, value: str) -> None:
        """Store `value` under `key`."""
        self._values[key] = value

    def remove(self, key: str) -> None:
        """Forget `key`. Missing keys are ignored."""
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        """List the stored keys."""
        return list(self._values)


class JsonFilePreferences(MemoryPreferences):
    """Preference store persisted as a JSON object.

    Every change rewrites the whole file through a temporary file, so a
    crash never leaves a truncated file behind.
    """

    def __init__(self, path: Path, log: logging.Logger | None = None) -> None:
        """Load the preferences from `path` when it exists.

        Args:
            path: Location of the JSON file.
            log: Logger instance. Defaults to module logger.

        Raises:
            ConfigError: If the file exists but isn't a JSON object of strings.
        """
        super().__init__()
        self.path = path
        self.log = log or _log
        if path.exists():
            self._values = self._load()

    def _load(self) -> dict[str, str]:
        self.log.debug("Loading preferences from %s", self.path)
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Can't read preferences from {self.path}: {e}"
            raise ConfigError(msg) from e
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            msg = f"Preferences file {self.path} must contain a JSON object of strings"
            raise ConfigError(msg)
        return data

    def _save(self, values: dict[str, str]) -> None:
        """Write `values` to the file, then make them the current values."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._values = values

    def set_string(self, key: str, value: str) -> None:
        """Store `value` under `key` and save the file."""
        self._save({**self._values, key: value})

    def remove(self, key: str) -> None:
        """Forget `key` and save the file."""
        if key in self._values:
            self._save({k: v for k, v in self._values.items() if k != key})


class BackendPreferences:
    """View of a preference store restricted to one backend's keys."""

    def __init__(self, descriptor: BackendDescriptor, store: PreferenceStore) -> None:
        self.descriptor = descriptor
        self.store = store

    def get(self, suffix: str, default: str = "") -> str:
        """Return the value of the backend setting `suffix`."""
        return self.store.get_string(self.descriptor.preference_key(suffix), default)

    def set(self, suffix: str, value: str) -> None:
        """Store the backend setting `suffix`."""
        self.store.set_string(self.descriptor.preference_key(suffix), value)

    def clear(self, suffix: str) -> None:
        """Remove the backend setting `suffix`."""
        self.store.remove(self.descriptor.preference_key(suffix))

    @property
    def api_key(self) -> str:
        """The stored API key, empty when unset."""
        return self.get(API_KEY_SUFFIX)

    @api_key.setter
    def api_key(self, value: str) -> None:
        """Store the API key once its format is checked. An empty value clears it."""
        if not value:
            self.clear(API_KEY_SUFFIX)
            return
        if not self.descriptor.validate_api_key(value):
            msg = f"[{self.descriptor.service_name}] Invalid API key format"
            raise ValueError(msg)
        self.set(API_KEY_SUFFIX, value)
