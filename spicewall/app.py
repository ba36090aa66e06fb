"""Runtime wiring: configuration, preference store and enabled backends."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .backends import BackendDescriptor, BackendError, get_backend
from .config_loader import ConfigLoader, expand_path
from .constants import DEFAULT_PREFERENCES_FILE
from .keycheck import check_api_key
from .models import ConfigError
from .preferences import BackendPreferences, JsonFilePreferences
from .queries import QueryList, make_query_id
from .schema import MAIN_SECTION, SPICEWALL_SCHEMA, validate_config

if TYPE_CHECKING:
    from .httpclient import ClientSession
    from .preferences import PreferenceStore

__all__ = ["Spicewall"]

_log = logging.getLogger(__name__)


class Spicewall:
    """Enabled backends and their settings, as described by the configuration.

    Attributes:
        config: The parsed configuration.
        store: Where backend settings are persisted.
        backends: Descriptors of the enabled backends, in configuration order.
    """

    def __init__(
        self,
        config: dict[str, Any],
        store: PreferenceStore,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize from an already validated configuration.

        Args:
            config: Parsed configuration.
            store: Preference store for the backend settings.
            log: Logger instance. Defaults to module logger.
        """
        self.log = log or _log
        self.config = config
        self.store = store
        main = config.get(MAIN_SECTION, {})
        names = main.get("backends", SPICEWALL_SCHEMA.defaults()["backends"])
        self.backends: list[BackendDescriptor] = [get_backend(name) for name in names]

    @classmethod
    def from_file(cls, config_filename: str | Path = "", log: logging.Logger | None = None) -> Spicewall:
        """Load, validate and wire the configuration file.

        Args:
            config_filename: Path of the config file, default location if empty.
            log: Logger instance. Defaults to module logger.

        Returns:
            A ready to use instance backed by the JSON preferences file.

        Raises:
            ConfigError: If the file can't be read or is invalid.
        """
        log = log or _log
        config = ConfigLoader(log).load(config_filename)
        errors, _warnings = validate_config(config, log)
        if errors:
            for error in errors:
                log.error(error)
            msg = f"Invalid configuration: {len(errors)} error(s)"
            raise ConfigError(msg)
        prefs_path = config.get(MAIN_SECTION, {}).get("preferences")
        store = JsonFilePreferences(expand_path(prefs_path) if prefs_path else DEFAULT_PREFERENCES_FILE, log=log)
        return cls(config, store, log=log)

    def _enabled(self, name: str) -> BackendDescriptor:
        for descriptor in self.backends:
            if descriptor.service_name == name:
                return descriptor
        msg = f"Backend '{name}' not enabled. Enabled: {[d.service_name for d in self.backends]}"
        raise ValueError(msg)

    def preferences(self, name: str) -> BackendPreferences:
        """Return the settings of the enabled backend `name`.

        Raises:
            ValueError: If the backend is not enabled.
        """
        return BackendPreferences(self._enabled(name), self.store)

    def queries(self, name: str) -> QueryList:
        """Return the saved queries of the enabled backend `name`.

        Raises:
            ValueError: If the backend is not enabled.
        """
        return QueryList(self._enabled(name), self.store, log=self.log)

    def _import_plan(self) -> list[tuple[BackendDescriptor, str, list[tuple[str, dict[str, Any]]]]]:
        """Check the whole configuration before anything is written.

        Returns:
            Per backend: the descriptor, the API key to store (may be empty) and
            the (query id, item) pairs of its queries, in file order.
        """
        plan = []
        for descriptor in self.backends:
            section = self.config.get(descriptor.service_name, {})
            api_key = section.get("api_key", "")
            if api_key and not descriptor.validate_api_key(api_key):
                msg = f"[{descriptor.service_name}] Invalid API key format"
                raise ValueError(msg)
            items = []
            for item in section.get("queries", []):
                if not descriptor.validate_description(item["description"]):
                    msg = f"[{descriptor.service_name}] Invalid description {item['description']!r}"
                    raise ValueError(msg)
                items.append((make_query_id(descriptor.service_name, descriptor.to_api_url(item["url"])), item))
            plan.append((descriptor, api_key, items))
        return plan

    def import_config(self) -> int:
        """Copy the API keys and queries of the configuration into the preferences.

        Queries already saved are left in place; only their active flag
        follows the configuration. Nothing is written unless every key and
        URL of the configuration is accepted by its backend.

        Returns:
            Number of queries added.

        Raises:
            BackendError: If a configured URL can't be converted by its backend.
            ValueError: If a configured API key or description is invalid.
        """
        plan = self._import_plan()
        query_lists = {descriptor.service_name: QueryList(descriptor, self.store, log=self.log) for descriptor, _, _ in plan}

        added = 0
        for descriptor, api_key, items in plan:
            prefs = BackendPreferences(descriptor, self.store)
            if api_key and api_key != prefs.api_key:
                prefs.api_key = api_key
                self.log.info("[%s] API key updated", descriptor.service_name)

            queries = query_lists[descriptor.service_name]
            # add() prepends: walk backwards to keep the file order
            for query_id, item in reversed(items):
                active = item.get("active", True)
                if query_id in queries:
                    if active:
                        queries.enable(query_id)
                    else:
                        queries.disable(query_id)
                    continue
                queries.add(item["description"], item["url"], active=active)
                added += 1
        return added

    async def check_keys(self, session: ClientSession | None = None) -> dict[str, bool]:
        """Check the stored API key of every enabled backend.

        Backends without a stored key are skipped. An unreachable service
        counts as a rejected key and is logged.

        Args:
            session: HTTP session shared by the checks, one per check if None.

        Returns:
            Mapping of service name to the check result.
        """
        results: dict[str, bool] = {}
        for descriptor in self.backends:
            api_key = BackendPreferences(descriptor, self.store).api_key
            if not api_key:
                continue
            try:
                results[descriptor.service_name] = await check_api_key(descriptor, api_key, session, log=self.log)
            except BackendError as e:
                self.log.warning("Can't check the %s API key: %s", descriptor.display_name, e.message)
                results[descriptor.service_name] = False
        return results
