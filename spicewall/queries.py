"""Saved image queries of a backend.

The queries of a backend are stored as a JSON list under its
"<service>_image_queries" preference key, newest first.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Any

from .backends import IMAGE_QUERIES_SUFFIX, BackendError
from .constants import QUERY_ID_LENGTH
from .models import ConfigError
from .preferences import BackendPreferences

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .backends import BackendDescriptor
    from .preferences import PreferenceStore

__all__ = [
    "QueryList",
    "SavedQuery",
    "make_query_id",
]

_log = logging.getLogger(__name__)


def make_query_id(service_name: str, url: str) -> str:
    """Return the stable id of the query `url` of backend `service_name`.

    The backend name is part of the hash so that two backends saving the
    same URL never share an id.
    """
    digest = hashlib.sha256(f"{service_name}:{url}".encode()).hexdigest()
    return digest[:QUERY_ID_LENGTH]


@dataclass(slots=True)
class SavedQuery:
    """A search saved by the user.

    Attributes:
        query_id: Stable identifier, see make_query_id().
        description: User supplied label.
        url: Search URL, in the form returned by the backend converter.
        backend: Service name of the owning backend.
        active: Whether wallpapers are fetched from this query.
    """

    query_id: str
    description: str
    url: str
    backend: str
    active: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedQuery:
        """Build a query from its stored form."""
        return cls(
            query_id=str(data["query_id"]),
            description=str(data["description"]),
            url=str(data["url"]),
            backend=str(data["backend"]),
            active=bool(data.get("active", True)),
        )


class QueryList:
    """Ordered list of the saved queries of one backend."""

    def __init__(
        self,
        descriptor: BackendDescriptor,
        store: PreferenceStore,
        log: logging.Logger | None = None,
    ) -> None:
        """Load the saved queries of `descriptor` from `store`.

        Raises:
            ConfigError: If the stored value is not a valid query list.
        """
        self.descriptor = descriptor
        self.prefs = BackendPreferences(descriptor, store)
        self.log = log or _log
        self._queries: list[SavedQuery] = self._load()

    def _load(self) -> list[SavedQuery]:
        raw = self.prefs.get(IMAGE_QUERIES_SUFFIX)
        if not raw:
            return []
        try:
            return [SavedQuery.from_dict(item) for item in json.loads(raw)]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            msg = f"[{self.descriptor.service_name}] Stored queries are corrupted: {e}"
            raise ConfigError(msg) from e

    def _save(self, queries: list[SavedQuery]) -> None:
        """Store `queries`, then make them the current list."""
        self.prefs.set(IMAGE_QUERIES_SUFFIX, json.dumps([asdict(q) for q in queries]))
        self._queries = queries

    def __iter__(self) -> Iterator[SavedQuery]:
        return iter(list(self._queries))

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, query_id: object) -> bool:
        return any(q.query_id == query_id for q in self._queries)

    def active(self) -> list[SavedQuery]:
        """Return the enabled queries."""
        return [q for q in self._queries if q.active]

    def get(self, query_id: str) -> SavedQuery | None:
        """Return the query `query_id`, or None."""
        for query in self._queries:
            if query.query_id == query_id:
                return query
        return None

    def _find(self, query_id: str) -> SavedQuery:
        query = self.get(query_id)
        if query is None:
            msg = f"[{self.descriptor.service_name}] Query {query_id} not found"
            raise KeyError(msg)
        return query

    def add(self, description: str, url: str, active: bool = True) -> str:
        """Validate and save a new query, in first position.

        Args:
            description: User label, checked with validate_description.
            url: Search URL, checked and converted by the backend.
            active: Whether the query starts enabled.

        Returns:
            The id of the new query.

        Raises:
            ValueError: If the description or the URL is invalid, or the query exists.
        """
        if not self.descriptor.validate_description(description):
            msg = f"[{self.descriptor.service_name}] Invalid description {description!r}"
            raise ValueError(msg)
        try:
            api_url = self.descriptor.to_api_url(url)
        except BackendError as e:
            raise ValueError(str(e)) from e

        query_id = make_query_id(self.descriptor.service_name, api_url)
        if query_id in self:
            msg = f"[{self.descriptor.service_name}] Duplicate query: this URL already exists"
            raise ValueError(msg)

        self._save([SavedQuery(query_id, description, api_url, self.descriptor.service_name, active), *self._queries])
        self.log.info("[%s] Added query %s: %s", self.descriptor.service_name, query_id, api_url)
        return query_id

    def remove(self, query_id: str) -> None:
        """Delete the query `query_id`.

        Raises:
            KeyError: If there is no such query.
        """
        query = self._find(query_id)
        self._save([q for q in self._queries if q is not query])

    def enable(self, query_id: str) -> None:
        """Enable the query `query_id`."""
        self._set_active(query_id, True)

    def disable(self, query_id: str) -> None:
        """Disable the query `query_id`."""
        self._set_active(query_id, False)

    def _set_active(self, query_id: str, active: bool) -> None:
        query = self._find(query_id)
        if query.active != active:
            self._save([replace(q, active=active) if q is query else q for q in self._queries])
