"""Base types for image-source backends.

This module holds the immutable BackendDescriptor and the exceptions shared
by every backend. It is separate from __init__.py to avoid cyclic imports
when backends import these types.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from ..constants import DESCRIPTION_MAX_LENGTH, DESCRIPTION_MIN_LENGTH
from ..models import SpicewallError

__all__ = [
    "API_KEY_SUFFIX",
    "DESCRIPTION_REGEXP",
    "IMAGE_QUERIES_SUFFIX",
    "BackendDescriptor",
    "BackendError",
    "DuplicateBackendError",
]

# Preference key suffixes shared by the built-in backends
API_KEY_SUFFIX = "api_key"
IMAGE_QUERIES_SUFFIX = "image_queries"

# Any character but ASCII controls (0x00-0x1F, 0x7F)
DESCRIPTION_REGEXP = rf"[^\x00-\x1F\x7F]{{{DESCRIPTION_MIN_LENGTH},{DESCRIPTION_MAX_LENGTH}}}"

# No underscore: the first "_" of a preference key always ends the service name
_SERVICE_NAME_RE = re.compile(r"[a-z][a-z0-9]*")
_SUFFIX_RE = re.compile(r"[a-z][a-z0-9_]*")


class BackendError(SpicewallError):
    """Exception raised when a backend rejects a value or its service fails."""

    def __init__(self, backend: str, message: str) -> None:
        """Initialize the error.

        Args:
            backend: Name of the backend that failed.
            message: Error description.
        """
        self.backend = backend
        self.message = message
        super().__init__(f"{backend}: {message}")


class DuplicateBackendError(SpicewallError):
    """Two backends claim the same service name or key namespace."""


@dataclass(frozen=True, slots=True)
class BackendDescriptor:  # pylint: disable=too-many-instance-attributes
    """Identity and validation contract of one image-source backend.

    Descriptors are built once at import time and never change, so they can
    be shared by any number of threads or tasks. All regular expressions are
    compiled on construction and applied with full-match semantics.

    Attributes:
        service_name: Unique short identifier, also the preference namespace root.
        display_name: Human readable name.
        home_url: Home page of the provider.
        key_suffixes: Preference key suffixes owned by this backend.
        api_key_regexp: Pattern a syntactically valid API key fully matches.
        search_url_regexp: Pattern a saved-search URL fully matches.
        key_test_endpoint: URL used to check an API key against the service.
        description_regexp: Pattern a saved-query description fully matches.
        key_test_header: When set, the key is sent in this header instead of
            being appended to the endpoint.
        url_converter: Turns an accepted web URL into the API URL to save.
    """

    service_name: str
    display_name: str
    home_url: str
    key_suffixes: tuple[str, ...]
    api_key_regexp: str
    search_url_regexp: str
    key_test_endpoint: str
    description_regexp: str = DESCRIPTION_REGEXP
    key_test_header: str | None = None
    url_converter: Callable[[str], str] | None = field(default=None, compare=False)

    _api_key_re: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _search_url_re: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _description_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not _SERVICE_NAME_RE.fullmatch(self.service_name):
            msg = f"Invalid service name {self.service_name!r}: use lowercase letters and digits"
            raise ValueError(msg)
        for suffix in self.key_suffixes:
            if not _SUFFIX_RE.fullmatch(suffix):
                msg = f"[{self.service_name}] Invalid preference key suffix {suffix!r}"
                raise ValueError(msg)
        if len(set(self.key_suffixes)) != len(self.key_suffixes):
            msg = f"[{self.service_name}] Duplicate preference key suffixes: {self.key_suffixes}"
            raise ValueError(msg)
        # frozen dataclass: bypass __setattr__ for the derived fields
        object.__setattr__(self, "_api_key_re", re.compile(self.api_key_regexp))
        object.__setattr__(self, "_search_url_re", re.compile(self.search_url_regexp))
        object.__setattr__(self, "_description_re", re.compile(self.description_regexp))

    @property
    def key_prefix(self) -> str:
        """Prefix of every preference key owned by this backend."""
        return f"{self.service_name}_"

    @property
    def preference_keys(self) -> frozenset[str]:
        """Fully-qualified preference keys owned by this backend."""
        return frozenset(self.key_prefix + suffix for suffix in self.key_suffixes)

    def namespace(self) -> str:
        """Return the preference key namespace of this backend."""
        return self.key_prefix

    def preference_key(self, suffix: str) -> str:
        """Build the fully-qualified preference key for `suffix`.

        Args:
            suffix: One of the suffixes declared in `key_suffixes`.

        Returns:
            The namespaced key, e.g. "wallhaven_api_key".

        Raises:
            ValueError: If the suffix isn't declared by this backend.
        """
        if suffix not in self.key_suffixes:
            msg = f"[{self.service_name}] Unknown preference key suffix {suffix!r}. Known: {', '.join(self.key_suffixes)}"
            raise ValueError(msg)
        return self.key_prefix + suffix

    def owns_key(self, key: str) -> bool:
        """Tell if the fully-qualified preference `key` belongs to this backend."""
        return key in self.preference_keys

    def validate_api_key(self, candidate: object) -> bool:
        """Check that `candidate` is a syntactically valid API key."""
        return isinstance(candidate, str) and self._api_key_re.fullmatch(candidate) is not None

    def validate_search_url(self, candidate: object) -> bool:
        """Check that `candidate` is a search URL accepted for this backend."""
        return isinstance(candidate, str) and self._search_url_re.fullmatch(candidate) is not None

    def validate_description(self, candidate: object) -> bool:
        """Check that `candidate` is an acceptable saved-query description."""
        return isinstance(candidate, str) and self._description_re.fullmatch(candidate) is not None

    def key_test_url(self, api_key: str) -> str:
        """Return the key test endpoint followed by `api_key`, unescaped."""
        return self.key_test_endpoint + api_key

    def key_test_request(self, api_key: str) -> tuple[str, dict[str, str]]:
        """Return the URL and headers of the request checking `api_key`.

        Args:
            api_key: The key to check.

        Returns:
            A (url, headers) tuple. Header based backends get the bare endpoint.
        """
        if self.key_test_header:
            return self.key_test_endpoint, {self.key_test_header: api_key}
        return self.key_test_url(api_key), {}

    def to_api_url(self, web_url: str) -> str:
        """Convert an accepted search URL to the form saved in preferences.

        Args:
            web_url: URL entered by the user.

        Returns:
            The URL to store, converted when the backend knows how to.

        Raises:
            BackendError: If the URL isn't accepted by this backend.
        """
        trimmed = web_url.strip()
        if not self.validate_search_url(trimmed):
            raise BackendError(self.service_name, f"URL is not supported: {trimmed}")
        if self.url_converter is None:
            return trimmed
        return self.url_converter(trimmed)
