"""Pexels backend descriptor and URL helpers.

Pexels search and collection pages are converted to their API counterparts.
The API key is sent in the Authorization header.

See: https://www.pexels.com/api/documentation/
"""

import re
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from . import register_backend
from .base import API_KEY_SUFFIX, IMAGE_QUERIES_SUFFIX, BackendDescriptor, BackendError

__all__ = [
    "API_KEY_PREF_KEY",
    "IMAGE_QUERIES_PREF_KEY",
    "PEXELS",
    "to_api_url",
]

SERVICE_NAME = "pexels"

API_KEY_REGEXP = r"[a-zA-Z0-9-]{56}"
URL_REGEXP = r"https://(?:www\.)?pexels\.com/(?:search/|collections/).*"
TEST_API_KEY_URL = "https://api.pexels.com/v1/curated?per_page=1"

API_SEARCH_URL = "https://api.pexels.com/v1/search"
API_COLLECTION_URL = "https://api.pexels.com/v1/collections/{}"

# Web search filters that the API understands
KEPT_FILTERS = ("orientation", "size", "color")

_SEARCH_RE = re.compile(r"https://(?:www\.)?pexels\.com/search/([^/?#]+)/?(?:\?.*)?")
_COLLECTION_RE = re.compile(r"https://(?:www\.)?pexels\.com/collections/(?:[^?#]*-)?([a-zA-Z0-9]+)/?(?:\?.*)?")


def to_api_url(web_url: str) -> str:
    """Convert a pexels search or collection page to its API URL.

    Args:
        web_url: An URL accepted by PEXELS.validate_search_url.

    Returns:
        The API URL; search parameters are sorted by name.

    Raises:
        BackendError: If the page is neither a search nor a collection.
    """
    trimmed = web_url.strip()
    match = _SEARCH_RE.fullmatch(trimmed)
    if match:
        web_params = dict(parse_qsl(urlsplit(trimmed).query))
        params = {"query": unquote(match.group(1))}
        params.update({name: web_params[name] for name in KEPT_FILTERS if web_params.get(name)})
        return f"{API_SEARCH_URL}?{urlencode(sorted(params.items()), quote_via=quote)}"

    match = _COLLECTION_RE.fullmatch(trimmed)
    if match:
        return API_COLLECTION_URL.format(match.group(1))

    raise BackendError(SERVICE_NAME, f"Unsupported Pexels URL format: {trimmed}")


PEXELS = register_backend(
    BackendDescriptor(
        service_name=SERVICE_NAME,
        display_name="Pexels",
        home_url="https://www.pexels.com",
        key_suffixes=(IMAGE_QUERIES_SUFFIX, API_KEY_SUFFIX),
        api_key_regexp=API_KEY_REGEXP,
        search_url_regexp=URL_REGEXP,
        key_test_endpoint=TEST_API_KEY_URL,
        key_test_header="Authorization",
        url_converter=to_api_url,
    )
)

IMAGE_QUERIES_PREF_KEY = PEXELS.preference_key(IMAGE_QUERIES_SUFFIX)
API_KEY_PREF_KEY = PEXELS.preference_key(API_KEY_SUFFIX)
