"""Wallhaven backend descriptor and URL helpers.

Wallhaven accepts searches either from its web page (https://wallhaven.cc/search)
or from its JSON API (https://wallhaven.cc/api/v1/search). Saved queries are
always stored in the API form, without the API key and page parameters.

See: https://wallhaven.cc/help/api
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from . import register_backend
from .base import API_KEY_SUFFIX, IMAGE_QUERIES_SUFFIX, BackendDescriptor

__all__ = [
    "API_KEY_PREF_KEY",
    "API_SEARCH_URL",
    "IMAGE_QUERIES_PREF_KEY",
    "WALLHAVEN",
    "to_api_url",
    "with_resolution",
]

SERVICE_NAME = "wallhaven"

API_KEY_REGEXP = r"[a-zA-Z0-9]{32}"
URL_REGEXP = r"https://wallhaven\.cc/(?:search|api/v1/search)(?:\?[a-zA-Z0-9_\-.~!$&'()*+,;=:@/?%]*|)"
TEST_API_KEY_URL = "https://wallhaven.cc/api/v1/settings?apikey="

API_SEARCH_PATH = "/api/v1/search"
API_SEARCH_URL = f"https://wallhaven.cc{API_SEARCH_PATH}"

# Never saved: the key is a secret, the page changes on every fetch
STRIPPED_PARAMS = frozenset({"apikey", "page"})
# Any of these already constrains the image size
RESOLUTION_PARAMS = frozenset({"atleast", "resolutions", "ratios"})


def to_api_url(web_url: str) -> str:
    """Convert a wallhaven search URL to the API URL to save.

    The web search page is mapped to the API search endpoint, keeping the
    query string. The apikey and page parameters are removed.

    Args:
        web_url: An URL accepted by WALLHAVEN.validate_search_url.

    Returns:
        The cleaned API URL.
    """
    parts = urlsplit(web_url.strip())
    query = parts.query
    params = parse_qsl(query, keep_blank_values=True)
    if any(name in STRIPPED_PARAMS for name, _ in params):
        query = urlencode([(name, value) for name, value in params if name not in STRIPPED_PARAMS])
    return urlunsplit(("https", "wallhaven.cc", API_SEARCH_PATH, query, ""))


def with_resolution(api_url: str, width: int, height: int) -> str:
    """Add a minimum resolution to `api_url` unless it already has a size filter.

    Args:
        api_url: A saved wallhaven API URL.
        width: Minimum image width in pixels.
        height: Minimum image height in pixels.

    Returns:
        The URL with `atleast=WIDTHxHEIGHT`, or `api_url` unchanged.
    """
    parts = urlsplit(api_url)
    params = parse_qsl(parts.query, keep_blank_values=True)
    if any(name in RESOLUTION_PARAMS for name, _ in params):
        return api_url
    params.append(("atleast", f"{width}x{height}"))
    return urlunsplit(parts._replace(query=urlencode(params)))


WALLHAVEN = register_backend(
    BackendDescriptor(
        service_name=SERVICE_NAME,
        display_name="Wallhaven",
        home_url="https://wallhaven.cc",
        key_suffixes=(IMAGE_QUERIES_SUFFIX, API_KEY_SUFFIX),
        api_key_regexp=API_KEY_REGEXP,
        search_url_regexp=URL_REGEXP,
        key_test_endpoint=TEST_API_KEY_URL,
        url_converter=to_api_url,
    )
)

IMAGE_QUERIES_PREF_KEY = WALLHAVEN.preference_key(IMAGE_QUERIES_SUFFIX)
API_KEY_PREF_KEY = WALLHAVEN.preference_key(API_KEY_SUFFIX)
