"""HTTP client helpers built on aiohttp.

Usage:
    from spicewall.httpclient import ClientError, create_session

    async with create_session() as session:
        async with session.get(url) as response:
            data = await response.json()
"""

import aiohttp

from .constants import HTTP_TIMEOUT_SECONDS, USER_AGENT

__all__ = [
    "ClientError",
    "ClientSession",
    "ClientTimeout",
    "create_session",
]

ClientSession = aiohttp.ClientSession
ClientTimeout = aiohttp.ClientTimeout
ClientError = aiohttp.ClientError


def create_session(timeout: float = HTTP_TIMEOUT_SECONDS, headers: dict[str, str] | None = None) -> aiohttp.ClientSession:
    """Create an HTTP session with the spicewall defaults.

    Must be called from a running event loop.

    Args:
        timeout: Total timeout of a request, in seconds.
        headers: Extra default headers, merged over the User-Agent.

    Returns:
        A new ClientSession, to be closed by the caller.
    """
    return ClientSession(
        timeout=ClientTimeout(total=timeout),
        headers={"User-Agent": USER_AGENT, **(headers or {})},
    )
