"""Check an API key against the live service of its backend."""

import asyncio
import logging
from http import HTTPStatus

from .backends import BackendDescriptor, BackendError
from .httpclient import ClientError, ClientSession, create_session

__all__ = ["check_api_key"]

_log = logging.getLogger(__name__)


async def check_api_key(
    descriptor: BackendDescriptor,
    api_key: str,
    session: ClientSession | None = None,
    *,
    log: logging.Logger | None = None,
) -> bool:
    """Tell if the service of `descriptor` accepts `api_key`.

    Keys failing the syntactic check are rejected without any request.
    The request is never retried.

    Args:
        descriptor: Backend owning the key.
        api_key: The key to check.
        session: HTTP session to use. A temporary one is created when None.
        log: Logger instance. Defaults to module logger.

    Returns:
        True if the service answered HTTP 200, False otherwise.

    Raises:
        BackendError: If the service can't be reached.
    """
    log = log or _log
    if not descriptor.validate_api_key(api_key):
        log.debug("[%s] API key has an invalid format, not checking it", descriptor.service_name)
        return False

    if session is None:
        async with create_session() as own_session:
            return await _request_check(descriptor, api_key, own_session, log)
    return await _request_check(descriptor, api_key, session, log)


async def _request_check(
    descriptor: BackendDescriptor,
    api_key: str,
    session: ClientSession,
    log: logging.Logger,
) -> bool:
    """Send the key test request and interpret its status."""
    url, headers = descriptor.key_test_request(api_key)
    try:
        async with session.get(url, headers=headers) as response:
            if response.status == HTTPStatus.OK:
                log.info("[%s] API key accepted", descriptor.service_name)
                return True
            log.warning("[%s] API key rejected: HTTP %s", descriptor.service_name, response.status)
            return False
    except ClientError as e:
        raise BackendError(descriptor.service_name, str(e)) from e
    except asyncio.TimeoutError as e:
        msg = "Request timed out"
        raise BackendError(descriptor.service_name, msg) from e
