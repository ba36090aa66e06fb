"""Tests for the live API key check."""

import asyncio

import aiohttp
import pytest

from spicewall.backends import BackendError
from spicewall.backends.pexels import PEXELS
from spicewall.backends.wallhaven import WALLHAVEN
from spicewall.constants import USER_AGENT
from spicewall.httpclient import create_session
from spicewall.keycheck import check_api_key
from tests.conftest import VALID_PEXELS_KEY, VALID_WALLHAVEN_KEY, FakeSession


@pytest.mark.asyncio
async def test_accepted(test_logger):
    session = FakeSession(status=200)
    assert await check_api_key(WALLHAVEN, VALID_WALLHAVEN_KEY, session, log=test_logger) is True
    assert session.calls == [(f"https://wallhaven.cc/api/v1/settings?apikey={VALID_WALLHAVEN_KEY}", {})]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 404, 429, 500])
async def test_rejected(status, test_logger):
    session = FakeSession(status=status)
    assert await check_api_key(WALLHAVEN, VALID_WALLHAVEN_KEY, session, log=test_logger) is False
    assert len(session.calls) == 1


@pytest.mark.asyncio
async def test_header_backend(test_logger):
    session = FakeSession(status=200)
    assert await check_api_key(PEXELS, VALID_PEXELS_KEY, session, log=test_logger) is True
    assert session.calls == [("https://api.pexels.com/v1/curated?per_page=1", {"Authorization": VALID_PEXELS_KEY})]


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", ["", "short", VALID_WALLHAVEN_KEY + "\n", VALID_PEXELS_KEY])
async def test_invalid_format_sends_nothing(api_key, test_logger):
    session = FakeSession(status=200)
    assert await check_api_key(WALLHAVEN, api_key, session, log=test_logger) is False
    assert session.calls == []


@pytest.mark.asyncio
async def test_connection_error(test_logger):
    session = FakeSession(error=aiohttp.ClientConnectionError("connection refused"))
    with pytest.raises(BackendError) as exc_info:
        await check_api_key(WALLHAVEN, VALID_WALLHAVEN_KEY, session, log=test_logger)
    assert exc_info.value.backend == "wallhaven"
    assert "connection refused" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_timeout(test_logger):
    session = FakeSession(error=asyncio.TimeoutError())
    with pytest.raises(BackendError, match="wallhaven: Request timed out"):
        await check_api_key(WALLHAVEN, VALID_WALLHAVEN_KEY, session, log=test_logger)


@pytest.mark.asyncio
async def test_own_session_closed(mocker):
    session = FakeSession(status=200)
    factory = mocker.patch("spicewall.keycheck.create_session", return_value=session)
    assert await check_api_key(WALLHAVEN, VALID_WALLHAVEN_KEY) is True
    factory.assert_called_once_with()
    assert session.closed


@pytest.mark.asyncio
async def test_no_session_for_invalid_key(mocker):
    factory = mocker.patch("spicewall.keycheck.create_session")
    assert await check_api_key(WALLHAVEN, "not-a-key") is False
    factory.assert_not_called()


@pytest.mark.asyncio
async def test_create_session_defaults():
    async with create_session(timeout=5, headers={"X-Test": "1"}) as session:
        assert isinstance(session, aiohttp.ClientSession)
        assert session.timeout.total == 5
        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["X-Test"] == "1"
