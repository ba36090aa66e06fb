" generic fixtures "
import logging
from contextlib import asynccontextmanager

import pytest

from spicewall.backends import BackendDescriptor
from spicewall.preferences import MemoryPreferences

VALID_WALLHAVEN_KEY = "a1b2c3d4e5f6g7h8i9j0k1l2m3n4o5p6"
VALID_PEXELS_KEY = "abcd-" * 11 + "z"


def pytest_configure():
    "Runs once before all"
    from spicewall.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


def make_descriptor(name: str, **kwargs) -> BackendDescriptor:
    "Build a descriptor for a fictional backend"
    params = {
        "service_name": name,
        "display_name": name.title(),
        "home_url": f"https://{name}.example",
        "key_suffixes": ("image_queries", "api_key"),
        "api_key_regexp": r"[a-z0-9]{8}",
        "search_url_regexp": rf"https://{name}\.example/search(?:\?.*)?",
        "key_test_endpoint": f"https://{name}.example/check?key=",
    }
    params.update(kwargs)
    return BackendDescriptor(**params)


@pytest.fixture
def test_logger():
    logger = logging.getLogger("spicewall.tests")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def store():
    return MemoryPreferences()


@pytest.fixture
def clean_registry(monkeypatch):
    "Runs with an empty backend registry"
    registry: dict[str, BackendDescriptor] = {}
    monkeypatch.setattr("spicewall.backends.BACKENDS", registry)
    return registry


class FakeResponse:
    "Minimal aiohttp response"

    def __init__(self, status: int):
        self.status = status


class FakeSession:
    "Records GET requests and answers with a fixed status or error"

    def __init__(self, status: int = 200, error: Exception | None = None):
        self.status = status
        self.error = error
        self.calls: list[tuple[str, dict]] = []
        self.closed = False

    def get(self, url, headers=None):
        self.calls.append((url, headers or {}))
        if self.error is not None:
            raise self.error
        return self._respond()

    @asynccontextmanager
    async def _respond(self):
        yield FakeResponse(self.status)

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
