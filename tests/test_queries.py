"""Tests for the saved queries."""

import json

import pytest

from spicewall.backends.pexels import PEXELS
from spicewall.backends.wallhaven import WALLHAVEN
from spicewall.models import ConfigError
from spicewall.queries import QueryList, SavedQuery, make_query_id

CATS = "https://wallhaven.cc/search?q=cats"
DOGS = "https://wallhaven.cc/search?q=dogs"


@pytest.fixture
def queries(store, test_logger):
    return QueryList(WALLHAVEN, store, log=test_logger)


def test_query_id():
    query_id = make_query_id("wallhaven", CATS)
    assert len(query_id) == 16
    assert query_id == make_query_id("wallhaven", CATS)
    assert query_id != make_query_id("pexels", CATS)
    assert query_id != make_query_id("wallhaven", DOGS)


def test_saved_query_from_dict():
    query = SavedQuery.from_dict({"query_id": "abc", "description": "Cats!", "url": CATS, "backend": "wallhaven"})
    assert query == SavedQuery("abc", "Cats!", CATS, "wallhaven", True)


class TestAdd:
    """QueryList.add()"""

    def test_add(self, queries, store) -> None:
        query_id = queries.add("Cute cats", CATS)
        assert len(queries) == 1
        assert query_id in queries
        query = queries.get(query_id)
        assert query.url == "https://wallhaven.cc/api/v1/search?q=cats"
        assert query.backend == "wallhaven"
        assert query.active
        assert query_id == make_query_id("wallhaven", query.url)

        stored = json.loads(store.get_string("wallhaven_image_queries"))
        assert stored == [
            {"query_id": query_id, "description": "Cute cats", "url": query.url, "backend": "wallhaven", "active": True}
        ]

    def test_newest_first(self, queries) -> None:
        first = queries.add("Cute cats", CATS)
        second = queries.add("Happy dogs", DOGS)
        assert [q.query_id for q in queries] == [second, first]

    def test_inactive(self, queries) -> None:
        query_id = queries.add("Cute cats", CATS, active=False)
        assert queries.active() == []
        assert not queries.get(query_id).active

    def test_invalid_description(self, queries, store) -> None:
        with pytest.raises(ValueError, match="Invalid description"):
            queries.add("Cat", CATS)
        with pytest.raises(ValueError, match="Invalid description"):
            queries.add("Cute\ncats", CATS)
        assert store.keys() == []

    def test_invalid_url(self, queries, store) -> None:
        with pytest.raises(ValueError, match="URL is not supported"):
            queries.add("Cute cats", "https://www.pexels.com/search/cats/")
        assert store.keys() == []

    def test_duplicate(self, queries) -> None:
        queries.add("Cute cats", CATS)
        with pytest.raises(ValueError, match="Duplicate query"):
            queries.add("Same cats", CATS + "&page=2")
        assert len(queries) == 1

    def test_backends_kept_apart(self, store, test_logger) -> None:
        QueryList(WALLHAVEN, store, log=test_logger).add("Cute cats", CATS)
        pexels = QueryList(PEXELS, store, log=test_logger)
        pexels.add("Cute cats", "https://www.pexels.com/search/cats/")
        assert len(pexels) == 1
        assert sorted(store.keys()) == ["pexels_image_queries", "wallhaven_image_queries"]


class TestChanges:
    """remove(), enable() and disable()"""

    def test_remove(self, queries) -> None:
        query_id = queries.add("Cute cats", CATS)
        queries.remove(query_id)
        assert len(queries) == 0
        assert query_id not in queries

    def test_toggle(self, queries, store, test_logger) -> None:
        query_id = queries.add("Cute cats", CATS)
        queries.disable(query_id)
        assert not QueryList(WALLHAVEN, store, log=test_logger).get(query_id).active
        queries.enable(query_id)
        assert QueryList(WALLHAVEN, store, log=test_logger).active()[0].query_id == query_id

    @pytest.mark.parametrize("method", ["remove", "enable", "disable"])
    def test_unknown_id(self, queries, method: str) -> None:
        with pytest.raises(KeyError, match="not found"):
            getattr(queries, method)("0123456789abcdef")

    def test_failed_save_keeps_list(self, queries, store, mocker) -> None:
        query_id = queries.add("Cute cats", CATS)
        mocker.patch.object(store, "set_string", side_effect=OSError("disk full"))
        with pytest.raises(OSError):
            queries.add("Happy dogs", DOGS)
        with pytest.raises(OSError):
            queries.disable(query_id)
        with pytest.raises(OSError):
            queries.remove(query_id)
        assert [q.query_id for q in queries] == [query_id]
        assert queries.get(query_id).active

    def test_reload(self, queries, store, test_logger) -> None:
        queries.add("Cute cats", CATS)
        queries.add("Happy dogs", DOGS)
        reloaded = QueryList(WALLHAVEN, store, log=test_logger)
        assert [q.description for q in reloaded] == ["Happy dogs", "Cute cats"]


@pytest.mark.parametrize("raw", ["{broken", '[{"url": "x"}]', "[1, 2]"])
def test_corrupted(store, test_logger, raw):
    store.set_string("wallhaven_image_queries", raw)
    with pytest.raises(ConfigError, match="Stored queries are corrupted"):
        QueryList(WALLHAVEN, store, log=test_logger)
