"""Unit tests for the in-memory history store."""

import pytest

from tour_campaign_optimizer.constants import OptimizationType
from tour_campaign_optimizer.models.results import OptimizationHistoryEntry
from tour_campaign_optimizer.storage import InMemoryHistoryStore


def _entry(campaign_id, optimization_type=OptimizationType.CONVERSION_VALUE):
    return OptimizationHistoryEntry(campaign_id=campaign_id, type=optimization_type)


@pytest.fixture
def store():
    return InMemoryHistoryStore()


class TestInMemoryHistoryStore:
    def test_append_and_get_oldest_first(self, store):
        first = _entry("abc")
        second = _entry("abc", OptimizationType.BID_RECOMMENDATIONS)

        store.append("abc", first)
        store.append("abc", second)

        assert store.get("abc") == [first, second]

    def test_lookup_is_exact(self, store):
        store.append("abc", _entry("abc"))
        store.append("abc123", _entry("abc123"))

        assert len(store.get("abc")) == 1
        assert store.get("ab") == []

    def test_get_returns_copy(self, store):
        store.append("abc", _entry("abc"))

        store.get("abc").clear()

        assert len(store.get("abc")) == 1

    def test_clear_one_key(self, store):
        store.append("abc", _entry("abc"))
        store.append("xyz", _entry("xyz"))

        store.clear("abc")

        assert store.keys() == ["xyz"]
        assert len(store) == 1

    def test_clear_unknown_key_is_noop(self, store):
        store.append("abc", _entry("abc"))

        store.clear("missing")

        assert len(store) == 1

    def test_clear_all(self, store):
        store.append("abc", _entry("abc"))
        store.append("xyz", _entry("xyz"))

        store.clear()

        assert store.keys() == []
        assert len(store) == 0
