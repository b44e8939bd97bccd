from __future__ import annotations

import json
from pathlib import Path

import pytest

from orderpulse.exceptions import PersistenceError
from orderpulse.lifecycle.eligibility import FeedbackEligibilityStore
from orderpulse.storage import JsonFileKeyValueStore, MemoryKeyValueStore


class _FailingStore(MemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk full", key=key)


def test_mark_shown_persists_sorted_json_array() -> None:
    store = MemoryKeyValueStore()
    eligibility = FeedbackEligibilityStore(store)

    eligibility.mark_shown(9)
    eligibility.mark_shown(3)

    assert json.loads(store.get("shownFeedbackOrders") or "") == [3, 9]
    assert not eligibility.is_eligible(3)
    assert eligibility.is_eligible(4)


def test_mark_shown_is_idempotent() -> None:
    store = MemoryKeyValueStore()
    eligibility = FeedbackEligibilityStore(store)

    eligibility.mark_shown(1)
    eligibility.mark_shown(1)

    assert len(eligibility) == 1
    assert store.get("shownFeedbackOrders") == "[1]"


def test_marks_survive_reload(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    FeedbackEligibilityStore(JsonFileKeyValueStore(path)).mark_shown(12)

    reloaded = FeedbackEligibilityStore(JsonFileKeyValueStore(path))
    assert 12 in reloaded
    assert not reloaded.is_eligible(12)


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "[1, \"two\"]", "[true]"])
def test_unreadable_value_starts_empty(raw: str) -> None:
    eligibility = FeedbackEligibilityStore(MemoryKeyValueStore({"shownFeedbackOrders": raw}))
    assert eligibility.shown_ids() == frozenset()


def test_write_failure_keeps_mark_in_memory() -> None:
    eligibility = FeedbackEligibilityStore(_FailingStore())

    with pytest.raises(PersistenceError):
        eligibility.mark_shown(5)

    assert not eligibility.is_eligible(5)


def test_clear_forgets_everything() -> None:
    store = MemoryKeyValueStore()
    eligibility = FeedbackEligibilityStore(store)
    eligibility.mark_shown(1)

    eligibility.clear()

    assert eligibility.is_eligible(1)
    assert store.get("shownFeedbackOrders") is None
