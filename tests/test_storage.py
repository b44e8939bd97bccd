from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from orderpulse.exceptions import PersistenceError
from orderpulse.storage import JsonFileKeyValueStore, MemoryKeyValueStore


def test_memory_store_roundtrip() -> None:
    store = MemoryKeyValueStore({"a": "1"})
    store.set("b", "2")
    store.delete("a")
    store.delete("missing")

    assert store.get("a") is None
    assert store.get("b") == "2"


def test_json_file_store_writes_object(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    store = JsonFileKeyValueStore(path)
    store.set("shownFeedbackOrders", "[1,2]")

    assert json.loads(path.read_text(encoding="utf-8")) == {"shownFeedbackOrders": "[1,2]"}
    assert JsonFileKeyValueStore(path).get("shownFeedbackOrders") == "[1,2]"
    # No temporary files are left behind.
    assert sorted(p.name for p in path.parent.iterdir()) == ["state.json"]


def test_json_file_store_delete(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileKeyValueStore(path)
    store.set("a", "1")
    store.set("b", "2")
    store.delete("a")

    assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2"}


@pytest.mark.parametrize("content", ["{broken", "[1, 2]", ""])
def test_json_file_store_ignores_unreadable_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "state.json"
    path.write_text(content, encoding="utf-8")

    store = JsonFileKeyValueStore(path)
    assert store.get("anything") is None

    store.set("a", "1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


def test_json_file_store_skips_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"a": "1", "b": 2}), encoding="utf-8")

    store = JsonFileKeyValueStore(path)
    assert store.get("a") == "1"
    assert store.get("b") is None


def test_failed_replace_raises_persistence_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "state.json"
    store = JsonFileKeyValueStore(path)
    store.set("a", "1")

    def _boom(*_args: object, **_kwargs: object) -> None:
        raise OSError("read-only file system")

    monkeypatch.setattr(os, "replace", _boom)

    with pytest.raises(PersistenceError) as exc_info:
        store.set("a", "2")

    assert exc_info.value.key == "a"
    # The previous content is intact.
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}
