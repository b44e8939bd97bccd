"""Persisted record of orders that were already offered feedback."""

from __future__ import annotations

import json
import logging

from orderpulse._constants import SHOWN_FEEDBACK_KEY
from orderpulse.storage import PersistentKeyValueStore

_logger = logging.getLogger(__name__)


def _parse_ids(raw: str) -> set[int]:
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError("expected a JSON array")
    ids: set[int] = set()
    for item in value:
        # bool is an int subclass; reject it explicitly.
        if isinstance(item, bool) or not isinstance(item, int):
            raise ValueError(f"non-integer order id {item!r}")
        ids.add(item)
    return ids


class FeedbackEligibilityStore:
    """Set of order ids that must never be prompted again.

    The set is read once from *store* on construction and rewritten in full
    (as a JSON array of integers) on every :meth:`mark_shown`.  It only
    grows; :meth:`clear` is the maintenance escape hatch.

    A failed write raises :class:`~orderpulse.exceptions.PersistenceError`
    *after* the in-memory set was updated, so this process keeps honouring
    the mark.
    """

    def __init__(self, store: PersistentKeyValueStore, *, key: str = SHOWN_FEEDBACK_KEY) -> None:
        self._store = store
        self._key = key
        self._shown: set[int] = self._load()

    def _load(self) -> set[int]:
        raw = self._store.get(self._key)
        if not raw:
            return set()
        try:
            ids = _parse_ids(raw)
        except ValueError:
            _logger.warning("Ignoring unreadable feedback tracking under %r", self._key, exc_info=True)
            return set()
        _logger.debug("Loaded %d shown feedback order ids", len(ids))
        return ids

    def is_eligible(self, order_id: int) -> bool:
        return order_id not in self._shown

    def mark_shown(self, order_id: int) -> None:
        if order_id in self._shown:
            return
        self._shown.add(order_id)
        self._store.set(self._key, json.dumps(sorted(self._shown)))

    def clear(self) -> None:
        self._shown.clear()
        self._store.delete(self._key)
        _logger.info("Cleared feedback tracking")

    def shown_ids(self) -> frozenset[int]:
        return frozenset(self._shown)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._shown

    def __len__(self) -> int:
        return len(self._shown)
