"""Local queue for feedback the backend could not accept yet."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from orderpulse._constants import PENDING_FEEDBACK_KEY
from orderpulse.models.feedback import FeedbackSubmission, PendingFeedback
from orderpulse.storage import PersistentKeyValueStore

_logger = logging.getLogger(__name__)

_PENDING_LIST = TypeAdapter(list[PendingFeedback])


class PendingFeedbackQueue:
    """Feedback submissions persisted under ``pending_feedbacks``.

    Every mutation rewrites the whole list.  Writes propagate
    :class:`~orderpulse.exceptions.PersistenceError`.
    """

    def __init__(self, store: PersistentKeyValueStore, *, key: str = PENDING_FEEDBACK_KEY) -> None:
        self._store = store
        self._key = key

    def items(self) -> list[PendingFeedback]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            return _PENDING_LIST.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable pending feedback queue under %r", self._key)
            return []

    def __len__(self) -> int:
        return len(self.items())

    def _write(self, items: list[PendingFeedback]) -> None:
        if not items:
            self._store.delete(self._key)
            return
        payload = [item.model_dump(mode="json") for item in items]
        self._store.set(self._key, json.dumps(payload))

    def enqueue(self, submission: FeedbackSubmission) -> PendingFeedback:
        items = self.items()
        local_id = int(time.time() * 1000)
        # Keep local ids unique when several are queued in the same millisecond.
        if items:
            local_id = max(local_id, max(item.local_id for item in items) + 1)
        pending = PendingFeedback(local_id=local_id, submission=submission)
        items.append(pending)
        self._write(items)
        _logger.info("Queued feedback for order %s locally (%d pending)", submission.order_id, len(items))
        return pending

    def remove(self, local_ids: Iterable[int]) -> int:
        """Drop the given entries and return how many remain."""
        drop = set(local_ids)
        remaining = [item for item in self.items() if item.local_id not in drop]
        self._write(remaining)
        return len(remaining)
