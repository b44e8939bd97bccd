from __future__ import annotations

import json
from typing import Any

import pytest

from orderpulse._api.feedback import flush_pending_feedback, submit_feedback
from orderpulse.exceptions import OrderPulseApiError, TransientFetchError
from orderpulse.feedback_queue import PendingFeedbackQueue
from orderpulse.models.feedback import FeedbackSubmission
from orderpulse.storage import MemoryKeyValueStore


class _FeedbackTransport:
    """Answers feedback posts with a scripted error per order id."""

    def __init__(self, errors: dict[int, Exception] | None = None) -> None:
        self.errors = dict(errors or {})
        self.posted: list[dict[str, Any]] = []

    async def get_json(self, _endpoint: str) -> Any:
        return {}

    async def post_json(self, endpoint: str, payload: dict[str, Any]) -> Any:
        error = self.errors.get(payload["order_id"])
        if error is not None:
            raise error
        self.posted.append(payload)
        return {"message": "ok"}


def _submission(order_id: int) -> FeedbackSubmission:
    return FeedbackSubmission(order_id=order_id, customer_name="Ana", rating=4)


def test_enqueue_assigns_unique_local_ids() -> None:
    store = MemoryKeyValueStore()
    queue = PendingFeedbackQueue(store)

    first = queue.enqueue(_submission(1))
    second = queue.enqueue(_submission(2))

    assert second.local_id > first.local_id
    assert len(queue) == 2
    stored = json.loads(store.get("pending_feedbacks") or "")
    assert [item["submission"]["order_id"] for item in stored] == [1, 2]


def test_unreadable_queue_is_empty() -> None:
    queue = PendingFeedbackQueue(MemoryKeyValueStore({"pending_feedbacks": '{"not": "a list"}'}))
    assert queue.items() == []


@pytest.mark.asyncio
async def test_submit_queues_only_on_404() -> None:
    queue = PendingFeedbackQueue(MemoryKeyValueStore())
    transport = _FeedbackTransport(
        {
            1: OrderPulseApiError("missing", status_code=404, endpoint="/api/feedbacks/public"),
            2: OrderPulseApiError("bad", status_code=422, endpoint="/api/feedbacks/public"),
        }
    )

    result = await submit_feedback(transport, _submission(1), queue)
    assert result.queued

    with pytest.raises(OrderPulseApiError):
        await submit_feedback(transport, _submission(2), queue)

    assert [item.submission.order_id for item in queue.items()] == [1]


@pytest.mark.asyncio
async def test_flush_keeps_failures() -> None:
    queue = PendingFeedbackQueue(MemoryKeyValueStore())
    for order_id in (1, 2, 3):
        queue.enqueue(_submission(order_id))
    transport = _FeedbackTransport({2: TransientFetchError("timeout")})

    result = await flush_pending_feedback(transport, queue)

    assert (result.submitted, result.failed, result.remaining) == (2, 1, 1)
    assert [p["order_id"] for p in transport.posted] == [1, 3]
    assert [item.submission.order_id for item in queue.items()] == [2]
