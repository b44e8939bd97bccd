"""Feedback endpoint: /api/feedbacks/public.

Older backends do not expose the public endpoint and answer 404; those
submissions are queued locally and flushed later.
"""

from __future__ import annotations

import logging
from typing import Any

from orderpulse._constants import FEEDBACK_ENDPOINT
from orderpulse._transport import Transport
from orderpulse.exceptions import OrderPulseApiError, OrderPulseError
from orderpulse.feedback_queue import PendingFeedbackQueue
from orderpulse.models.feedback import FeedbackResult, FeedbackSubmission, PendingFlushResult

_logger = logging.getLogger(__name__)


async def post_feedback(transport: Transport, submission: FeedbackSubmission) -> dict[str, Any]:
    body = await transport.post_json(FEEDBACK_ENDPOINT, submission.to_payload())
    return body if isinstance(body, dict) else {"data": body}


async def submit_feedback(
    transport: Transport,
    submission: FeedbackSubmission,
    queue: PendingFeedbackQueue,
) -> FeedbackResult:
    """Submit feedback, queueing it locally when the endpoint is missing."""
    try:
        response = await post_feedback(transport, submission)
    except OrderPulseApiError as exc:
        if exc.status_code != 404:
            raise
        _logger.info("Public feedback endpoint not available; queueing order %s", submission.order_id)
        queue.enqueue(submission)
        return FeedbackResult(order_id=submission.order_id, queued=True)
    return FeedbackResult(order_id=submission.order_id, response=response)


async def flush_pending_feedback(transport: Transport, queue: PendingFeedbackQueue) -> PendingFlushResult:
    """Send every queued submission, keeping the ones that still fail."""
    pending = queue.items()
    if not pending:
        return PendingFlushResult()

    sent: list[int] = []
    failed = 0
    for item in pending:
        try:
            await post_feedback(transport, item.submission)
        except OrderPulseError:
            failed += 1
            _logger.warning("Failed to submit queued feedback %s", item.local_id, exc_info=True)
            continue
        sent.append(item.local_id)

    remaining = queue.remove(sent) if sent else len(pending)
    return PendingFlushResult(submitted=len(sent), failed=failed, remaining=remaining)
