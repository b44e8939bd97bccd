"""Detect finished orders between two poll snapshots."""

from __future__ import annotations

from collections.abc import Sequence

from orderpulse.lifecycle.events import TriggerCandidate, TriggerReason
from orderpulse.lifecycle.history import StatusHistory
from orderpulse.lifecycle.policy import is_terminal, vanish_counts_as_finish
from orderpulse.models.order import Order


def detect_transitions(
    previous: StatusHistory,
    current: Sequence[Order],
    *,
    vanished_counts_as_finished: bool = True,
) -> list[TriggerCandidate]:
    """Compare *current* against *previous* and return finish candidates.

    * ``status-transition``: the order was seen non-terminal last cycle and is
      terminal now.  Orders without a previous status never qualify, so a
      status path like pending -> preparing -> ready -> delivered produces a
      single candidate, at the final step.
    * ``vanished``: the order was seen non-terminal last cycle and is absent
      now.

    Transitions are listed in *current* order, then vanished ids in history
    order.  The function reads nothing but its arguments.
    """
    candidates: list[TriggerCandidate] = []
    current_ids: set[int] = set()

    for order in current:
        current_ids.add(order.id)
        previous_status = previous.get(order.id)
        if previous_status is None or is_terminal(previous_status):
            continue
        if is_terminal(order.status):
            candidates.append(
                TriggerCandidate(order_id=order.id, reason=TriggerReason.STATUS_TRANSITION, order=order)
            )

    for order_id, last_status in previous.items():
        if order_id in current_ids:
            continue
        if not vanish_counts_as_finish(last_status, vanished_counts_as_finished=vanished_counts_as_finished):
            continue
        candidates.append(
            TriggerCandidate(order_id=order_id, reason=TriggerReason.VANISHED, order=previous.order(order_id))
        )

    return candidates
