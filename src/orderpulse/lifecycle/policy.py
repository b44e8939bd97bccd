"""Status classification rules shared by the lifecycle components.

No I/O and no state here; only questions about a single status.
"""

from __future__ import annotations

from orderpulse.models.order import TERMINAL_STATUSES, OrderStatus


def is_terminal(status: OrderStatus | None) -> bool:
    return status is not None and status in TERMINAL_STATUSES


def is_in_progress(status: OrderStatus | None) -> bool:
    """An order the guest is still waiting on."""
    if status is None:
        return False
    return status not in TERMINAL_STATUSES and status is not OrderStatus.CANCELLED


def vanish_counts_as_finish(last_status: OrderStatus | None, *, vanished_counts_as_finished: bool) -> bool:
    """Decide whether leaving the active list from *last_status* is a finish.

    The active endpoint drops both delivered and cancelled orders, so a
    disappearance is ambiguous.  A cancellation that was observed before the
    order vanished is never a finish; an unobserved one follows the
    configured switch.
    """
    if last_status is None or is_terminal(last_status):
        return False
    if last_status is OrderStatus.CANCELLED:
        return False
    return vanished_counts_as_finished
