"""First-seen-ready timestamps for the time-based feedback fallback."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from orderpulse._constants import DEFAULT_FEEDBACK_DELAY
from orderpulse.models.order import OrderStatus


class ReadyTimer:
    """Remembers when each order was first observed in ``ready``.

    The first observation wins; later observations of the same order never
    move the timestamp.  Entries are only dropped through :meth:`prune`
    once the order has left the active list.
    """

    def __init__(self) -> None:
        self._ready_since: dict[int, datetime] = {}

    def observe(self, order_id: int, status: OrderStatus, now: datetime) -> None:
        if status is not OrderStatus.READY:
            return
        self._ready_since.setdefault(order_id, now)

    def ready_since(self, order_id: int) -> datetime | None:
        return self._ready_since.get(order_id)

    def expired(self, order_id: int, now: datetime, delay: timedelta = DEFAULT_FEEDBACK_DELAY) -> bool:
        ready_at = self._ready_since.get(order_id)
        if ready_at is None:
            return False
        return now - ready_at >= delay

    def expired_ids(self, now: datetime, delay: timedelta = DEFAULT_FEEDBACK_DELAY) -> list[int]:
        return [order_id for order_id in self._ready_since if self.expired(order_id, now, delay)]

    def prune(self, active_ids: Iterable[int]) -> None:
        keep = set(active_ids)
        for order_id in [oid for oid in self._ready_since if oid not in keep]:
            del self._ready_since[order_id]

    def __len__(self) -> int:
        return len(self._ready_since)
