"""Last observed status per order."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from orderpulse.models.order import Order, OrderStatus


class StatusHistory:
    """Immutable view of the previous poll's active orders.

    Each poll cycle builds a fresh history from the active snapshot with
    :meth:`from_orders` and replaces the old one.  An order missing from the
    new snapshot therefore survives in exactly one history: the one compared
    against the snapshot it vanished from.

    The last observed :class:`Order` is kept alongside the status so a
    vanished order can still be presented.  Histories built from bare
    statuses (:meth:`from_statuses`) carry no order details.
    """

    __slots__ = ("_statuses", "_orders")

    def __init__(
        self,
        statuses: Mapping[int, OrderStatus] | None = None,
        orders: Mapping[int, Order] | None = None,
    ) -> None:
        self._statuses: dict[int, OrderStatus] = dict(statuses or {})
        self._orders: dict[int, Order] = {k: v for k, v in (orders or {}).items() if k in self._statuses}

    @classmethod
    def from_orders(cls, orders: Iterable[Order]) -> StatusHistory:
        snapshot = list(orders)
        return cls(
            statuses={order.id: order.status for order in snapshot},
            orders={order.id: order for order in snapshot},
        )

    @classmethod
    def from_statuses(cls, statuses: Mapping[int, OrderStatus | str]) -> StatusHistory:
        return cls(statuses={int(k): OrderStatus(v) for k, v in statuses.items()})

    def get(self, order_id: int) -> OrderStatus | None:
        return self._statuses.get(order_id)

    def order(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    def items(self) -> list[tuple[int, OrderStatus]]:
        return list(self._statuses.items())

    def as_dict(self) -> dict[int, OrderStatus]:
        return dict(self._statuses)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._statuses

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._statuses))

    def __len__(self) -> int:
        return len(self._statuses)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusHistory):
            return NotImplemented
        return self._statuses == other._statuses

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {v.value}" for k, v in self._statuses.items())
        return f"StatusHistory({{{inner}}})"
