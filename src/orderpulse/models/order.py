"""Order projection returned by the public order endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from orderpulse.models._base import ApiTimestamp, OrderPulseBaseModel, OrderPulseEnum


class OrderStatus(OrderPulseEnum):
    """Order lifecycle status.

    ``DELIVERED``, ``FINISHED`` and ``COMPLETED`` are synonyms for the
    terminal state.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    FINISHED = "finished"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.FINISHED, OrderStatus.COMPLETED}
)


class MenuItemSnapshot(OrderPulseBaseModel):
    """Menu item as it was when the order was placed."""

    id: int | None = None
    name: str = ""
    price: float | None = None
    image_url: str | None = None


class OrderItem(OrderPulseBaseModel):
    """A line item of an order."""

    id: int | None = None
    menu_item_id: int | None = None
    quantity: int = 1
    price: float | None = None
    notes: str = ""
    menu_item: MenuItemSnapshot | None = None


class Order(OrderPulseBaseModel):
    """Read-only order projection.

    Fields are mapped from the ``orders`` array of
    ``/api/orders/public/active`` and ``/api/orders/public/recently-finished``.
    """

    id: int
    """Stable order identity."""
    status: OrderStatus = OrderStatus.UNKNOWN
    customer_name: str = "Guest"
    customer_email: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    total_amount: float | None = None
    special_instructions: str = ""
    payment_method: str = "cash"
    tip_amount: float = 0.0
    created_at: ApiTimestamp = None

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return OrderStatus(value)
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _drop_empty_items(cls, value: Any) -> Any:
        # LEFT JOIN aggregates yield [{"id": null, ...}] for orders without items.
        if not isinstance(value, list):
            return []
        return [
            item
            for item in value
            if not (isinstance(item, dict) and item.get("id") is None and item.get("menu_item_id") is None)
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def order_number(self) -> str:
        """Display number used by the storefront (``ORD-000042``)."""
        return f"ORD-{self.id:06d}"
