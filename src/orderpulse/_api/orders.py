"""Public order endpoints.

Endpoints:
  - /api/orders/public/active             (orders not yet in a terminal state)
  - /api/orders/public/recently-finished  (terminal orders from the last 24 hours)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from orderpulse._constants import ACTIVE_ORDERS_ENDPOINT, RECENTLY_FINISHED_ENDPOINT
from orderpulse._transport import Transport
from orderpulse.exceptions import TransientFetchError
from orderpulse.models.order import Order

_logger = logging.getLogger(__name__)


def parse_order_list(endpoint: str, body: Any, *, strict: bool = False) -> list[Order]:
    """Parse an ``{"orders": [...]}`` body.

    Malformed entries are skipped, or with *strict* fail the whole body with
    :class:`TransientFetchError`.
    """
    if isinstance(body, dict):
        items = body.get("orders", [])
    elif isinstance(body, list):
        items = body
    else:
        raise TransientFetchError(f"Unexpected body from {endpoint}: {type(body).__name__}", endpoint=endpoint)

    if not isinstance(items, list):
        raise TransientFetchError(f"'orders' from {endpoint} is not a list", endpoint=endpoint)

    orders: list[Order] = []
    for item in items:
        try:
            orders.append(Order.model_validate(item))
        except ValidationError as exc:
            if strict:
                raise TransientFetchError(f"Malformed order from {endpoint}: {exc}", endpoint=endpoint) from exc
            _logger.warning("Skipping malformed order from %s", endpoint, exc_info=True)
    return orders


async def fetch_active_orders(transport: Transport) -> list[Order]:
    """Fetch the guest's orders that are not yet finished.

    Strict: an order dropped from this snapshot would look like it vanished.
    """
    body = await transport.get_json(ACTIVE_ORDERS_ENDPOINT)
    return parse_order_list(ACTIVE_ORDERS_ENDPOINT, body, strict=True)


async def fetch_recently_finished_orders(transport: Transport) -> list[Order]:
    """Fetch finished orders inside the backend's recency window."""
    body = await transport.get_json(RECENTLY_FINISHED_ENDPOINT)
    return parse_order_list(RECENTLY_FINISHED_ENDPOINT, body)
