from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from orderpulse._api.orders import parse_order_list
from orderpulse.exceptions import TransientFetchError
from orderpulse.models.feedback import FeedbackSubmission, FeedbackType
from orderpulse.models.order import Order, OrderStatus


def test_order_from_snake_case_payload() -> None:
    order = Order.model_validate(
        {
            "id": 42,
            "status": "preparing",
            "customer_name": "Ana",
            "customer_email": "ana@example.com",
            "total_amount": "23.50",
            "special_instructions": None,
            "created_at": "2026-03-01T18:00:00.000Z",
            "items": [
                {
                    "id": 1,
                    "menu_item_id": 7,
                    "quantity": 2,
                    "price": 9.5,
                    "menu_item": {"id": 7, "name": "Margherita", "price": 9.5, "image_url": "/img/7.png"},
                }
            ],
        }
    )

    assert order.status is OrderStatus.PREPARING
    assert order.total_amount == 23.5
    assert order.special_instructions == ""
    assert order.created_at == datetime(2026, 3, 1, 18, 0, tzinfo=UTC)
    assert order.items[0].menu_item is not None
    assert order.items[0].menu_item.image_url == "/img/7.png"
    assert order.order_number == "ORD-000042"
    assert order.raw["customer_name"] == "Ana"


def test_order_from_camel_case_payload() -> None:
    order = Order.model_validate({"id": 1, "status": "Ready", "customerName": "Bo", "createdAt": 1772388000000})

    assert order.status is OrderStatus.READY
    assert order.customer_name == "Bo"
    assert order.created_at == datetime(2026, 3, 1, 18, 0, tzinfo=UTC)


def test_unknown_status_maps_to_unknown() -> None:
    order = Order.model_validate({"id": 1, "status": "on-the-way"})
    assert order.status is OrderStatus.UNKNOWN
    assert not order.is_terminal


@pytest.mark.parametrize("status", ["delivered", "finished", "completed"])
def test_terminal_synonyms(status: str) -> None:
    assert Order.model_validate({"id": 1, "status": status}).is_terminal


def test_cancelled_is_not_terminal() -> None:
    assert not Order.model_validate({"id": 1, "status": "cancelled"}).is_terminal


def test_placeholder_item_from_left_join_is_dropped() -> None:
    order = Order.model_validate({"id": 1, "items": [{"id": None, "menu_item_id": None, "quantity": None}]})
    assert order.items == []


def test_order_requires_id() -> None:
    with pytest.raises(ValidationError):
        Order.model_validate({"status": "ready"})


def test_parse_order_list_skips_malformed_entries() -> None:
    orders = parse_order_list("/x", {"orders": [{"id": 1, "status": "ready"}, {"status": "ready"}, "junk"]})
    assert [order.id for order in orders] == [1]


def test_parse_order_list_accepts_bare_list_and_missing_key() -> None:
    assert [o.id for o in parse_order_list("/x", [{"id": 2}])] == [2]
    assert parse_order_list("/x", {}) == []


@pytest.mark.parametrize("body", ["oops", 3, {"orders": "nope"}])
def test_parse_order_list_rejects_unexpected_shapes(body: object) -> None:
    with pytest.raises(TransientFetchError):
        parse_order_list("/x", body)


def test_feedback_submission_payload() -> None:
    order = Order.model_validate({"id": 5, "status": "delivered", "customer_name": "Ana"})
    submission = FeedbackSubmission.for_order(order, rating=4, food_rating=5, feedback_text="  great  ")

    assert submission.to_payload() == {
        "order_id": 5,
        "customer_name": "Ana",
        "rating": 4,
        "food_rating": 5,
        "feedback_text": "great",
        "feedback_type": "general",
        "is_public": True,
        "is_verified": False,
    }


@pytest.mark.parametrize(
    "fields",
    [
        {"rating": 0},
        {"rating": 6},
        {"rating": 3, "service_rating": 9},
        {"rating": 3, "customer_name": "   "},
        {"rating": 3, "feedback_type": "rant"},
    ],
)
def test_feedback_submission_validation(fields: dict[str, object]) -> None:
    payload: dict[str, object] = {"order_id": 1, "customer_name": "Ana", **fields}
    with pytest.raises(ValidationError):
        FeedbackSubmission.model_validate(payload)


def test_feedback_type_is_case_insensitive() -> None:
    submission = FeedbackSubmission(order_id=1, customer_name="Ana", rating=5, feedback_type="Compliment")
    assert submission.feedback_type is FeedbackType.COMPLIMENT


def test_strict_parse_fails_whole_body_on_malformed_order() -> None:
    body = {"orders": [{"id": 1, "status": "ready"}, {"id": 7, "items": [{"id": 1, "quantity": "two"}]}]}

    with pytest.raises(TransientFetchError) as exc_info:
        parse_order_list("/api/orders/public/active", body, strict=True)

    assert exc_info.value.endpoint == "/api/orders/public/active"
