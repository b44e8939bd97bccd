"""Data models for storefront API payloads."""

from orderpulse.models._base import ApiTimestamp, OrderPulseBaseModel, OrderPulseEnum, parse_api_timestamp
from orderpulse.models.feedback import (
    FeedbackResult,
    FeedbackSubmission,
    FeedbackType,
    PendingFeedback,
    PendingFlushResult,
)
from orderpulse.models.order import TERMINAL_STATUSES, MenuItemSnapshot, Order, OrderItem, OrderStatus

__all__ = [
    "ApiTimestamp",
    "FeedbackResult",
    "FeedbackSubmission",
    "FeedbackType",
    "MenuItemSnapshot",
    "Order",
    "OrderItem",
    "OrderPulseBaseModel",
    "OrderPulseEnum",
    "OrderStatus",
    "PendingFeedback",
    "PendingFlushResult",
    "TERMINAL_STATUSES",
    "parse_api_timestamp",
]
