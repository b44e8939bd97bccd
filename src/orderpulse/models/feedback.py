"""Feedback submission models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderpulse.models._base import ApiTimestamp, OrderPulseEnum
from orderpulse.models.order import Order


class FeedbackType(OrderPulseEnum):
    GENERAL = "general"
    COMPLAINT = "complaint"
    COMPLIMENT = "compliment"
    SUGGESTION = "suggestion"
    UNKNOWN = "unknown"


class FeedbackSubmission(BaseModel):
    """Body of ``POST /api/feedbacks/public``.

    Serialized with the backend's snake_case keys.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    order_id: int
    customer_name: str = Field(min_length=1)
    customer_email: str | None = None
    rating: int = Field(ge=1, le=5)
    food_rating: int | None = Field(default=None, ge=1, le=5)
    service_rating: int | None = Field(default=None, ge=1, le=5)
    atmosphere_rating: int | None = Field(default=None, ge=1, le=5)
    feedback_text: str | None = None
    feedback_type: FeedbackType = FeedbackType.GENERAL
    is_public: bool = True
    is_verified: bool = False

    @field_validator("feedback_type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            parsed = FeedbackType(value)
            if parsed is FeedbackType.UNKNOWN:
                raise ValueError(f"unsupported feedback_type {value!r}")
            return parsed
        return value

    @classmethod
    def for_order(cls, order: Order, *, rating: int, **fields: Any) -> FeedbackSubmission:
        """Prefill the guest fields from *order*."""
        fields.setdefault("customer_name", order.customer_name or "Guest")
        fields.setdefault("customer_email", order.customer_email or None)
        return cls(order_id=order.id, rating=rating, **fields)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PendingFeedback(BaseModel):
    """A submission queued locally because the public endpoint was missing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    local_id: int
    queued_at: ApiTimestamp = Field(default_factory=lambda: datetime.now(UTC))
    submission: FeedbackSubmission


class FeedbackResult(BaseModel):
    """Outcome of a single submission attempt."""

    model_config = ConfigDict(frozen=True)

    order_id: int
    queued: bool = False
    """``True`` when the submission was stored locally instead of sent."""
    response: dict[str, Any] = Field(default_factory=dict)


class PendingFlushResult(BaseModel):
    """Outcome of flushing the local feedback queue."""

    model_config = ConfigDict(frozen=True)

    submitted: int = 0
    failed: int = 0
    remaining: int = 0
