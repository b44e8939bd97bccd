"""Trigger candidates and the decisions handed to the presentation layer."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from orderpulse.models.order import Order


class TriggerReason(StrEnum):
    STATUS_TRANSITION = "status-transition"
    VANISHED = "vanished"
    TIME_BASED = "time-based"
    RECONCILIATION = "reconciliation"


class DeciderState(StrEnum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    NO_ACTION = "no-action"
    SINGLE_PROMPT = "single-prompt"
    MULTI_SELECT = "multi-select"


class TriggerCandidate(BaseModel):
    """An order that may deserve a feedback prompt this cycle."""

    model_config = ConfigDict(frozen=True)

    order_id: int
    reason: TriggerReason
    order: Order | None = Field(default=None, description="Order details, when known.")


class NoAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["no-action"] = "no-action"


class SinglePrompt(BaseModel):
    """Show the feedback form for one order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single-prompt"] = "single-prompt"
    order: Order
    reason: TriggerReason

    @property
    def order_ids(self) -> list[int]:
        return [self.order.id]


class MultiSelect(BaseModel):
    """Let the guest pick which of several finished orders to rate."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["multi-select"] = "multi-select"
    orders: list[Order]

    @property
    def order_ids(self) -> list[int]:
        return [order.id for order in self.orders]


Decision = NoAction | SinglePrompt | MultiSelect
