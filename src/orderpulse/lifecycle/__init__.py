"""Order lifecycle and feedback trigger engine.

This package decides, from periodic snapshots of a guest's active orders,
when an order has finished and whether to ask for feedback about it.  It is
independent of HTTP and of any rendering technology.
"""

from orderpulse.lifecycle.decider import FeedbackTriggerDecider, OrderSource
from orderpulse.lifecycle.eligibility import FeedbackEligibilityStore
from orderpulse.lifecycle.events import (
    DeciderState,
    Decision,
    MultiSelect,
    NoAction,
    SinglePrompt,
    TriggerCandidate,
    TriggerReason,
)
from orderpulse.lifecycle.history import StatusHistory
from orderpulse.lifecycle.ready_timer import ReadyTimer
from orderpulse.lifecycle.transitions import detect_transitions

__all__ = [
    "DeciderState",
    "Decision",
    "FeedbackEligibilityStore",
    "FeedbackTriggerDecider",
    "MultiSelect",
    "NoAction",
    "OrderSource",
    "ReadyTimer",
    "SinglePrompt",
    "StatusHistory",
    "TriggerCandidate",
    "TriggerReason",
    "detect_transitions",
]
