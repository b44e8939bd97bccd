"""orderpulse - Async order tracking and feedback prompting for restaurant storefronts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("orderpulse")
except PackageNotFoundError:
    __version__ = "0+local"
from orderpulse.client import OrderPulseClient
from orderpulse.config import OrderPulseConfig
from orderpulse.exceptions import (
    InvariantViolation,
    OrderPulseApiError,
    OrderPulseConfigError,
    OrderPulseError,
    PersistenceError,
    TransientFetchError,
)
from orderpulse.lifecycle import (
    DeciderState,
    Decision,
    FeedbackEligibilityStore,
    FeedbackTriggerDecider,
    MultiSelect,
    NoAction,
    OrderSource,
    ReadyTimer,
    SinglePrompt,
    StatusHistory,
    TriggerCandidate,
    TriggerReason,
    detect_transitions,
)
from orderpulse.models import FeedbackSubmission, FeedbackType, Order, OrderItem, OrderStatus
from orderpulse.session import GuestSession
from orderpulse.storage import JsonFileKeyValueStore, MemoryKeyValueStore, PersistentKeyValueStore
from orderpulse.watcher import OrderWatcher

__all__ = [
    "__version__",
    "DeciderState",
    "Decision",
    "FeedbackEligibilityStore",
    "FeedbackSubmission",
    "FeedbackTriggerDecider",
    "FeedbackType",
    "GuestSession",
    "InvariantViolation",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "MultiSelect",
    "NoAction",
    "Order",
    "OrderItem",
    "OrderPulseApiError",
    "OrderPulseClient",
    "OrderPulseConfig",
    "OrderPulseConfigError",
    "OrderPulseError",
    "OrderSource",
    "OrderStatus",
    "OrderWatcher",
    "PersistenceError",
    "PersistentKeyValueStore",
    "ReadyTimer",
    "SinglePrompt",
    "StatusHistory",
    "TransientFetchError",
    "TriggerCandidate",
    "TriggerReason",
    "detect_transitions",
]
