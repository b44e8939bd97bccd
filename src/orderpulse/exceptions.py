"""Custom exception hierarchy for orderpulse."""

from __future__ import annotations


class OrderPulseError(Exception):
    """Base exception for all orderpulse errors."""


class OrderPulseConfigError(OrderPulseError):
    """Invalid or missing configuration."""


class TransientFetchError(OrderPulseError):
    """Network or backend failure that is expected to heal on its own.

    Raised for connection errors, timeouts, 5xx responses and unreadable
    bodies.  The polling loop logs these and retries on the next cycle.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class OrderPulseApiError(OrderPulseError):
    """Backend rejected the request (non-retryable 4xx response)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class PersistenceError(OrderPulseError):
    """A durable key-value write failed.

    The in-memory state has already been updated when this is raised, so
    callers may keep going for the current process.  A restart may then
    re-offer a prompt that was shown.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class InvariantViolation(OrderPulseError):
    """A trigger candidate cannot be resolved to order details."""

    def __init__(self, message: str, *, order_id: int | None = None) -> None:
        self.order_id = order_id
        super().__init__(message)
