"""High-level async client for the storefront order API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from orderpulse._api import feedback as _feedback_api
from orderpulse._api import orders as _orders_api
from orderpulse._transport import HttpTransport, Transport
from orderpulse.config import OrderPulseConfig
from orderpulse.exceptions import OrderPulseError
from orderpulse.feedback_queue import PendingFeedbackQueue
from orderpulse.models.feedback import FeedbackResult, FeedbackSubmission, PendingFlushResult
from orderpulse.models.order import Order
from orderpulse.session import GuestSession
from orderpulse.storage import JsonFileKeyValueStore, MemoryKeyValueStore, PersistentKeyValueStore

_logger = logging.getLogger(__name__)


def default_store(config: OrderPulseConfig) -> PersistentKeyValueStore:
    """File-backed store when ``state_path`` is configured, memory otherwise."""
    if config.state_path is not None:
        return JsonFileKeyValueStore(config.state_path)
    return MemoryKeyValueStore()


class OrderPulseClient:
    """Async client for the public storefront order endpoints.

    Implements :class:`~orderpulse.lifecycle.OrderSource`.

    Usage::

        async with OrderPulseClient(config) as client:
            orders = await client.list_active_orders()
    """

    def __init__(
        self,
        config: OrderPulseConfig,
        *,
        store: PersistentKeyValueStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._store = store if store is not None else default_store(config)
        self._guest = GuestSession.load_or_create(
            self._store,
            restaurant_slug=config.restaurant_slug,
            session_id=config.session_id,
        )
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._queue = PendingFeedbackQueue(self._store)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> OrderPulseClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._guest, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise OrderPulseError("Client not initialized. Use 'async with OrderPulseClient(...) as client:'")
        return self._transport

    @property
    def config(self) -> OrderPulseConfig:
        return self._config

    @property
    def store(self) -> PersistentKeyValueStore:
        return self._store

    @property
    def guest(self) -> GuestSession:
        return self._guest

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def list_active_orders(self) -> list[Order]:
        """Orders not yet in a terminal state."""
        return await _orders_api.fetch_active_orders(self._require_transport())

    async def list_recently_finished_orders(self) -> list[Order]:
        """Terminal orders inside the backend's recency window (24 hours)."""
        return await _orders_api.fetch_recently_finished_orders(self._require_transport())

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    async def submit_feedback(self, submission: FeedbackSubmission) -> FeedbackResult:
        """Submit feedback; queued locally if the backend lacks the endpoint."""
        return await _feedback_api.submit_feedback(self._require_transport(), submission, self._queue)

    async def submit_pending_feedbacks(self) -> PendingFlushResult:
        """Retry every locally queued submission."""
        result = await _feedback_api.flush_pending_feedback(self._require_transport(), self._queue)
        if result.submitted or result.failed:
            _logger.info(
                "Flushed pending feedback: %d submitted, %d failed, %d remaining",
                result.submitted,
                result.failed,
                result.remaining,
            )
        return result

    def pending_feedback_count(self) -> int:
        return len(self._queue)
