"""Fixed-interval polling task that drives the feedback trigger engine."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from orderpulse.client import OrderPulseClient
from orderpulse.exceptions import TransientFetchError
from orderpulse.lifecycle.decider import FeedbackTriggerDecider, OrderSource
from orderpulse.lifecycle.eligibility import FeedbackEligibilityStore
from orderpulse.lifecycle.events import Decision, SinglePrompt

_logger = logging.getLogger(__name__)

DecisionCallback = Callable[[Decision], None]


class OrderWatcher:
    """Polls the active orders and forwards decisions to the presentation layer.

    A single task runs :meth:`run`; each cycle is awaited to completion
    before the next sleep, so cycles never overlap.  A failing cycle is
    logged and the loop reschedules.

    Usage::

        async with OrderPulseClient(config) as client:
            watcher = OrderWatcher.for_client(client, on_decision=render)
            async with watcher:
                ...
    """

    def __init__(
        self,
        source: OrderSource,
        decider: FeedbackTriggerDecider,
        *,
        poll_interval: float,
        on_decision: DecisionCallback | None = None,
    ) -> None:
        self._source = source
        self._decider = decider
        self._poll_interval = poll_interval
        self._on_decision = on_decision
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def for_client(
        cls,
        client: OrderPulseClient,
        *,
        on_decision: DecisionCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> OrderWatcher:
        """Wire a decider to *client* using the client's store and configuration."""
        config = client.config
        decider_kwargs: dict[str, Any] = {
            "feedback_delay": config.feedback_delay,
            "vanished_counts_as_finished": config.vanished_counts_as_finished,
        }
        if clock is not None:
            decider_kwargs["clock"] = clock
        decider = FeedbackTriggerDecider(FeedbackEligibilityStore(client.store), client, **decider_kwargs)
        return cls(client, decider, poll_interval=config.poll_interval, on_decision=on_decision)

    @property
    def decider(self) -> FeedbackTriggerDecider:
        return self._decider

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_once(self) -> Decision | None:
        """Run one cycle.  Returns ``None`` when nothing was decided."""
        try:
            active = await self._source.list_active_orders()
        except TransientFetchError as exc:
            _logger.warning("Active orders fetch failed; retrying next poll: %s", exc)
            return None

        decision = await self._decider.evaluate(active)
        if decision is not None:
            self._emit(decision)
        return decision

    async def run(self) -> None:
        """Poll forever; only cancellation stops the loop."""
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                _logger.exception("Poll cycle failed")
            await asyncio.sleep(self._poll_interval)

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(), name="orderpulse-watcher")
        return self._task

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> OrderWatcher:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Presentation callbacks
    # ------------------------------------------------------------------

    def _emit(self, decision: Decision) -> None:
        if self._on_decision is None:
            return
        try:
            self._on_decision(decision)
        except Exception:
            _logger.warning("on_decision callback failed", exc_info=True)

    def report_selected(self, order_id: int) -> SinglePrompt:
        decision = self._decider.select(order_id)
        self._emit(decision)
        return decision

    def report_submitted(self, order_id: int) -> Decision:
        decision = self._decider.report_submitted(order_id)
        self._emit(decision)
        return decision

    def report_closed(self) -> None:
        self._decider.report_closed()

    def clear_tracking(self) -> None:
        self._decider.clear_tracking()
