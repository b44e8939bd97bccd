"""Feedback trigger decision engine.

This is the only component allowed to mark an order as shown.  Each poll
cycle it folds the three finish signals (status transition, vanish from the
active list, time stuck in ``ready``) and, when nothing fired, a
reconciliation lookup into at most one decision.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Protocol

from orderpulse._constants import DEFAULT_FEEDBACK_DELAY
from orderpulse.exceptions import InvariantViolation, PersistenceError, TransientFetchError
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
from orderpulse.lifecycle.policy import is_in_progress, is_terminal
from orderpulse.lifecycle.ready_timer import ReadyTimer
from orderpulse.lifecycle.transitions import detect_transitions
from orderpulse.models.order import Order

_logger = logging.getLogger(__name__)

_PINNED_STATES = frozenset({DeciderState.SINGLE_PROMPT, DeciderState.MULTI_SELECT})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OrderSource(Protocol):
    """Read-only order queries the engine depends on."""

    async def list_active_orders(self) -> list[Order]:
        ...

    async def list_recently_finished_orders(self) -> list[Order]:
        ...


def _dedupe(candidates: Sequence[TriggerCandidate]) -> list[TriggerCandidate]:
    """Keep the first candidate per order id (callers pass them in priority order)."""
    seen: set[int] = set()
    unique: list[TriggerCandidate] = []
    for candidate in candidates:
        if candidate.order_id in seen:
            continue
        seen.add(candidate.order_id)
        unique.append(candidate)
    return unique


def _defer_time_based(pool: list[TriggerCandidate], active: Sequence[Order]) -> list[TriggerCandidate]:
    """Hold back a pool made only of time-based candidates while another order is in progress."""
    if not active or not pool:
        return pool
    if any(candidate.reason is not TriggerReason.TIME_BASED for candidate in pool):
        return pool
    timed_ids = {candidate.order_id for candidate in pool}
    blocking = [order.id for order in active if order.id not in timed_ids and is_in_progress(order.status)]
    if blocking:
        _logger.debug("Deferring time-based feedback for %s; orders %s still in progress", sorted(timed_ids), blocking)
        return []
    return pool


class FeedbackTriggerDecider:
    """Per-cycle state machine: ``IDLE -> EVALUATING -> {NO_ACTION, SINGLE_PROMPT, MULTI_SELECT}``.

    While a prompt is open (``SINGLE_PROMPT``/``MULTI_SELECT``) the decider is
    pinned: :meth:`evaluate` keeps history and timers current but returns
    ``None``.  Finish signals seen while pinned are held and offered once the
    presentation layer reports closure.

    Parameters
    ----------
    eligibility : FeedbackEligibilityStore
        Persisted shown-order ids.
    source : OrderSource
        Used for the reconciliation lookup and to resolve details of
        vanished orders recorded without them.
    feedback_delay : timedelta
        Time an order may stay ``ready`` before the fallback fires.
    vanished_counts_as_finished : bool
        Whether an unexplained disappearance from the active list is a finish.
    clock : callable
        Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        eligibility: FeedbackEligibilityStore,
        source: OrderSource,
        *,
        feedback_delay: timedelta = DEFAULT_FEEDBACK_DELAY,
        vanished_counts_as_finished: bool = True,
        history: StatusHistory | None = None,
        ready_timer: ReadyTimer | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._eligibility = eligibility
        self._source = source
        self._feedback_delay = feedback_delay
        self._vanished_counts_as_finished = vanished_counts_as_finished
        self._history = history if history is not None else StatusHistory()
        self._timer = ready_timer if ready_timer is not None else ReadyTimer()
        self._clock = clock
        self._state = DeciderState.IDLE
        self._held: dict[int, TriggerCandidate] = {}
        self._selection: list[TriggerCandidate] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> DeciderState:
        return self._state

    @property
    def is_pinned(self) -> bool:
        return self._state in _PINNED_STATES

    @property
    def history(self) -> StatusHistory:
        return self._history

    @property
    def ready_timer(self) -> ReadyTimer:
        return self._timer

    @property
    def eligibility(self) -> FeedbackEligibilityStore:
        return self._eligibility

    # ------------------------------------------------------------------
    # Poll cycle
    # ------------------------------------------------------------------

    async def evaluate(self, active: Sequence[Order], now: datetime | None = None) -> Decision | None:
        """Run one cycle against the fresh *active* snapshot.

        Returns ``None`` when a prompt is open, otherwise the decision.
        """
        if now is None:
            now = self._clock()
        pinned = self.is_pinned
        if not pinned:
            self._state = DeciderState.EVALUATING

        detected = detect_transitions(
            self._history,
            active,
            vanished_counts_as_finished=self._vanished_counts_as_finished,
        )
        for order in active:
            self._timer.observe(order.id, order.status, now)
        self._timer.prune(order.id for order in active)
        self._history = StatusHistory.from_orders(active)

        if pinned:
            for candidate in detected:
                self._held.setdefault(candidate.order_id, candidate)
            _logger.debug("Prompt open; holding %d finish candidates", len(self._held))
            return None

        active_by_id = {order.id: order for order in active}
        time_based = [
            TriggerCandidate(order_id=order_id, reason=TriggerReason.TIME_BASED, order=active_by_id.get(order_id))
            for order_id in self._timer.expired_ids(now, self._feedback_delay)
        ]
        held = list(self._held.values())
        self._held.clear()

        pool = [c for c in _dedupe([*held, *detected, *time_based]) if self._eligibility.is_eligible(c.order_id)]
        pool = _defer_time_based(pool, active)

        finished: list[Order] | None = None
        if not active and not pool:
            try:
                finished = await self._source.list_recently_finished_orders()
            except TransientFetchError as exc:
                _logger.warning("Reconciliation lookup failed; retrying next poll: %s", exc)
                return self._conclude(NoAction())
            pool = _dedupe(
                [
                    TriggerCandidate(order_id=order.id, reason=TriggerReason.RECONCILIATION, order=order)
                    for order in finished
                    if is_terminal(order.status) and self._eligibility.is_eligible(order.id)
                ]
            )
            if pool:
                _logger.debug("Reconciliation found %d unrated finished orders", len(pool))

        if any(candidate.order is None for candidate in pool) and finished is None:
            try:
                finished = await self._source.list_recently_finished_orders()
            except TransientFetchError as exc:
                # Keep one-shot candidates for the next poll instead of losing them.
                for candidate in pool:
                    if candidate.reason is not TriggerReason.TIME_BASED:
                        self._held.setdefault(candidate.order_id, candidate)
                _logger.warning("Could not resolve order details; retrying next poll: %s", exc)
                return self._conclude(NoAction())

        return self._decide(self._resolve(pool, finished or []))

    def _resolve(self, pool: list[TriggerCandidate], finished: Sequence[Order]) -> list[TriggerCandidate]:
        lookup = {order.id: order for order in finished}
        resolved: list[TriggerCandidate] = []
        for candidate in pool:
            try:
                resolved.append(self._require_details(candidate, lookup))
            except InvariantViolation as exc:
                _logger.warning("Dropping feedback candidate: %s", exc)
        return resolved

    @staticmethod
    def _require_details(candidate: TriggerCandidate, lookup: dict[int, Order]) -> TriggerCandidate:
        order = candidate.order if candidate.order is not None else lookup.get(candidate.order_id)
        if order is None:
            raise InvariantViolation(
                f"order {candidate.order_id} ({candidate.reason}) has no resolvable details",
                order_id=candidate.order_id,
            )
        if order.id != candidate.order_id:
            raise InvariantViolation(
                f"candidate {candidate.order_id} carries details of order {order.id}",
                order_id=candidate.order_id,
            )
        if candidate.order is order:
            return candidate
        return candidate.model_copy(update={"order": order})

    def _decide(self, pool: list[TriggerCandidate]) -> Decision:
        if not pool:
            return self._conclude(NoAction())

        if len(pool) == 1:
            return self._prompt(pool[0])

        self._selection = list(pool)
        self._state = DeciderState.MULTI_SELECT
        _logger.info("Offering feedback selection for orders %s", [c.order_id for c in pool])
        return MultiSelect(orders=[c.order for c in pool if c.order is not None])

    def _prompt(self, candidate: TriggerCandidate) -> SinglePrompt:
        assert candidate.order is not None  # noqa: S101
        self._mark_shown(candidate.order_id)
        self._state = DeciderState.SINGLE_PROMPT
        _logger.info("Prompting feedback for order %s (%s)", candidate.order_id, candidate.reason)
        return SinglePrompt(order=candidate.order, reason=candidate.reason)

    def _conclude(self, decision: NoAction) -> NoAction:
        self._state = DeciderState.NO_ACTION
        return decision

    def _mark_shown(self, order_id: int) -> None:
        try:
            self._eligibility.mark_shown(order_id)
        except PersistenceError:
            _logger.warning(
                "Could not persist feedback tracking for order %s; it may be offered again after a restart",
                order_id,
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Presentation callbacks
    # ------------------------------------------------------------------

    def select(self, order_id: int) -> SinglePrompt:
        """The guest picked *order_id* from the open selection.

        Also valid while a picked order's prompt is showing, so the guest can
        move between the orders of the selection.
        """
        if not self.is_pinned or not self._selection:
            raise ValueError(f"No order selection is open (state={self._state})")
        for candidate in self._selection:
            if candidate.order_id == order_id:
                return self._prompt(candidate)
        raise ValueError(f"Order {order_id} is not part of the open selection")

    def report_submitted(self, order_id: int) -> Decision:
        """Feedback for *order_id* was submitted; continue with what is left."""
        self._mark_shown(order_id)
        if not self.is_pinned:
            return NoAction()

        remaining = [c for c in self._selection if self._eligibility.is_eligible(c.order_id)]
        if len(remaining) > 1:
            self._selection = remaining
            self._state = DeciderState.MULTI_SELECT
            return MultiSelect(orders=[c.order for c in remaining if c.order is not None])

        self._selection = []
        if len(remaining) == 1:
            return self._prompt(remaining[0])

        self._state = DeciderState.IDLE
        return NoAction()

    def report_closed(self) -> None:
        """The prompt UI was dismissed; unpin the decider.

        Orders of the selection that were never picked stay eligible and are
        offered again on the next cycle.
        """
        for candidate in self._selection:
            if self._eligibility.is_eligible(candidate.order_id):
                self._held.setdefault(candidate.order_id, candidate)
        self._selection = []
        self._state = DeciderState.IDLE

    def clear_tracking(self) -> None:
        """Forget every shown order (maintenance/testing)."""
        self._eligibility.clear()
