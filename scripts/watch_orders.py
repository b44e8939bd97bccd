#!/usr/bin/env python3
"""Watch a guest's orders and print feedback decisions as they happen.

Usage
-----
Set environment variables and run::

    export ORDERPULSE_BASE_URL="https://api.example.com"
    export ORDERPULSE_RESTAURANT_SLUG="pizzeria-roma"
    export ORDERPULSE_STATE_PATH="~/.orderpulse/state.json"
    python scripts/watch_orders.py watch

Commands::

    watch            Poll active orders and print every decision
    snapshot         Print active and recently finished orders once
    flush-feedback   Retry feedback queued while the endpoint was missing
    clear-tracking   Forget which orders were already offered feedback

Options::

    --interval SECONDS   Override the poll interval
    --once               (watch) run a single poll cycle and exit
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from orderpulse import (  # noqa: E402
    Decision,
    FeedbackEligibilityStore,
    MultiSelect,
    NoAction,
    OrderPulseClient,
    OrderPulseConfig,
    OrderPulseError,
    OrderWatcher,
    SinglePrompt,
)


def _describe(decision: Decision) -> str:
    if isinstance(decision, NoAction):
        return "no action"
    if isinstance(decision, SinglePrompt):
        order = decision.order
        return f"ask feedback for {order.order_number} ({decision.reason}, {len(order.items)} items)"
    if isinstance(decision, MultiSelect):
        numbers = ", ".join(order.order_number for order in decision.orders)
        return f"let guest choose among {numbers}"
    return repr(decision)


def _print_decision(decision: Decision) -> None:
    print(f"[decision] {_describe(decision)}", flush=True)


def _order_row(order: Any) -> dict[str, Any]:
    return {
        "id": order.id,
        "status": order.status.value,
        "items": len(order.items),
        "total": order.total_amount,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


async def _watch(client: OrderPulseClient, *, once: bool) -> None:
    watcher = OrderWatcher.for_client(client, on_decision=_print_decision)
    if once:
        await watcher.poll_once()
        return
    async with watcher:
        # The watcher task runs until interrupted.
        await asyncio.Event().wait()


async def _snapshot(client: OrderPulseClient) -> None:
    active = await client.list_active_orders()
    finished = await client.list_recently_finished_orders()
    print(
        json.dumps(
            {
                "active": [_order_row(order) for order in active],
                "recently_finished": [_order_row(order) for order in finished],
            },
            indent=2,
        )
    )


async def _flush(client: OrderPulseClient) -> None:
    print(f"{client.pending_feedback_count()} feedback item(s) queued")
    result = await client.submit_pending_feedbacks()
    print(f"submitted={result.submitted} failed={result.failed} remaining={result.remaining}")


async def run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    config = OrderPulseConfig.from_env(**overrides)

    if args.command == "clear-tracking":
        # No network needed; only the persisted store is touched.
        client = OrderPulseClient(config)
        FeedbackEligibilityStore(client.store).clear()
        print("feedback tracking cleared")
        return 0

    async with OrderPulseClient(config) as client:
        if args.command == "watch":
            await _watch(client, once=args.once)
        elif args.command == "snapshot":
            await _snapshot(client)
        elif args.command == "flush-feedback":
            await _flush(client)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch storefront orders and feedback decisions.")
    parser.add_argument(
        "command",
        choices=("watch", "snapshot", "flush-feedback", "clear-tracking"),
        help="What to do",
    )
    parser.add_argument("--interval", type=float, help="Poll interval in seconds")
    parser.add_argument("--once", action="store_true", help="Run a single poll cycle (watch only)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)
    except OrderPulseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
