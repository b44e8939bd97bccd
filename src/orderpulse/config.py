"""Client configuration for orderpulse."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from pathlib import Path
from typing import Any

from orderpulse._constants import (
    BASE_URL,
    DEFAULT_FEEDBACK_DELAY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)
from orderpulse.exceptions import OrderPulseConfigError


def _env_bool(name: str, value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise OrderPulseConfigError(f"{name} must be a boolean, got {value!r}")


def _env_float(name: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise OrderPulseConfigError(f"{name} must be a number, got {value!r}") from exc
    if parsed < 0:
        raise OrderPulseConfigError(f"{name} must not be negative, got {value!r}")
    return parsed


@dataclasses.dataclass(frozen=True)
class OrderPulseConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Storefront API base URL, without a trailing slash.
    restaurant_slug : str or None
        Restaurant identifier sent as ``X-Restaurant-Slug``.  The backend
        scopes every public order query to this restaurant.
    session_id : str or None
        Guest session id sent as ``X-Session-Id``.  When ``None`` the client
        loads (or generates and persists) one from its key-value store.
    request_timeout : float
        Total per-request timeout in seconds.
    poll_interval : float
        Seconds between two poll cycles of :class:`~orderpulse.watcher.OrderWatcher`.
    feedback_delay : timedelta
        How long an order may sit in ``ready`` before the time-based
        feedback fallback fires.
    state_path : Path or None
        JSON file backing the persisted feedback tracking.  ``None`` keeps
        everything in memory.
    vanished_counts_as_finished : bool
        Whether an order that leaves the active list without a terminal
        status is treated as finished.  The backend has no distinct
        cancellation signal on the public endpoints, so a cancelled order
        is indistinguishable from a delivered one unless it was observed in
        ``cancelled`` first.
    """

    base_url: str = BASE_URL
    restaurant_slug: str | None = None
    session_id: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    feedback_delay: timedelta = DEFAULT_FEEDBACK_DELAY
    state_path: Path | None = None
    vanished_counts_as_finished: bool = True

    def __post_init__(self) -> None:
        if not self.base_url:
            raise OrderPulseConfigError("base_url must be non-empty")
        if self.poll_interval <= 0:
            raise OrderPulseConfigError("poll_interval must be positive")
        if self.feedback_delay < timedelta(0):
            raise OrderPulseConfigError("feedback_delay must not be negative")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> OrderPulseConfig:
        """Create configuration from environment variables.

        Reads ``ORDERPULSE_*`` variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        OrderPulseConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "ORDERPULSE_BASE_URL": "base_url",
            "ORDERPULSE_RESTAURANT_SLUG": "restaurant_slug",
            "ORDERPULSE_SESSION_ID": "session_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("ORDERPULSE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("ORDERPULSE_REQUEST_TIMEOUT", timeout_env)

        interval_env = env.get("ORDERPULSE_POLL_INTERVAL")
        if interval_env is not None and "poll_interval" not in overrides:
            config_kwargs["poll_interval"] = _env_float("ORDERPULSE_POLL_INTERVAL", interval_env)

        # Minutes, matching how the storefront describes the delay.
        delay_env = env.get("ORDERPULSE_FEEDBACK_DELAY_MINUTES")
        if delay_env is not None and "feedback_delay" not in overrides:
            config_kwargs["feedback_delay"] = timedelta(
                minutes=_env_float("ORDERPULSE_FEEDBACK_DELAY_MINUTES", delay_env)
            )

        path_env = env.get("ORDERPULSE_STATE_PATH")
        if path_env and "state_path" not in overrides:
            config_kwargs["state_path"] = Path(path_env).expanduser()

        if "vanished_counts_as_finished" not in overrides:
            config_kwargs["vanished_counts_as_finished"] = _env_bool(
                "ORDERPULSE_VANISHED_COUNTS_AS_FINISHED",
                env.get("ORDERPULSE_VANISHED_COUNTS_AS_FINISHED"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
