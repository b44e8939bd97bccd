from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from orderpulse.config import OrderPulseConfig
from orderpulse.exceptions import OrderPulseConfigError

_ENV_KEYS = (
    "ORDERPULSE_BASE_URL",
    "ORDERPULSE_RESTAURANT_SLUG",
    "ORDERPULSE_SESSION_ID",
    "ORDERPULSE_REQUEST_TIMEOUT",
    "ORDERPULSE_POLL_INTERVAL",
    "ORDERPULSE_FEEDBACK_DELAY_MINUTES",
    "ORDERPULSE_STATE_PATH",
    "ORDERPULSE_VANISHED_COUNTS_AS_FINISHED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = OrderPulseConfig()
    assert config.base_url == "http://localhost:5000"
    assert config.poll_interval == 10.0
    assert config.feedback_delay == timedelta(minutes=15)
    assert config.state_path is None
    assert config.vanished_counts_as_finished is True


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERPULSE_BASE_URL", "https://shop.example.com/")
    monkeypatch.setenv("ORDERPULSE_RESTAURANT_SLUG", "pizzeria-roma")
    monkeypatch.setenv("ORDERPULSE_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("ORDERPULSE_FEEDBACK_DELAY_MINUTES", "1")
    monkeypatch.setenv("ORDERPULSE_STATE_PATH", "/tmp/orderpulse.json")
    monkeypatch.setenv("ORDERPULSE_VANISHED_COUNTS_AS_FINISHED", "no")

    config = OrderPulseConfig.from_env()

    assert config.base_url == "https://shop.example.com"
    assert config.restaurant_slug == "pizzeria-roma"
    assert config.poll_interval == 2.5
    assert config.feedback_delay == timedelta(minutes=1)
    assert config.state_path == Path("/tmp/orderpulse.json")
    assert config.vanished_counts_as_finished is False


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERPULSE_POLL_INTERVAL", "not-a-number")
    monkeypatch.setenv("ORDERPULSE_RESTAURANT_SLUG", "from-env")

    config = OrderPulseConfig.from_env(poll_interval=3.0, restaurant_slug="explicit")

    assert config.poll_interval == 3.0
    assert config.restaurant_slug == "explicit"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("ORDERPULSE_POLL_INTERVAL", "fast"),
        ("ORDERPULSE_REQUEST_TIMEOUT", "-1"),
        ("ORDERPULSE_VANISHED_COUNTS_AS_FINISHED", "maybe"),
        ("ORDERPULSE_POLL_INTERVAL", "0"),
    ],
)
def test_invalid_env_raises(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(OrderPulseConfigError):
        OrderPulseConfig.from_env()


def test_negative_delay_rejected() -> None:
    with pytest.raises(OrderPulseConfigError):
        OrderPulseConfig(feedback_delay=timedelta(minutes=-1))
