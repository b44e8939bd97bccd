from __future__ import annotations

from orderpulse._redact import mask_value, redact_for_log


def test_redact_for_log_masks_guest_details() -> None:
    payload = {
        "order_id": 5,
        "customer_name": "Ana Souza",
        "customer_email": "ana@example.com",
        "nested": {"sessionId": "session_1772388000000_abc123xyz"},
        "items": [{"customerPhone": "+5511999990000"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["order_id"] == 5
    assert redacted["customer_name"] == "<redacted>"
    assert redacted["customer_email"] == "a***@example.com"
    assert redacted["nested"]["sessionId"] == "se***yz"
    assert redacted["items"][0]["customerPhone"] == "+5***00"


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"feedback_text": "x" * 600}, max_string=10)
    assert redacted["feedback_text"].startswith("x" * 10)
    assert "<truncated>" in redacted["feedback_text"]


def test_mask_value_short_values() -> None:
    assert mask_value("") == ""
    assert mask_value("abcd") == "***"
