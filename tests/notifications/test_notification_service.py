from __future__ import annotations

import logging

from hostel_system.notifications.service import NotificationService


def test_send_logs_and_returns_receipt(caplog):
    svc = NotificationService()
    with caplog.at_level(logging.INFO, logger="hostel_system.notifications.service"):
        receipt = svc.send(to="user:3", subject="Hello", message="Body", type="test")

    assert receipt.success
    assert receipt.to == "user:3"
    assert receipt.sent_at is not None
    assert "test to user:3" in caplog.text


def test_transport_failure_is_reported_not_raised():
    def broken(to, subject, message, type):
        raise ConnectionError("smtp down")

    receipt = NotificationService(transport=broken).send(to="x", subject="s", message="m", type="t")

    assert not receipt.success
    assert receipt.error == "smtp down"


def test_transport_receives_message():
    sent = []
    NotificationService(transport=lambda *args: sent.append(args)).send(to="a", subject="b", message="c", type="d")

    assert sent == [("a", "b", "c", "d")]
