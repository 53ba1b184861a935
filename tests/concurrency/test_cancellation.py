# === NAVMAP v1 ===
# {
#   "module": "tests.concurrency.test_cancellation",
#   "purpose": "Tests for the cooperative cancellation token.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Tests for the cooperative cancellation token."""

import logging
import threading

import pytest

from OpsKit.concurrency import CancellationToken


def test_cancel_is_idempotent_and_runs_callbacks_once() -> None:
    """Repeated ``cancel`` calls should not re-run callbacks."""

    token = CancellationToken()
    calls = []
    token.add_callback(lambda: calls.append("closed"))
    assert not token.is_cancelled()

    token.cancel()
    token.cancel()

    assert token.is_cancelled()
    assert calls == ["closed"]


def test_callback_added_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls = []
    token.add_callback(lambda: calls.append(1))
    assert calls == [1]


def test_failing_callback_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    token = CancellationToken()
    calls = []

    def broken() -> None:
        raise RuntimeError("boom")

    token.add_callback(broken)
    token.add_callback(lambda: calls.append("ok"))
    with caplog.at_level(logging.ERROR, logger="OpsKit.concurrency.cancellation"):
        token.cancel()

    assert calls == ["ok"]
    assert any("callback" in record.getMessage() for record in caplog.records)


def test_wait_returns_when_cancelled_from_another_thread() -> None:
    token = CancellationToken()
    assert token.wait(0.01) is False

    threading.Timer(0.05, token.cancel).start()
    assert token.wait(5.0) is True
    assert "cancelled" in repr(token)


def test_removed_callback_does_not_run() -> None:
    token = CancellationToken()
    calls = []

    def record() -> None:
        calls.append(1)

    token.add_callback(record)
    token.remove_callback(record)
    token.remove_callback(record)
    token.cancel()
    assert calls == []
