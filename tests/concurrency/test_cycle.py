"""
Cyclic Producer Tests

Key Scenarios:
- Elements repeat in input order, wrapping after the last
- Cancellation closes the channel and stops the producer
- Empty input yields an already closed channel

Usage:
    pytest tests/concurrency/test_cycle.py
"""

import threading

import pytest

from OpsKit.concurrency import CancellationToken, ChannelClosed, infinite_range

# --- Test Cases ---


def test_elements_repeat_in_order() -> None:
    token = CancellationToken()
    channel = infinite_range(token, ["A", "B", "C"])
    try:
        taken = [channel.get(timeout=5.0) for _ in range(7)]
    finally:
        token.cancel()
    assert taken == ["A", "B", "C", "A", "B", "C", "A"]
    assert channel.join(5.0)


def test_single_element_repeats() -> None:
    token = CancellationToken()
    channel = infinite_range(token, [42])
    try:
        assert [channel.get(timeout=5.0) for _ in range(3)] == [42, 42, 42]
    finally:
        token.cancel()


def test_cancel_closes_channel_and_drops_pending_element() -> None:
    token = CancellationToken()
    channel = infinite_range(token, ["A", "B"])
    assert channel.get(timeout=5.0) == "A"

    token.cancel()

    with pytest.raises(ChannelClosed):
        channel.get(timeout=5.0)
    assert channel.join(5.0)
    assert channel.closed


def test_cancel_before_first_read() -> None:
    token = CancellationToken()
    channel = infinite_range(token, range(3))
    token.cancel()
    token.cancel()
    assert list(channel) == []
    assert channel.join(5.0)


def test_already_cancelled_token_yields_closed_channel() -> None:
    token = CancellationToken()
    token.cancel()
    channel = infinite_range(token, "xyz")
    assert channel.closed
    assert channel.join(5.0)


def test_empty_input_closes_immediately() -> None:
    token = CancellationToken()
    channel = infinite_range(token, [])
    assert channel.closed
    assert channel.join(0)
    with pytest.raises(ChannelClosed):
        channel.get(timeout=0.1)


def test_input_is_snapshotted() -> None:
    token = CancellationToken()
    items = ["A", "B"]
    channel = infinite_range(token, items)
    items.append("C")
    try:
        assert [channel.get(timeout=5.0) for _ in range(3)] == ["A", "B", "A"]
    finally:
        token.cancel()


def test_concurrent_consumers_share_one_sequence() -> None:
    token = CancellationToken()
    channel = infinite_range(token, range(4))
    taken = []
    lock = threading.Lock()

    def consume() -> None:
        for _ in range(10):
            value = channel.get(timeout=5.0)
            with lock:
                taken.append(value)

    workers = [threading.Thread(target=consume) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(5.0)
    token.cancel()

    assert len(taken) == 20
    assert sorted(taken) == sorted(list(range(4)) * 5)
    assert channel.join(5.0)


def test_closing_channel_directly_releases_token_callback() -> None:
    token = CancellationToken()
    channels = [infinite_range(token, "ab") for _ in range(5)]
    for channel in channels:
        channel.close()
        assert channel.join(5.0)

    assert token._callbacks == []
    assert not token.is_cancelled()
