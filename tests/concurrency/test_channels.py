"""
Hand-off Channel Tests

Key Scenarios:
- ``put`` blocks until a consumer takes the element
- Closing wins over a pending element and wakes blocked producers
- Iteration stops cleanly at close

Usage:
    pytest tests/concurrency/test_channels.py
"""

import threading
import time

import pytest

from OpsKit.concurrency import Channel, ChannelClosed

# --- Test Cases ---


def test_put_waits_for_consumer() -> None:
    channel: Channel[int] = Channel()
    results = []

    def producer() -> None:
        results.append(channel.put(1))

    channel.start_producer(producer, name="test-producer")
    time.sleep(0.05)
    assert results == []

    assert channel.get(timeout=5.0) == 1
    assert channel.join(5.0)
    assert results == [True]


def test_close_discards_pending_element_and_releases_producer() -> None:
    channel: Channel[str] = Channel()
    results = []
    channel.start_producer(lambda: results.append(channel.put("late")), name="test-producer")
    time.sleep(0.05)

    channel.close()

    assert channel.join(5.0)
    assert results == [False]
    with pytest.raises(ChannelClosed):
        channel.get(timeout=0.1)


def test_put_after_close_returns_false() -> None:
    channel: Channel[int] = Channel()
    channel.close()
    channel.close()
    assert channel.closed
    assert channel.put(1) is False


def test_get_times_out_without_producer() -> None:
    channel: Channel[int] = Channel()
    with pytest.raises(TimeoutError):
        channel.get(timeout=0.05)


def test_close_wakes_blocked_consumer() -> None:
    channel: Channel[int] = Channel()
    threading.Timer(0.05, channel.close).start()
    with pytest.raises(ChannelClosed):
        channel.get(timeout=5.0)


def test_iteration_stops_at_close() -> None:
    channel: Channel[int] = Channel()

    def producer() -> None:
        for value in range(3):
            channel.put(value)
        channel.close()

    channel.start_producer(producer, name="test-producer")
    assert list(channel) == [0, 1, 2]
    assert channel.join(5.0)


def test_join_without_producer() -> None:
    assert Channel().join() is True
