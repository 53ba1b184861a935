"""Cyclic producer that repeats a fixed sequence until cancelled.

:func:`infinite_range` snapshots the input, starts one daemon thread that
offers the elements over a :class:`~OpsKit.concurrency.channels.Channel` in
order, wrapping to the first element after the last, and closes the channel
when the cancellation token fires.  Cancellation wins any race with a
consumer: the token closes the channel directly, so an element still waiting
in the hand-off is dropped.  A stopped producer unregisters its callback, so a
long-lived token does not accumulate callbacks for channels closed directly.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence, TypeVar

from .cancellation import CancellationToken
from .channels import Channel

T = TypeVar("T")

__all__ = ["infinite_range"]

logger = logging.getLogger("OpsKit.concurrency.cycle")


def _produce(token: CancellationToken, items: Sequence[T], channel: Channel[T]) -> None:
    delivered = 0
    try:
        while not token.is_cancelled():
            for item in items:
                if not channel.put(item):
                    return
                delivered += 1
    finally:
        token.remove_callback(channel.close)
        channel.close()
        logger.debug(
            "cyclic producer stopped",
            extra={"stage": "cycle", "extra_fields": {"delivered": delivered}},
        )


def infinite_range(token: CancellationToken, items: Iterable[T]) -> Channel[T]:
    """Return a channel yielding ``items`` cyclically until ``token`` is cancelled.

    Args:
        token: Cancellation signal; cancelling it closes the returned channel.
        items: Finite ordered elements.  An empty input yields a channel that
            is already closed.

    Returns:
        Channel[T]: Channel to consume from; ``join()`` waits for the producer.

    Examples:
        >>> token = CancellationToken()
        >>> channel = infinite_range(token, "ABC")
        >>> [channel.get() for _ in range(4)]
        ['A', 'B', 'C', 'A']
        >>> token.cancel()
        >>> channel.join(1.0)
        True
    """

    snapshot = tuple(items)
    channel: Channel[T] = Channel()
    if not snapshot:
        channel.close()
        return channel

    token.add_callback(channel.close)
    channel.start_producer(_produce, token, snapshot, channel, name="opskit-cycle")
    return channel
