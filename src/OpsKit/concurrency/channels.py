"""Unbuffered hand-off channel used by background producers.

:class:`Channel` holds at most one pending element.  ``put`` blocks the
producer until a consumer takes the element or the channel is closed; closing
drops any element still waiting, so a consumer never receives an element after
``close`` has returned.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")

__all__ = ["Channel", "ChannelClosed"]

_EMPTY = object()


class ChannelClosed(Exception):
    """Raised by :meth:`Channel.get` once the channel is closed."""


class Channel(Generic[T]):
    """Capacity-one hand-off between a single producer and its consumers."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._slot: object = _EMPTY
        self._closed = False
        self._worker: Optional[threading.Thread] = None

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, item: T) -> bool:
        """Offer ``item`` and wait until it is taken.

        Returns:
            True if a consumer took the item, False once the channel is
            closed (a pending item is discarded).
        """
        with self._cond:
            # Only one producer writes, so the slot is always empty here.
            if self._closed:
                return False
            self._slot = item
            self._cond.notify_all()
            while self._slot is not _EMPTY and not self._closed:
                self._cond.wait()
            return not self._closed

    def get(self, timeout: Optional[float] = None) -> T:
        """Take the next element, blocking until one is offered.

        Raises:
            ChannelClosed: If the channel is closed, even when an element
                was pending at close time.
            TimeoutError: If ``timeout`` seconds pass without an element.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._slot is _EMPTY and not self._closed:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError("no element offered within timeout")
                self._cond.wait(remaining)
            if self._closed:
                raise ChannelClosed()
            item = self._slot
            self._slot = _EMPTY
            self._cond.notify_all()
            return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the channel and wake every waiter.  Idempotent."""
        with self._cond:
            self._closed = True
            self._slot = _EMPTY
            self._cond.notify_all()

    def start_producer(self, target: Callable[..., None], *args: Any, name: str) -> None:
        """Run ``target(*args)`` on a daemon thread that ``join`` waits for."""
        worker = threading.Thread(target=target, args=args, name=name, daemon=True)
        self._worker = worker
        worker.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the producer thread attached to this channel, if any.

        Returns:
            True if no producer is running when the call returns.
        """
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Channel({state})"
