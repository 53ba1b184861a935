"""Cooperative cancellation primitive shared by background producers and workers.

A :class:`CancellationToken` is a one-shot broadcast signal: any number of
threads may poll it, block on it, or register callbacks, and once cancelled it
stays cancelled.  Producers such as :func:`OpsKit.concurrency.cycle.infinite_range`
observe the token at their next hand-off instead of being interrupted, so
they can close their channels cleanly.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

__all__ = ["CancellationToken"]

logger = logging.getLogger("OpsKit.concurrency.cancellation")


class CancellationToken:
    """Thread-safe cancellation token for cooperative task cancellation.

    Examples:
        >>> token = CancellationToken()
        >>> # In a task
        >>> if token.is_cancelled():
        ...     pass  # exit gracefully
        >>> # From another thread
        >>> token.cancel()
        >>> token.cancel()  # idempotent
    """

    def __init__(self) -> None:
        """Initialize a new, uncancelled token."""
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    def cancel(self) -> None:
        """Signal cancellation and run registered callbacks exactly once.

        Calling ``cancel`` again has no effect.
        """
        with self._lock:
            if self._is_cancelled.is_set():
                return
            self._is_cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested.

        Returns:
            True if cancellation has been requested, False otherwise.
        """
        return self._is_cancelled.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the token is cancelled or ``timeout`` seconds elapse.

        Returns:
            True if the token is cancelled when the call returns.
        """
        return self._is_cancelled.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run on cancellation.

        Callbacks registered after cancellation run immediately in the calling
        thread.  Exceptions raised by callbacks are logged and do not prevent
        the remaining callbacks from running.
        """
        with self._lock:
            if not self._is_cancelled.is_set():
                self._callbacks.append(callback)
                return
        self._run_callback(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Unregister ``callback``; a no-op when it is not registered."""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("cancellation callback %r failed", callback)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled() else "active"
        return f"CancellationToken({state})"
# === NAVMAP v1 ===
# {
#   "module": "OpsKit.concurrency.cancellation",
#   "purpose": "Provide the cooperative cancellation token shared by producers and worker loops",
#   "sections": [
#     {"id": "token", "name": "CancellationToken", "anchor": "TOK", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
