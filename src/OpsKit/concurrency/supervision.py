"""Fault boundaries for background work.

:func:`on_panic` wraps one unit of work: an exception escaping the block is
logged with its traceback and suppressed so the surrounding loop keeps
running.  :func:`guarded` applies the same boundary to a function, and
:func:`run_worker_loop` drives a channel through a handler with one boundary
per item.  ``KeyboardInterrupt`` and ``SystemExit`` always propagate.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")

__all__ = ["guarded", "on_panic", "run_worker_loop"]


@contextmanager
def on_panic(logger: logging.Logger, **context: Any) -> Iterator[None]:
    """Suppress and log any exception raised inside the ``with`` block.

    Args:
        logger: Logger receiving the ``"caught panic, recovering"`` record.
        **context: Extra fields attached to the log record.

    Examples:
        >>> log = logging.getLogger("example")
        >>> with on_panic(log):
        ...     raise ValueError("boom")
        >>> # execution continues here
    """

    try:
        yield
    except Exception as exc:
        logger.error(
            "caught panic, recovering",
            exc_info=True,
            extra={"stage": "supervision", "extra_fields": {"err": repr(exc), **context}},
        )


def guarded(logger: logging.Logger) -> Callable[[Callable[..., R]], Callable[..., Optional[R]]]:
    """Decorate a task so that failures are logged and ``None`` is returned."""

    def decorator(func: Callable[..., R]) -> Callable[..., Optional[R]]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Optional[R]:
            with on_panic(logger, task=func.__qualname__):
                return func(*args, **kwargs)
            return None

        return wrapper

    return decorator


def run_worker_loop(
    items: Iterable[T],
    handler: Callable[[T], Any],
    logger: logging.Logger,
) -> int:
    """Run ``handler`` on every item until ``items`` is exhausted or closed.

    Each call runs behind :func:`on_panic`, so one failing item does not stop
    the loop.  Pass a :class:`~OpsKit.concurrency.channels.Channel` to keep
    consuming until its producer is cancelled.

    Returns:
        int: Number of items taken from ``items``.
    """

    processed = 0
    failures = 0
    for item in items:
        processed += 1
        succeeded = False
        with on_panic(logger, item=repr(item)):
            handler(item)
            succeeded = True
        if not succeeded:
            failures += 1
    logger.info(
        "worker loop finished",
        extra={
            "stage": "supervision",
            "extra_fields": {"processed": processed, "failures": failures},
        },
    )
    return processed
