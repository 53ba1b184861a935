"""
Pytest Configuration

Adds ``src`` to ``sys.path`` so the suite runs against the working tree, and
isolates the global state OpsKit keeps between tests: the memoised runtime
settings and the handlers installed on the ``OpsKit`` logger.

Usage:
    pytest tests/
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from OpsKit.settings import invalidate_settings_cache  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_opskit_state() -> Iterator[None]:
    """Reset cached settings and restore the ``OpsKit`` logger after each test."""

    logger = logging.getLogger("OpsKit")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    invalidate_settings_cache()
    try:
        yield
    finally:
        for handler in list(logger.handlers):
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(level)
        logger.propagate = propagate
        invalidate_settings_cache()
