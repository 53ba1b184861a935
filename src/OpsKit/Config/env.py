"""Environment variable lookups with typed defaults.

Every getter returns its ``default`` when the variable is unset or cannot be
parsed as the requested type; parse failures are logged at DEBUG and never
raised, keeping startup best-effort.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import Callable, Optional, TypeVar

from .coercion import parse_bool, parse_duration

T = TypeVar("T")

__all__ = [
    "get_env_bool",
    "get_env_duration",
    "get_env_float",
    "get_env_int",
    "get_env_str",
    "non_none_or_default",
]

logger = logging.getLogger("OpsKit.Config.env")


def _read_env(key: str, default: T, parse: Callable[[str], T]) -> T:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return parse(raw)
    except (ValueError, OverflowError):
        logger.debug(
            "Ignoring unparsable environment value for %s", key, extra={"stage": "config"}
        )
        return default


def get_env_str(key: str, default: str) -> str:
    """Return ``$key`` verbatim (an empty value counts as set) or ``default``."""

    value = os.environ.get(key)
    if value is None:
        return default
    return value


def get_env_int(key: str, default: int) -> int:
    return _read_env(key, default, lambda raw: int(raw.strip()))


def get_env_float(key: str, default: float) -> float:
    return _read_env(key, default, lambda raw: float(raw.strip()))


def get_env_bool(key: str, default: bool) -> bool:
    """Return ``$key`` parsed as ``1/t/true`` or ``0/f/false`` (any case)."""

    return _read_env(key, default, parse_bool)


def get_env_duration(key: str, default: timedelta) -> timedelta:
    """Return ``$key`` parsed as a duration such as ``"90s"`` or ``"1h30m"``."""

    return _read_env(key, default, parse_duration)


def non_none_or_default(value: Optional[T], default: T) -> T:
    """Return ``value`` unless it is ``None``."""

    if value is not None:
        return value
    return default
