# === NAVMAP v1 ===
# {
#   "module": "OpsKit.Config.coercion",
#   "purpose": "Weak scalar coercion table, duration parsing, and decode hooks",
#   "sections": [
#     {"id": "parse-duration", "name": "parse_duration", "anchor": "function-parse-duration", "kind": "function"},
#     {"id": "parse-bool", "name": "parse_bool", "anchor": "function-parse-bool", "kind": "function"},
#     {"id": "coerce-scalar", "name": "coerce_scalar", "anchor": "function-coerce-scalar", "kind": "function"},
#     {"id": "hooks", "name": "Decode Hooks", "anchor": "HKS", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Weak scalar coercion used by the structural decoder and the env getters.

Loosely typed documents routinely carry ``"8"`` where an integer is expected
or ``"30s"`` where a duration is meant.  The decoder resolves these through an
explicit table keyed by ``(source kind, target type)``; pairs missing from the
table fail closed with :class:`CoercionError` so that ambiguous or lossy
conversions are reported instead of guessed.

Decode hooks run before the table.  A hook receives the raw value and the
target type and returns either a converted value or the input unchanged.
"""

from __future__ import annotations

import re
from datetime import timedelta
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, Iterable, Sequence, Tuple

__all__ = [
    "CoercionError",
    "DecodeHook",
    "coerce_scalar",
    "compose_hooks",
    "kind_of",
    "parse_bool",
    "parse_duration",
    "string_to_timedelta_hook",
    "SCALAR_TARGETS",
    "DEFAULT_HOOKS",
]

DecodeHook = Callable[[Any, Any], Any]


class CoercionError(ValueError):
    """Raised when a value cannot be converted into the requested scalar type."""


_TRUE_STRINGS = frozenset({"1", "t", "true"})
_FALSE_STRINGS = frozenset({"0", "f", "false"})

_DURATION_UNITS: Dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration expression such as ``"2m30s"`` or ``"-1.5h"``.

    A bare ``"0"`` is accepted; every other value needs a unit on each
    component.  Sub-microsecond precision is rounded by :class:`timedelta`.

    Raises:
        CoercionError: If ``text`` is not a valid duration expression.
    """

    raw = str(text).strip()
    body = raw
    sign = 1.0
    if body[:1] in ("+", "-"):
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise CoercionError(f"invalid duration {raw!r}")

    total = 0.0
    position = 0
    while position < len(body):
        match = _DURATION_PART.match(body, position)
        if match is None:
            raise CoercionError(f"invalid duration {raw!r}")
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        position = match.end()
    try:
        return timedelta(seconds=sign * total)
    except (OverflowError, ValueError) as exc:
        raise CoercionError(f"duration {raw!r} is out of range") from exc


def parse_bool(text: str) -> bool:
    """Parse ``1/t/true`` and ``0/f/false`` in any letter case."""

    lowered = str(text).strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise CoercionError(f"invalid boolean {text!r}")


def kind_of(value: Any) -> str:
    """Classify ``value`` into the source kinds used by the coercion table."""

    if value is None:
        return "none"
    # bool is an int subclass; check it first.
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    if isinstance(value, timedelta):
        return "timedelta"
    if isinstance(value, PurePath):
        return "path"
    return type(value).__name__


def _str_to_int(value: str) -> int:
    text = value.strip()
    if not text:
        return 0
    try:
        return int(text, 0)
    except ValueError as exc:
        raise CoercionError(f"cannot parse {value!r} as int") from exc


def _str_to_float(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError as exc:
        raise CoercionError(f"cannot parse {value!r} as float") from exc


def _str_to_bool(value: str) -> bool:
    if not value.strip():
        return False
    return parse_bool(value)


def _float_to_int(value: float) -> int:
    if not value.is_integer():
        raise CoercionError(f"{value!r} has a fractional part")
    return int(value)


def _identity(value: Any) -> Any:
    return value


_COERCIONS: Dict[Tuple[str, type], Callable[[Any], Any]] = {
    ("str", str): _identity,
    ("int", str): str,
    ("float", str): str,
    ("bool", str): lambda value: "1" if value else "0",
    ("path", str): str,
    ("int", int): _identity,
    ("str", int): _str_to_int,
    ("float", int): _float_to_int,
    ("bool", int): int,
    ("float", float): _identity,
    ("int", float): float,
    ("str", float): _str_to_float,
    ("bool", float): float,
    ("bool", bool): _identity,
    ("str", bool): _str_to_bool,
    ("int", bool): bool,
    ("float", bool): bool,
    ("str", Path): Path,
    ("path", Path): Path,
    ("timedelta", timedelta): _identity,
    ("int", timedelta): lambda value: timedelta(seconds=value),
    ("float", timedelta): lambda value: timedelta(seconds=value),
}

SCALAR_TARGETS = frozenset(target for _kind, target in _COERCIONS)


def coerce_scalar(value: Any, target: type) -> Any:
    """Convert ``value`` to ``target`` using the weak coercion table.

    Raises:
        CoercionError: If the ``(kind, target)`` pair is not listed or the
            listed conversion rejects the value.
    """

    converter = _COERCIONS.get((kind_of(value), target))
    if converter is None:
        raise CoercionError(
            f"no conversion from {type(value).__name__!r} to {target.__name__!r}"
        )
    try:
        return converter(value)
    except CoercionError:
        raise
    except (ValueError, TypeError, OverflowError) as exc:
        raise CoercionError(str(exc)) from exc


def string_to_timedelta_hook(value: Any, target: Any) -> Any:
    """Decode hook turning duration strings into :class:`timedelta` values."""

    if target is timedelta and isinstance(value, str):
        return parse_duration(value)
    return value


def compose_hooks(hooks: Iterable[DecodeHook]) -> DecodeHook:
    """Chain ``hooks`` so that each receives the output of the previous one."""

    chain: Sequence[DecodeHook] = tuple(hooks)

    def _composed(value: Any, target: Any) -> Any:
        for hook in chain:
            value = hook(value, target)
        return value

    return _composed


DEFAULT_HOOKS: Tuple[DecodeHook, ...] = (string_to_timedelta_hook,)
