"""Field plans for dataclass targets, including the squash flattening pass.

A *field plan* maps every normalised input name a dataclass accepts to the
attribute path that receives it.  Squashed members contribute their own
fields at the parent's level, so the plan is built once per type by merging
those promoted fields into the parent's namespace.  The containing
structure's own fields win any name collision; among squashed members the
earlier declaration wins.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .errors import DecoderConfigError
from .naming import normalize_name

__all__ = ["FieldBinding", "NAME_KEY", "SQUASH_KEY", "field_plan", "squash", "squash_members"]

SQUASH_KEY = "squash"
NAME_KEY = "name"


def squash(
    factory: Callable[[], Any], *, metadata: Optional[Mapping[str, Any]] = None, **kwargs: Any
) -> Any:
    """Declare an embedded dataclass whose fields are matched at the parent level.

    Examples:
        >>> @dataclass
        ... class Retry:
        ...     max_retries: int = 3
        >>> @dataclass
        ... class Client:
        ...     retry: Retry = squash(Retry)
        ...     name: str = ""
    """

    merged = dict(metadata or {})
    merged[SQUASH_KEY] = True
    return dataclasses.field(default_factory=factory, metadata=merged, **kwargs)


@dataclass(frozen=True)
class FieldBinding:
    """Where a matched input value lands inside a (possibly squashed) dataclass."""

    key: str
    path: Tuple[str, ...]
    hint: Any
    containers: Tuple[type, ...] = ()

    @property
    def attribute(self) -> str:
        return self.path[-1]


def _resolve_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as exc:
        message = f"cannot resolve type hints for {cls.__qualname__}: {exc}"
        raise DecoderConfigError(message) from exc


def _collect(
    cls: type,
    prefix: Tuple[str, ...],
    containers: Tuple[type, ...],
    seen: Tuple[type, ...],
    plan: Dict[str, FieldBinding],
) -> None:
    if cls in seen:
        raise DecoderConfigError(f"squash cycle through {cls.__qualname__}")
    hints = _resolve_hints(cls)
    squashed = []
    for item in dataclasses.fields(cls):
        if item.name.startswith("_"):
            continue
        hint = hints.get(item.name, Any)
        if item.metadata.get(SQUASH_KEY):
            if not (isinstance(hint, type) and dataclasses.is_dataclass(hint)):
                raise DecoderConfigError(
                    f"{cls.__qualname__}.{item.name}: "
                    f"squash requires a dataclass type, got {hint!r}"
                )
            squashed.append((item.name, hint))
            continue
        key = str(item.metadata.get(NAME_KEY, item.name))
        plan.setdefault(
            normalize_name(key),
            FieldBinding(key=key, path=prefix + (item.name,), hint=hint, containers=containers),
        )
    for name, member in squashed:
        _collect(member, prefix + (name,), containers + (member,), seen + (cls,), plan)


@lru_cache(maxsize=256)
def field_plan(cls: type) -> Mapping[str, FieldBinding]:
    """Return the effective field set of dataclass ``cls`` keyed by normalised name.

    Raises:
        DecoderConfigError: If a squashed member is not a dataclass, squashing
            forms a cycle, or type hints cannot be resolved.
    """

    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise DecoderConfigError(f"{cls!r} is not a dataclass type")
    plan: Dict[str, FieldBinding] = {}
    _collect(cls, (), (), (), plan)
    return MappingProxyType(plan)


@lru_cache(maxsize=256)
def squash_members(cls: type) -> Mapping[str, type]:
    """Return the squashed members of dataclass ``cls`` keyed by attribute name."""

    hints = _resolve_hints(cls)
    return MappingProxyType(
        {
            item.name: hints[item.name]
            for item in dataclasses.fields(cls)
            if item.metadata.get(SQUASH_KEY)
        }
    )
