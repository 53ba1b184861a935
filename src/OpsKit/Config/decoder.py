# === NAVMAP v1 ===
# {
#   "module": "OpsKit.Config.decoder",
#   "purpose": "Decode loosely typed document trees into dataclass instances",
#   "sections": [
#     {"id": "decoderconfig", "name": "DecoderConfig", "anchor": "class-decoderconfig", "kind": "class"},
#     {"id": "decoder", "name": "Decoder", "anchor": "class-decoder", "kind": "class"},
#     {"id": "decode", "name": "decode", "anchor": "function-decode", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Structural decoder mapping parsed configuration trees onto dataclasses.

The decoder walks the declared fields of a dataclass target (its *field
plan*, see :mod:`OpsKit.Config.fields`) and fills each one from the input
key whose normalised name matches.  Values pass through the configured decode
hooks and then through the weak coercion table, so ``{"MAX_RETRIES": "5",
"timeout": "2m30s"}`` decodes into ``max_retries: int`` and ``timeout:
timedelta`` fields without extra glue.

Failures never stop the walk: every field that cannot be converted is
recorded and the full list is raised as a single :class:`DecodeError` once
the walk finishes.  Fields that decoded successfully keep their new values;
fields that failed, or whose key is absent, keep their previous values.

When two input keys normalise to the same name the later key in the
mapping's iteration order wins.
"""

from __future__ import annotations

import collections.abc
import copy
import dataclasses
import logging
import types
import typing
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from .coercion import (
    DEFAULT_HOOKS,
    SCALAR_TARGETS,
    CoercionError,
    DecodeHook,
    coerce_scalar,
    compose_hooks,
    kind_of,
)
from .errors import DecodeError, DecoderConfigError, InvalidTargetError
from .fields import FieldBinding, field_plan, squash_members
from .naming import normalize_name

__all__ = ["Decoder", "DecoderConfig", "decode"]

logger = logging.getLogger("OpsKit.Config.decoder")

_UNSET = object()

_LIST_ORIGINS = {
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
}
_SET_ORIGINS = {set, frozenset, collections.abc.Set, collections.abc.MutableSet}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}
_UNION_ORIGINS = {typing.Union, types.UnionType}

# Conversions still allowed when weakly typed input is disabled.
_STRICT_PAIRS = {
    ("str", str),
    ("int", int),
    ("float", int),
    ("int", float),
    ("float", float),
    ("bool", bool),
    ("timedelta", timedelta),
    ("str", Path),
    ("path", Path),
}


@dataclass(frozen=True)
class DecoderConfig:
    """Options controlling a :class:`Decoder`.

    Attributes:
        hooks: Decode hooks applied in order to every value before coercion.
        weakly_typed_input: When ``False`` only exact type matches are
            accepted and scalars are not lifted into sequences.
    """

    hooks: Sequence[DecodeHook] = DEFAULT_HOOKS
    weakly_typed_input: bool = True


def _type_name(hint: Any) -> str:
    if isinstance(hint, type):
        return hint.__name__
    return str(hint).replace("typing.", "")


def _is_dataclass_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


def _is_frozen(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def _as_mapping(value: Any) -> Optional[Mapping[Any, Any]]:
    if isinstance(value, Mapping):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {item.name: getattr(value, item.name) for item in dataclasses.fields(value)}
    return None


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


class Decoder:
    """Reusable decoder bound to a :class:`DecoderConfig`.

    Instances hold no per-call state, so one decoder may be shared across
    threads.

    Examples:
        >>> @dataclass
        ... class Limits:
        ...     max_retries: int = 0
        >>> limits = Limits()
        >>> Decoder().decode({"Max-Retries": "4"}, limits)
        >>> limits.max_retries
        4
    """

    def __init__(self, config: Optional[DecoderConfig] = None) -> None:
        self.config = config or DecoderConfig()
        hooks = tuple(self.config.hooks)
        for hook in hooks:
            if not callable(hook):
                raise DecoderConfigError(f"decode hook {hook!r} is not callable")
        self._hook = compose_hooks(hooks)
        self._weak = self.config.weakly_typed_input

    def decode(self, data: Any, output: Any) -> None:
        """Populate ``output`` in place from ``data``.

        Args:
            data: Parsed document tree, usually a mapping.
            output: Dataclass instance or mutable mapping to write into.

        Raises:
            InvalidTargetError: If ``output`` cannot be written into.
            DecoderConfigError: If the target's field plan cannot be built.
            DecodeError: If one or more fields could not be converted.
        """

        errors: List[str] = []
        if dataclasses.is_dataclass(output) and not isinstance(output, type):
            if _is_frozen(type(output)):
                raise InvalidTargetError(
                    f"result must be writable, {type(output).__qualname__} is frozen"
                )
            field_plan(type(output))
            self._decode_struct(data, output, "", errors)
        elif isinstance(output, MutableMapping):
            self._decode_into_mapping(data, output, errors)
        else:
            raise InvalidTargetError(
                "result must be a dataclass instance or a mutable mapping, "
                f"got {type(output).__name__}"
            )

        if errors:
            logger.debug(
                "decode into %s failed",
                type(output).__name__,
                extra={"stage": "decode", "extra_fields": {"error_count": len(errors)}},
            )
            raise DecodeError.from_errors(errors)

    # --- structures ---

    @staticmethod
    def _index(data: Mapping[Any, Any]) -> Dict[str, Any]:
        index: Dict[str, Any] = {}
        for key, value in data.items():
            index[normalize_name(key)] = value
        return index

    def _decode_into_mapping(
        self, data: Any, output: MutableMapping[Any, Any], errors: List[str]
    ) -> None:
        if data is None:
            return
        source = _as_mapping(data)
        if source is None:
            errors.append(f"'' expected a map, got '{type(data).__name__}'")
            return
        output.update(source)

    def _decode_struct(self, data: Any, instance: Any, prefix: str, errors: List[str]) -> None:
        if data is None:
            return
        source = _as_mapping(data)
        if source is None:
            errors.append(f"'{prefix}' expected a map, got '{type(data).__name__}'")
            return
        index = self._index(source)
        for normalized, binding in field_plan(type(instance)).items():
            if normalized not in index:
                continue
            name = _join(prefix, binding.key)
            current = self._current(instance, binding)
            result = self._decode_value(index[normalized], binding.hint, current, name, errors)
            if result is not _UNSET:
                self._assign(instance, binding.path, binding.containers, result, name, errors)

    @staticmethod
    def _current(instance: Any, binding: FieldBinding) -> Any:
        holder = instance
        for attribute, container in zip(binding.path[:-1], binding.containers):
            holder = getattr(holder, attribute, None)
            if not isinstance(holder, container):
                return None
        return getattr(holder, binding.attribute, None)

    def _assign(
        self,
        holder: Any,
        path: Tuple[str, ...],
        containers: Tuple[type, ...],
        value: Any,
        name: str,
        errors: List[str],
    ) -> Any:
        """Write ``value`` at ``path`` below ``holder`` and return the updated holder.

        Frozen holders are replaced through :func:`dataclasses.replace` rather
        than mutated, so the caller receives a new object in that case.
        Missing squashed members are constructed on the way down.
        """

        attribute = path[0]
        if len(path) > 1:
            container = containers[0]
            member = getattr(holder, attribute, None)
            if not isinstance(member, container):
                try:
                    member = container()
                except TypeError as exc:
                    errors.append(f"'{name}': cannot construct {container.__qualname__}: {exc}")
                    return _UNSET
            value = self._assign(member, path[1:], containers[1:], value, name, errors)
            if value is _UNSET:
                return _UNSET
            if getattr(holder, attribute, None) is value:
                return holder
        if _is_frozen(type(holder)):
            try:
                return dataclasses.replace(holder, **{attribute: value})
            except (TypeError, ValueError) as exc:
                errors.append(f"'{name}': cannot rebuild {type(holder).__qualname__}: {exc}")
                return _UNSET
        setattr(holder, attribute, value)
        return holder

    def _build_struct(
        self, data: Any, cls: type, name: str, errors: List[str], base: Any = None
    ) -> Any:
        source = _as_mapping(data)
        if source is None:
            errors.append(f"'{name}' expected a map, got '{type(data).__name__}'")
            return _UNSET
        index = self._index(source)
        values: Dict[Tuple[str, ...], Any] = {}
        failed = len(errors)
        for normalized, binding in field_plan(cls).items():
            if normalized not in index:
                continue
            # A failed rebuild must leave the previous value untouched.
            current = None if base is None else copy.deepcopy(self._current(base, binding))
            result = self._decode_value(
                index[normalized], binding.hint, current, _join(name, binding.key), errors
            )
            if result is not _UNSET:
                values[binding.path] = result
        if len(errors) > failed:
            return _UNSET
        return self._construct(cls, (), values, name, errors, base)

    def _construct(
        self,
        cls: type,
        prefix: Tuple[str, ...],
        values: Mapping[Tuple[str, ...], Any],
        name: str,
        errors: List[str],
        base: Any = None,
    ) -> Any:
        # Fields absent from ``values`` are copied from ``base`` when one is given.
        members = squash_members(cls)
        kwargs: Dict[str, Any] = {}
        for item in dataclasses.fields(cls):
            if not item.init:
                continue
            path = prefix + (item.name,)
            if item.name in members:
                member_base = getattr(base, item.name, None)
                if not isinstance(member_base, members[item.name]):
                    member_base = None
                if any(key[: len(path)] == path for key in values):
                    member = self._construct(
                        members[item.name], path, values, name, errors, member_base
                    )
                    if member is _UNSET:
                        return _UNSET
                    kwargs[item.name] = member
                elif member_base is not None:
                    kwargs[item.name] = member_base
            elif path in values:
                kwargs[item.name] = values[path]
            elif base is not None and hasattr(base, item.name):
                kwargs[item.name] = getattr(base, item.name)
        try:
            return cls(**kwargs)
        except TypeError as exc:
            errors.append(f"'{name}': cannot construct {cls.__qualname__}: {exc}")
            return _UNSET

    # --- values ---

    def _mismatch(self, name: str, hint: Any, value: Any, detail: Optional[str] = None) -> str:
        message = (
            f"'{name}' expected type '{_type_name(hint)}', "
            f"got unconvertible type '{type(value).__name__}', value: '{value}'"
        )
        if detail:
            message += f" ({detail})"
        return message

    def _decode_value(
        self, value: Any, hint: Any, current: Any, name: str, errors: List[str]
    ) -> Any:
        try:
            value = self._hook(value, hint)
        except (ValueError, TypeError, OverflowError) as exc:
            errors.append(f"'{name}': decode hook failed: {exc}")
            return _UNSET

        if hint is Any or hint is object:
            return value

        origin = typing.get_origin(hint)
        args = typing.get_args(hint)

        if origin in _UNION_ORIGINS:
            return self._decode_union(value, args, current, name, errors)
        if value is None:
            return _UNSET
        if origin is typing.Literal:
            if value in args:
                return value
            errors.append(self._mismatch(name, hint, value))
            return _UNSET
        if _is_dataclass_type(hint):
            if isinstance(current, hint) and not _is_frozen(hint):
                before = len(errors)
                self._decode_struct(value, current, name, errors)
                return current if len(errors) == before else _UNSET
            base = current if isinstance(current, hint) else None
            return self._build_struct(value, hint, name, errors, base)
        if isinstance(hint, type) and issubclass(hint, Enum):
            return self._decode_enum(value, hint, name, errors)
        if origin in _LIST_ORIGINS or hint in _LIST_ORIGINS:
            return self._decode_sequence(value, list, args[:1], name, errors)
        if origin in _SET_ORIGINS or hint in _SET_ORIGINS:
            container = frozenset if (origin or hint) is frozenset else set
            return self._decode_sequence(value, container, args[:1], name, errors)
        if origin is tuple or hint is tuple:
            return self._decode_tuple(value, args, name, errors)
        if origin in _MAPPING_ORIGINS or hint in _MAPPING_ORIGINS:
            return self._decode_dict(value, args, current, name, errors)
        if hint in SCALAR_TARGETS:
            return self._decode_scalar(value, hint, name, errors)
        if isinstance(hint, type) and isinstance(value, hint):
            return value
        errors.append(self._mismatch(name, hint, value, "unsupported target type"))
        return _UNSET

    def _decode_union(
        self, value: Any, args: Tuple[Any, ...], current: Any, name: str, errors: List[str]
    ) -> Any:
        candidates = [arg for arg in args if arg is not type(None)]
        if value is None:
            return None if len(candidates) < len(args) else _UNSET
        if len(candidates) == 1:
            return self._decode_value(value, candidates[0], current, name, errors)
        for candidate in candidates:
            if isinstance(candidate, type) and type(value) is candidate:
                return value
        for candidate in candidates:
            scratch: List[str] = []
            result = self._decode_value(value, candidate, current, name, scratch)
            if not scratch and result is not _UNSET:
                return result
        errors.append(self._mismatch(name, typing.Union[tuple(args)], value))
        return _UNSET

    def _decode_scalar(self, value: Any, hint: type, name: str, errors: List[str]) -> Any:
        if not self._weak and (kind_of(value), hint) not in _STRICT_PAIRS:
            errors.append(self._mismatch(name, hint, value, "weakly typed input is disabled"))
            return _UNSET
        try:
            return coerce_scalar(value, hint)
        except CoercionError as exc:
            errors.append(self._mismatch(name, hint, value, str(exc)))
            return _UNSET

    def _decode_enum(self, value: Any, hint: type, name: str, errors: List[str]) -> Any:
        if isinstance(value, hint):
            return value
        try:
            return hint(value)
        except ValueError:
            pass
        if isinstance(value, str):
            wanted = normalize_name(value)
            for member in hint:  # type: ignore[attr-defined]
                if normalize_name(member.name) == wanted:
                    return member
            if self._weak and issubclass(hint, int):
                try:
                    return hint(coerce_scalar(value, int))
                except (CoercionError, ValueError):
                    pass
        errors.append(self._mismatch(name, hint, value))
        return _UNSET

    def _items(self, value: Any, hint: Any, name: str, errors: List[str]) -> Optional[List[Any]]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        if self._weak and not isinstance(value, Mapping):
            return [value]
        errors.append(self._mismatch(name, hint, value, "expected a sequence"))
        return None

    def _decode_elements(
        self, items: Sequence[Any], hints: Sequence[Any], name: str, errors: List[str]
    ) -> Any:
        results: List[Any] = []
        before = len(errors)
        for position, (item, hint) in enumerate(zip(items, hints)):
            element_name = f"{name}[{position}]"
            if item is None and not self._accepts_none(hint):
                errors.append(f"'{element_name}' expected type '{_type_name(hint)}', got None")
                continue
            result = self._decode_value(item, hint, None, element_name, errors)
            results.append(None if result is _UNSET else result)
        if len(errors) > before:
            return _UNSET
        return results

    @staticmethod
    def _accepts_none(hint: Any) -> bool:
        if hint is Any or hint is object or hint is type(None):
            return True
        return typing.get_origin(hint) in _UNION_ORIGINS and type(None) in typing.get_args(hint)

    def _decode_sequence(
        self,
        value: Any,
        container: type,
        args: Tuple[Any, ...],
        name: str,
        errors: List[str],
    ) -> Any:
        element = args[0] if args else Any
        items = self._items(value, container, name, errors)
        if items is None:
            return _UNSET
        results = self._decode_elements(items, [element] * len(items), name, errors)
        if results is _UNSET:
            return _UNSET
        return container(results)

    def _decode_tuple(
        self, value: Any, args: Tuple[Any, ...], name: str, errors: List[str]
    ) -> Any:
        items = self._items(value, tuple, name, errors)
        if items is None:
            return _UNSET
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            hints = [args[0] if args else Any] * len(items)
        elif len(args) != len(items):
            errors.append(
                f"'{name}' expected {len(args)} elements, got {len(items)}"
            )
            return _UNSET
        else:
            hints = list(args)
        results = self._decode_elements(items, hints, name, errors)
        if results is _UNSET:
            return _UNSET
        return tuple(results)

    def _decode_dict(
        self,
        value: Any,
        args: Tuple[Any, ...],
        current: Any,
        name: str,
        errors: List[str],
    ) -> Any:
        source = _as_mapping(value)
        if source is None:
            errors.append(self._mismatch(name, dict, value, "expected a map"))
            return _UNSET
        key_hint, value_hint = args if len(args) == 2 else (Any, Any)
        merged: Dict[Any, Any] = dict(current) if isinstance(current, Mapping) else {}
        before = len(errors)
        for key, item in source.items():
            entry_name = f"{name}[{key}]"
            decoded_key = self._decode_value(key, key_hint, None, entry_name, errors)
            if decoded_key is _UNSET:
                continue
            decoded = self._decode_value(
                item, value_hint, merged.get(decoded_key), entry_name, errors
            )
            if decoded is not _UNSET:
                merged[decoded_key] = decoded
        if len(errors) > before:
            return _UNSET
        return merged


def decode(
    data: Any,
    output: Any,
    *,
    hooks: Optional[Sequence[DecodeHook]] = None,
    weakly_typed_input: bool = True,
) -> None:
    """Decode ``data`` into ``output`` with a one-off :class:`Decoder`.

    Matching ignores case and non-alphanumeric characters, squashed members
    are matched at the parent level, and duration strings become
    :class:`~datetime.timedelta` values.
    """

    config = DecoderConfig(
        hooks=DEFAULT_HOOKS if hooks is None else tuple(hooks),
        weakly_typed_input=weakly_typed_input,
    )
    Decoder(config).decode(data, output)
