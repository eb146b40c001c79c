"""Value to JSON tree encoding."""

from __future__ import annotations

import dataclasses
import datetime as dt
import decimal
import enum
import types
import uuid
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from automarshal.errors import UnsupportedTypeError
from automarshal.registry import MarshallingConfig
from automarshal.schema import is_record_type, unwrap_annotated
from automarshal.views import ViewTag, is_visible
from serde_msgspec import to_builtins

type JsonTree = None | bool | int | float | str | list[JsonTree] | dict[str, JsonTree]

_PLAIN_SCALARS: frozenset[type] = frozenset({str, int, float, bool})
_LEAF_TYPES: tuple[type, ...] = (
    str,
    int,
    float,
    bool,
    bytes,
    bytearray,
    memoryview,
    dt.datetime,
    dt.date,
    dt.time,
    dt.timedelta,
    uuid.UUID,
    decimal.Decimal,
    enum.Enum,
    PurePath,
)
_SEQUENCE_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)


def is_leaf_type(cls: type) -> bool:
    """Return True for types msgspec encodes natively as a JSON scalar."""
    return issubclass(cls, _LEAF_TYPES)


def _is_container_type(cls: type) -> bool:
    return issubclass(cls, (*_SEQUENCE_TYPES, Mapping))


def _union_arms(hint: Any) -> tuple[Any, ...] | None:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        return get_args(hint)
    return None


def _instance_of(value: object, hint: Any) -> bool:
    base, _ = unwrap_annotated(hint)
    target = get_origin(base) or base
    return isinstance(target, type) and isinstance(value, target)


@dataclasses.dataclass(frozen=True)
class TreeEncoder:
    """Encode values into a JSON tree under an optional view.

    ``encode`` dispatches on runtime types. ``encode_as`` follows declared
    annotations, so record values only expose the field set of their
    static type.
    """

    config: MarshallingConfig
    view: ViewTag | None = None

    def encode(self, value: object) -> JsonTree:
        """Encode a value using its runtime type.

        Returns
        -------
        JsonTree
            Encoded tree.
        """
        if value is None or type(value) in _PLAIN_SCALARS:
            return value
        cls = type(value)
        if is_record_type(cls):
            return self._encode_record(value, cls, static=False)
        if isinstance(value, Mapping):
            return {self._encode_key(key): self.encode(item) for key, item in value.items()}
        if isinstance(value, _SEQUENCE_TYPES):
            return [self.encode(item) for item in value]
        return self._encode_leaf(value)

    def encode_as(self, value: object, hint: Any) -> JsonTree:
        """Encode a value using the declared type ``hint``.

        Fields carried by an unregistered runtime subtype but not declared on
        ``hint`` are dropped. Members of registered families still encode
        with their own fields and type tag.

        Returns
        -------
        JsonTree
            Encoded tree.
        """
        base, _ = unwrap_annotated(hint)
        if value is None or base is Any or base is object or isinstance(base, TypeVar):
            return self.encode(value)
        arms = _union_arms(base)
        if arms is not None:
            match = next((arm for arm in arms if _instance_of(value, arm)), None)
            return self.encode(value) if match is None else self.encode_as(value, match)
        origin = get_origin(base)
        if origin is Literal:
            return self.encode(value)
        if origin is not None:
            return self._encode_generic(value, origin, get_args(base))
        if not isinstance(base, type) or is_leaf_type(base) or _is_container_type(base):
            return self.encode(value)
        runtime_cls = type(value)
        if self.config.tag_for(runtime_cls) is not None and base in runtime_cls.__mro__:
            return self._encode_record(value, runtime_cls, static=True)
        return self._encode_record(value, base, static=True)

    def _encode_generic(self, value: object, origin: Any, args: tuple[Any, ...]) -> JsonTree:
        if isinstance(value, Mapping):
            item_hint = args[1] if len(args) == 2 else Any
            return {self._encode_key(key): self.encode_as(item, item_hint) for key, item in value.items()}
        if isinstance(value, _SEQUENCE_TYPES):
            if origin is tuple and args and args[-1] is not Ellipsis:
                if len(value) != len(args):
                    msg = f"Expected a tuple of length {len(args)}, got {len(value)} items"
                    raise UnsupportedTypeError(msg)
                return [self.encode_as(item, arg) for item, arg in zip(value, args, strict=True)]
            item_hint = args[0] if args else Any
            return [self.encode_as(item, item_hint) for item in value]
        return self.encode(value)

    def _encode_record(self, value: object, layout: type, *, static: bool) -> dict[str, JsonTree]:
        payload: dict[str, JsonTree] = {}
        if layout is type(value):
            tag = self.config.tag_for(layout)
            if tag is not None:
                payload[self.config.discriminator_field] = tag
        for spec in self.config.fields_for(layout):
            if not is_visible(spec.views, self.view):
                continue
            try:
                item = getattr(value, spec.name)
            except AttributeError as exc:
                msg = f"{type(value).__qualname__} has no attribute {spec.name!r} declared by {layout.__qualname__}"
                raise UnsupportedTypeError(msg) from exc
            payload[spec.encode_name] = self.encode_as(item, spec.annotation) if static else self.encode(item)
        return payload

    def _encode_key(self, key: object) -> str:
        if type(key) is str:
            return key
        built = self._encode_leaf(key)
        if isinstance(built, str):
            return built
        if isinstance(built, bool):
            return "true" if built else "false"
        return str(built)

    @staticmethod
    def _encode_leaf(value: object) -> JsonTree:
        try:
            return to_builtins(value)
        except TypeError as exc:
            msg = f"Cannot encode value of type {type(value).__qualname__}: {exc}"
            raise UnsupportedTypeError(msg) from exc


__all__ = ["JsonTree", "TreeEncoder", "is_leaf_type"]
