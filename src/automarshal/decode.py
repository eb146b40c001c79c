"""JSON tree to value decoding."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import datetime as dt
import decimal
import enum
import types
import typing
from typing import Any, Literal, Union, get_args, get_origin

import msgspec

from automarshal.encode import is_leaf_type
from automarshal.errors import AmbiguousTypeError, ParseError, UnknownDiscriminatorError, UnsupportedTypeError
from automarshal.registry import MarshallingConfig, PolymorphicFamily
from automarshal.schema import FieldSpec, is_open_type, is_record_type, is_struct_type, unwrap_annotated
from automarshal.views import ViewTag, is_visible
from serde_msgspec import convert, validation_error_payload

_NONE_TYPES: tuple[object, ...] = (None, types.NoneType)

_SEQUENCE_ORIGINS: frozenset[object] = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        cabc.Sequence,
        cabc.MutableSequence,
        cabc.Collection,
        cabc.Iterable,
        cabc.Set,
        cabc.MutableSet,
    }
)
_MAPPING_ORIGINS: frozenset[object] = frozenset({dict, cabc.Mapping, cabc.MutableMapping})

_ZERO_VALUES: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    str: "",
    bytes: b"",
    decimal.Decimal: decimal.Decimal(0),
    dt.timedelta: dt.timedelta(0),
}


def _json_kind(data: object) -> str:
    if data is None:
        return "null"
    if isinstance(data, bool):
        return "bool"
    if isinstance(data, (int, float)):
        return "number"
    if isinstance(data, str):
        return "str"
    if isinstance(data, list):
        return "array"
    if isinstance(data, dict):
        return "object"
    return type(data).__name__


def _resolve_alias(hint: Any) -> Any:
    while True:
        if isinstance(hint, typing.TypeAliasType):
            hint = hint.__value__
        elif hasattr(hint, "__supertype__"):
            hint = hint.__supertype__
        else:
            return hint


def _union_arms(hint: Any) -> tuple[Any, ...] | None:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        return get_args(hint)
    return None


def _is_optional(hint: Any) -> bool:
    base, _ = unwrap_annotated(hint)
    arms = _union_arms(_resolve_alias(base))
    return arms is not None and any(arm in _NONE_TYPES for arm in arms)


def _is_class_target(hint: Any) -> bool:
    base, _ = unwrap_annotated(hint)
    base = _resolve_alias(base)
    if not isinstance(base, type) or get_origin(base) is not None:
        return False
    return not is_leaf_type(base) and base not in _SEQUENCE_ORIGINS and base not in _MAPPING_ORIGINS


@dataclasses.dataclass(frozen=True)
class TreeDecoder:
    """Decode a JSON tree into typed values under an optional view.

    Fields hidden by the active view are not read from the payload; they take
    their declared default, or the zero value of their type.
    """

    config: MarshallingConfig
    view: ViewTag | None = None
    strict: bool = True

    def decode(self, data: object, hint: Any, path: str = "$") -> Any:
        """Decode ``data`` into an instance of ``hint``.

        Parameters
        ----------
        data
            JSON tree.
        hint
            Target type annotation.
        path
            JSON path of ``data``, used in error messages.

        Returns
        -------
        Any
            Decoded value.

        Raises
        ------
        AmbiguousTypeError
            Raised when the target is an unregistered open type.
        ParseError
            Raised when ``data`` does not fit the target.
        """
        base, _ = unwrap_annotated(hint)
        base = _resolve_alias(base)
        if base is Any or base is object:
            return data
        if base in _NONE_TYPES:
            if data is None:
                return None
            msg = f"Expected `null`, got `{_json_kind(data)}`"
            raise ParseError(msg, path=path)
        arms = _union_arms(base)
        if arms is not None:
            return self._decode_union(data, base, arms, path)
        origin = get_origin(base)
        if origin is Literal:
            return self._convert(data, hint, path)
        if origin is not None:
            return self._decode_generic(data, base, origin, get_args(base), path)
        if not isinstance(base, type) or is_leaf_type(base):
            return self._convert(data, hint, path)
        if base in _SEQUENCE_ORIGINS or base in _MAPPING_ORIGINS:
            return self._decode_generic(data, base, base, (), path)
        family = self.config.family_for_target(base)
        if family is not None:
            return self._decode_member(data, base, family, path)
        if is_open_type(base):
            raise AmbiguousTypeError(base, path=path)
        if is_record_type(base):
            return self._decode_record(data, base, path)
        return self._convert(data, hint, path)

    def _decode_union(self, data: object, union: Any, arms: tuple[Any, ...], path: str) -> Any:
        if data is None and any(arm in _NONE_TYPES for arm in arms):
            return None
        candidates = [arm for arm in arms if arm not in _NONE_TYPES]
        if len(candidates) == 1:
            return self.decode(data, candidates[0], path)
        class_arms = [arm for arm in candidates if _is_class_target(arm)]
        if class_arms and isinstance(data, dict):
            return self._decode_class_union(data, union, class_arms, path)
        other_arms = [arm for arm in candidates if arm not in class_arms]
        if not other_arms:
            msg = f"Expected `object`, got `{_json_kind(data)}`"
            raise ParseError(msg, path=path)
        if len(other_arms) == 1:
            return self.decode(data, other_arms[0], path)
        return self._convert(data, Union[tuple(other_arms)], path)  # noqa: UP007

    def _decode_class_union(
        self,
        data: dict[str, object],
        union: Any,
        class_arms: list[Any],
        path: str,
    ) -> Any:
        tag = data.get(self.config.discriminator_field)
        families: list[tuple[type, PolymorphicFamily]] = []
        for arm in class_arms:
            target = _resolve_alias(unwrap_annotated(arm)[0])
            family = self.config.family_for_target(target)
            if family is not None:
                families.append((target, family))
        if tag is not None and families:
            for target, family in families:
                child = family.child_for(tag) if isinstance(tag, str) else None
                if child is not None and target in child.__mro__:
                    return self._decode_record(data, child, path)
            raise UnknownDiscriminatorError(tag, parent=families[0][1].parent, path=path)
        if len(class_arms) == 1:
            return self.decode(data, class_arms[0], path)
        raise AmbiguousTypeError(union, path=path)

    def _decode_generic(
        self,
        data: object,
        hint: Any,
        origin: Any,
        args: tuple[Any, ...],
        path: str,
    ) -> Any:
        if origin in _MAPPING_ORIGINS:
            if not isinstance(data, dict):
                msg = f"Expected `object`, got `{_json_kind(data)}`"
                raise ParseError(msg, path=path)
            key_hint = args[0] if args else str
            item_hint = args[1] if len(args) == 2 else Any
            return {
                self._convert(key, key_hint, path, strict=False): self.decode(
                    item, item_hint, f"{path}.{key}"
                )
                for key, item in data.items()
            }
        if origin in _SEQUENCE_ORIGINS:
            if not isinstance(data, list):
                msg = f"Expected `array`, got `{_json_kind(data)}`"
                raise ParseError(msg, path=path)
            if origin is tuple and args and args[-1] is not Ellipsis:
                if len(data) != len(args):
                    msg = f"Expected `array` of length {len(args)}, got {len(data)}"
                    raise ParseError(msg, path=path)
                return tuple(
                    self.decode(item, arg, f"{path}[{index}]")
                    for index, (item, arg) in enumerate(zip(data, args, strict=True))
                )
            item_hint = args[0] if args else Any
            items = [self.decode(item, item_hint, f"{path}[{index}]") for index, item in enumerate(data)]
            if origin is tuple:
                return tuple(items)
            if origin in {set, cabc.Set, cabc.MutableSet}:
                return set(items)
            if origin is frozenset:
                return frozenset(items)
            return items
        return self._convert(data, hint, path)

    def _decode_member(
        self,
        data: object,
        target: type,
        family: PolymorphicFamily,
        path: str,
    ) -> Any:
        if not isinstance(data, dict):
            msg = f"Expected `object`, got `{_json_kind(data)}`"
            raise ParseError(msg, path=path)
        field_name = self.config.discriminator_field
        tag = data.get(field_name)
        if tag is None:
            if self.config.family(target) is None and is_record_type(target) and not is_open_type(target):
                return self._decode_record(data, target, path)
            msg = f"Object missing discriminator field `{field_name}` for {family.parent.__qualname__}"
            raise ParseError(msg, path=path)
        child = family.child_for(tag) if isinstance(tag, str) else None
        if child is None:
            raise UnknownDiscriminatorError(tag, parent=family.parent, path=path)
        if target not in child.__mro__:
            msg = f"Type tag {tag!r} selects {child.__qualname__}, which is not a {target.__qualname__}"
            raise ParseError(msg, path=path)
        return self._decode_record(data, child, path)

    def _decode_record(self, data: object, cls: type, path: str) -> Any:
        if not isinstance(data, dict):
            msg = f"Expected `object`, got `{_json_kind(data)}`"
            raise ParseError(msg, path=path)
        fields = self.config.fields_for(cls)
        if is_struct_type(cls) and cls.__struct_config__.forbid_unknown_fields:
            self._check_unknown_fields(data, cls, fields, path)
        kwargs: dict[str, object] = {}
        for spec in fields:
            if not is_visible(spec.views, self.view):
                kwargs[spec.name] = self._hidden_value(spec, path)
            elif spec.encode_name in data:
                kwargs[spec.name] = self.decode(
                    data[spec.encode_name],
                    spec.annotation,
                    f"{path}.{spec.encode_name}",
                )
            elif spec.has_default:
                continue
            elif _is_optional(spec.annotation):
                kwargs[spec.name] = None
            else:
                msg = f"Object missing required field `{spec.encode_name}`"
                raise ParseError(msg, path=path)
        try:
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            msg = f"Cannot construct {cls.__qualname__}: {exc}"
            raise ParseError(msg, path=path) from exc

    def _check_unknown_fields(
        self,
        data: dict[str, object],
        cls: type,
        fields: tuple[FieldSpec, ...],
        path: str,
    ) -> None:
        known = {spec.encode_name for spec in fields}
        if self.config.tag_for(cls) is not None:
            known.add(self.config.discriminator_field)
        for key in data:
            if key not in known:
                msg = f"Object contains unknown field `{key}`"
                raise ParseError(msg, path=path)

    def _hidden_value(self, spec: FieldSpec, path: str) -> object:
        if spec.has_default:
            return spec.make_default()
        return self._zero(spec.annotation, f"{path}.{spec.encode_name}", frozenset())

    def _zero(self, hint: Any, path: str, seen: frozenset[type]) -> object:
        base = _resolve_alias(unwrap_annotated(hint)[0])
        if base in _NONE_TYPES or base is Any or base is object:
            return None
        arms = _union_arms(base)
        if arms is not None:
            if any(arm in _NONE_TYPES for arm in arms):
                return None
            return self._zero(arms[0], path, seen)
        origin = get_origin(base) or base
        if origin is Literal:
            return get_args(base)[0]
        if origin in _MAPPING_ORIGINS:
            return {}
        if origin is tuple:
            args = get_args(base)
            if args and args[-1] is not Ellipsis:
                return tuple(self._zero(arg, path, seen) for arg in args)
            return ()
        if origin in {set, cabc.Set, cabc.MutableSet}:
            return set()
        if origin is frozenset:
            return frozenset()
        if origin in _SEQUENCE_ORIGINS:
            return []
        if isinstance(base, type) and issubclass(base, enum.Enum) and len(base):
            return next(iter(base))
        if base in _ZERO_VALUES:
            return _ZERO_VALUES[base]
        if (
            isinstance(base, type)
            and is_record_type(base)
            and not is_open_type(base)
            and self.config.family(base) is None
            and base not in seen
        ):
            return self._zero_record(base, path, seen | {base})
        msg = f"Field hidden by view has no default and {base!r} has no zero value"
        raise ParseError(msg, path=path)

    def _zero_record(self, cls: type, path: str, seen: frozenset[type]) -> object:
        kwargs = {
            spec.name: self._zero(spec.annotation, f"{path}.{spec.encode_name}", seen)
            for spec in self.config.fields_for(cls)
            if not spec.has_default
        }
        return cls(**kwargs)

    def _convert(self, data: object, hint: Any, path: str, *, strict: bool | None = None) -> Any:
        try:
            return convert(data, target_type=hint, strict=self.strict if strict is None else strict)
        except msgspec.ValidationError as exc:
            payload = validation_error_payload(exc)
            inner = payload.get("path", "$")
            raise ParseError(payload.get("summary", str(exc)), path=path + inner[1:]) from exc
        except TypeError as exc:
            msg = f"Cannot decode into {hint!r}: {exc}"
            raise UnsupportedTypeError(msg) from exc


__all__ = ["TreeDecoder"]
