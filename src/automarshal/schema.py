"""Record introspection for msgspec structs, dataclasses, and annotated classes."""

from __future__ import annotations

import abc
import dataclasses
import functools
import inspect
import typing
from collections.abc import Callable
from typing import Annotated, Any, ClassVar, get_args, get_origin

import msgspec

from automarshal.views import ViewTag, views_from_metadata


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """Declared field of a record type."""

    name: str
    encode_name: str
    annotation: Any
    default: object = msgspec.NODEFAULT
    default_factory: Callable[[], object] | object = msgspec.NODEFAULT
    views: tuple[ViewTag, ...] = ()

    @property
    def has_default(self) -> bool:
        """Return True when the field declares a default or default factory."""
        return self.default is not msgspec.NODEFAULT or self.default_factory is not msgspec.NODEFAULT

    def make_default(self) -> object:
        """Return a fresh copy of the declared default.

        Returns
        -------
        object
            Declared default value.

        Raises
        ------
        LookupError
            Raised when the field declares no default.
        """
        factory = self.default_factory
        if factory is not msgspec.NODEFAULT and callable(factory):
            return factory()
        if self.default is not msgspec.NODEFAULT:
            return self.default
        msg = f"Field {self.name!r} has no default"
        raise LookupError(msg)


def unwrap_annotated(hint: Any) -> tuple[Any, tuple[object, ...]]:
    """Split ``Annotated[T, ...]`` into ``T`` and its metadata.

    Returns
    -------
    tuple[Any, tuple[object, ...]]
        Bare type and metadata entries (empty when not annotated).
    """
    if get_origin(hint) is Annotated:
        base, *metadata = get_args(hint)
        return base, tuple(metadata)
    return hint, ()


def is_struct_type(cls: object) -> bool:
    """Return True for msgspec ``Struct`` subclasses."""
    return isinstance(cls, type) and issubclass(cls, msgspec.Struct)


def is_record_type(cls: object) -> bool:
    """Return True for types that can be constructed from their fields."""
    if not isinstance(cls, type):
        return False
    return is_struct_type(cls) or dataclasses.is_dataclass(cls)


def is_open_type(cls: type) -> bool:
    """Return True when ``cls`` is declared to admit several concrete types.

    Abstract classes, protocols, and ABC-based classes that are not records
    are open. Openness depends on the declaration only, never on which
    subclasses happen to exist.
    """
    if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
        return True
    return isinstance(cls, abc.ABCMeta) and not is_record_type(cls)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except NameError as exc:
        msg = f"Cannot resolve field annotations of {cls.__qualname__}: {exc}"
        raise TypeError(msg) from exc


def _struct_fields(cls: type[msgspec.Struct]) -> tuple[FieldSpec, ...]:
    hints = _type_hints(cls)
    specs: list[FieldSpec] = []
    for info in msgspec.structs.fields(cls):
        annotation = hints.get(info.name, info.type)
        _, metadata = unwrap_annotated(annotation)
        specs.append(
            FieldSpec(
                name=info.name,
                encode_name=info.encode_name,
                annotation=annotation,
                default=info.default,
                default_factory=info.default_factory,
                views=views_from_metadata(metadata),
            )
        )
    return tuple(specs)


def _dataclass_fields(cls: type) -> tuple[FieldSpec, ...]:
    hints = _type_hints(cls)
    specs: list[FieldSpec] = []
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        annotation = hints.get(field.name, Any)
        _, metadata = unwrap_annotated(annotation)
        default = msgspec.NODEFAULT if field.default is dataclasses.MISSING else field.default
        factory = (
            msgspec.NODEFAULT
            if field.default_factory is dataclasses.MISSING
            else field.default_factory
        )
        specs.append(
            FieldSpec(
                name=field.name,
                encode_name=field.name,
                annotation=annotation,
                default=default,
                default_factory=factory,
                views=views_from_metadata(metadata),
            )
        )
    return tuple(specs)


def _annotated_fields(cls: type) -> tuple[FieldSpec, ...]:
    specs: list[FieldSpec] = []
    for name, annotation in _type_hints(cls).items():
        if name.startswith("_") or get_origin(annotation) is ClassVar or annotation is ClassVar:
            continue
        _, metadata = unwrap_annotated(annotation)
        specs.append(
            FieldSpec(
                name=name,
                encode_name=name,
                annotation=annotation,
                views=views_from_metadata(metadata),
            )
        )
    return tuple(specs)


@functools.cache
def declared_fields(cls: type) -> tuple[FieldSpec, ...]:
    """Return the declared field set of a type.

    Structs and dataclasses report their constructor fields. Any other class
    reports its public, non-``ClassVar`` annotations, which lets protocols and
    abstract bases act as static write types.

    Parameters
    ----------
    cls
        Type to introspect.

    Returns
    -------
    tuple[FieldSpec, ...]
        Fields in declaration order.
    """
    if is_struct_type(cls):
        return _struct_fields(cls)
    if dataclasses.is_dataclass(cls):
        return _dataclass_fields(cls)
    return _annotated_fields(cls)


__all__ = [
    "FieldSpec",
    "declared_fields",
    "is_open_type",
    "is_record_type",
    "is_struct_type",
    "unwrap_annotated",
]
