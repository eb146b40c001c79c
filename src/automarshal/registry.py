"""Type registrations shared by every marshalling call.

A :class:`MarshallingConfig` is built once at startup, handed to
:class:`automarshal.facade.AutoMarshalling`, and frozen from then on. Lookups
are read-only and safe to share between threads.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Mapping
from types import MappingProxyType

from automarshal.errors import ConfigurationError
from automarshal.schema import FieldSpec, declared_fields, is_record_type
from automarshal.views import ViewTag, is_view_tag
from utils.registry_protocol import MutableRegistry

_LOGGER = logging.getLogger(__name__)

DEFAULT_DISCRIMINATOR_FIELD = "@class"


@dataclasses.dataclass(frozen=True)
class PolymorphicFamily:
    """Discriminator map for one registered supertype."""

    parent: type
    children: Mapping[str, type]

    def tag_of(self, cls: type) -> str | None:
        """Return the tag registered for ``cls``, if any."""
        for tag, child in self.children.items():
            if child is cls:
                return tag
        return None

    def child_for(self, tag: str) -> type | None:
        """Return the child registered under ``tag``, if any."""
        return self.children.get(tag)


class MarshallingConfig:
    """Process-wide registration tables for polymorphic families and views."""

    def __init__(self, *, discriminator_field: str = DEFAULT_DISCRIMINATOR_FIELD) -> None:
        if not discriminator_field:
            msg = "discriminator_field must be a non-empty string."
            raise ConfigurationError(msg)
        self._discriminator_field = discriminator_field
        self._families: MutableRegistry[type, PolymorphicFamily] = MutableRegistry()
        self._tags: dict[type, tuple[str, PolymorphicFamily]] = {}
        self._views: dict[type, dict[str, tuple[ViewTag, ...]]] = {}

    @property
    def discriminator_field(self) -> str:
        """Return the reserved JSON key carrying type tags."""
        return self._discriminator_field

    @property
    def frozen(self) -> bool:
        """Return True once the config no longer accepts registrations."""
        return self._families.frozen

    def freeze(self) -> MarshallingConfig:
        """Reject further registrations and return ``self``.

        Returns
        -------
        MarshallingConfig
            This config, now frozen.
        """
        if not self.frozen:
            self._families.freeze()
            _LOGGER.debug(
                "Froze marshalling config with %d families and %d view tables",
                len(self._families),
                len(self._views),
            )
        return self

    def _ensure_mutable(self, action: str) -> None:
        if self.frozen:
            msg = f"Cannot {action}: marshalling config is frozen."
            raise ConfigurationError(msg)

    def register_polymorphic(
        self,
        parent: type,
        children: Mapping[str, type],
    ) -> PolymorphicFamily:
        """Register the discriminator map for a supertype family.

        Parameters
        ----------
        parent
            Common supertype of the family.
        children
            Mapping of type tag to concrete child type.

        Returns
        -------
        PolymorphicFamily
            The registered family.

        Raises
        ------
        ConfigurationError
            Raised when the config is frozen, the parent is already registered,
            a tag or child is invalid, a child is registered twice, or the
            discriminator field collides with a child field.
        """
        self._ensure_mutable(f"register {parent!r}")
        if not isinstance(parent, type):
            msg = f"Polymorphic parent must be a class, got {parent!r}."
            raise ConfigurationError(msg)
        if parent in self._families:
            msg = f"Cannot register polymorphic family {parent.__qualname__}: parent is already registered."
            raise ConfigurationError(msg)
        if not children:
            msg = f"Polymorphic family {parent.__qualname__} needs at least one child."
            raise ConfigurationError(msg)
        seen: dict[type, str] = {}
        for tag, child in children.items():
            self._validate_child(parent, tag, child)
            if child in seen:
                msg = f"{child.__qualname__} is registered under both {seen[child]!r} and {tag!r}."
                raise ConfigurationError(msg)
            seen[child] = tag
        family = PolymorphicFamily(parent=parent, children=MappingProxyType(dict(children)))
        self._families.register(parent, family)
        for child, tag in seen.items():
            self._tags[child] = (tag, family)
        _LOGGER.debug(
            "Registered polymorphic family %s with tags %s",
            parent.__qualname__,
            sorted(children),
        )
        return family

    def _validate_child(self, parent: type, tag: object, child: object) -> None:
        if not isinstance(tag, str) or not tag:
            msg = f"Type tags must be non-empty strings, got {tag!r}."
            raise ConfigurationError(msg)
        if not isinstance(child, type) or not issubclass(child, parent):
            msg = f"{child!r} tagged {tag!r} is not a subclass of {parent.__qualname__}."
            raise ConfigurationError(msg)
        if not is_record_type(child) or inspect.isabstract(child):
            msg = f"{child.__qualname__} tagged {tag!r} must be a concrete struct or dataclass."
            raise ConfigurationError(msg)
        if child in self._tags:
            other_tag, other = self._tags[child]
            msg = (
                f"{child.__qualname__} is already tagged {other_tag!r} "
                f"in family {other.parent.__qualname__}."
            )
            raise ConfigurationError(msg)
        for spec in declared_fields(child):
            if spec.encode_name == self._discriminator_field:
                msg = (
                    f"Field {spec.name!r} of {child.__qualname__} collides with "
                    f"discriminator field {self._discriminator_field!r}."
                )
                raise ConfigurationError(msg)

    def register_views(self, record_type: type, **field_views: tuple[ViewTag, ...] | ViewTag) -> None:
        """Declare field views for a record type.

        Entries here override ``visible_in`` annotations on the same fields.

        Parameters
        ----------
        record_type
            Record whose fields are scoped.
        **field_views
            Field name to a view tag or tuple of view tags.

        Raises
        ------
        ConfigurationError
            Raised when the config is frozen, a field is unknown, or a tag
            is not a valid view.
        """
        self._ensure_mutable(f"register views for {record_type!r}")
        known = {spec.name for spec in declared_fields(record_type)}
        table = self._views.setdefault(record_type, {})
        for name, views in field_views.items():
            if name not in known:
                msg = f"{record_type.__qualname__} has no field named {name!r}."
                raise ConfigurationError(msg)
            normalized = views if isinstance(views, tuple) else (views,)
            invalid = [view for view in normalized if not is_view_tag(view)]
            if invalid:
                msg = f"Invalid view tags for {record_type.__qualname__}.{name}: {invalid!r}."
                raise ConfigurationError(msg)
            table[name] = normalized
        _LOGGER.debug(
            "Registered views for %s: %s",
            record_type.__qualname__,
            sorted(field_views),
        )

    def fields_for(self, cls: type) -> tuple[FieldSpec, ...]:
        """Return the declared fields of ``cls`` with registered views applied.

        Returns
        -------
        tuple[FieldSpec, ...]
            Fields in declaration order.
        """
        fields = declared_fields(cls)
        overrides = self._views.get(cls)
        if not overrides:
            return fields
        return tuple(
            dataclasses.replace(spec, views=overrides[spec.name]) if spec.name in overrides else spec
            for spec in fields
        )

    def family(self, parent: type) -> PolymorphicFamily | None:
        """Return the family registered for ``parent``, if any."""
        return self._families.get(parent)

    def tag_for(self, cls: type) -> str | None:
        """Return the tag of a registered concrete member type."""
        entry = self._tags.get(cls)
        return None if entry is None else entry[0]

    def family_for_target(self, target: type) -> PolymorphicFamily | None:
        """Return the family used to decode into ``target``.

        A registered parent resolves to its own family. A registered member,
        or an intermediate class below a registered parent, resolves to the
        nearest registered family in its MRO.

        Returns
        -------
        PolymorphicFamily | None
            Family to consult, or ``None`` when ``target`` is unregistered.
        """
        for base in target.__mro__:
            family = self._families.get(base)
            if family is not None:
                return family
        entry = self._tags.get(target)
        return None if entry is None else entry[1]


__all__ = [
    "DEFAULT_DISCRIMINATOR_FIELD",
    "MarshallingConfig",
    "PolymorphicFamily",
]
