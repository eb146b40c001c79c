"""JSON auto-marshalling with polymorphic type tags and field views."""

from automarshal.encode import JsonTree
from automarshal.errors import (
    AmbiguousTypeError,
    ConfigurationError,
    MarshallingError,
    ParseError,
    UnknownDiscriminatorError,
    UnsupportedTypeError,
)
from automarshal.facade import AutoMarshalling
from automarshal.registry import DEFAULT_DISCRIMINATOR_FIELD, MarshallingConfig, PolymorphicFamily
from automarshal.settings import MarshallingSettings, settings_from_env
from automarshal.views import View, ViewTag, visible_in

__all__ = [
    "DEFAULT_DISCRIMINATOR_FIELD",
    "AmbiguousTypeError",
    "AutoMarshalling",
    "ConfigurationError",
    "JsonTree",
    "MarshallingConfig",
    "MarshallingError",
    "MarshallingSettings",
    "ParseError",
    "PolymorphicFamily",
    "UnknownDiscriminatorError",
    "UnsupportedTypeError",
    "View",
    "ViewTag",
    "settings_from_env",
    "visible_in",
]
