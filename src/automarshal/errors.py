"""Error taxonomy for the marshalling facade."""

from __future__ import annotations


class MarshallingError(Exception):
    """Base error for marshalling failures."""


class ParseError(MarshallingError, ValueError):
    """Malformed JSON or a payload structurally incompatible with its target."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message} - at `{path}`"
        super().__init__(message)


class UnknownDiscriminatorError(ParseError):
    """Discriminator value with no registered child type."""

    def __init__(self, tag: object, *, parent: type, path: str | None = None) -> None:
        self.tag = tag
        self.parent = parent
        msg = f"Unknown type tag {tag!r} for {parent.__qualname__}"
        super().__init__(msg, path=path)


class AmbiguousTypeError(MarshallingError, TypeError):
    """Decode target is an open type with no polymorphic registration."""

    def __init__(self, target: object, *, path: str | None = None) -> None:
        self.target = target
        self.path = path
        name = getattr(target, "__qualname__", repr(target))
        msg = (
            f"Cannot decode into {name}: it has several possible concrete types "
            "and no polymorphic registration"
        )
        if path is not None:
            msg = f"{msg} - at `{path}`"
        super().__init__(msg)


class UnsupportedTypeError(MarshallingError, TypeError):
    """Value that cannot be encoded to JSON."""


class ConfigurationError(MarshallingError, ValueError):
    """Invalid or late type registration."""


__all__ = [
    "AmbiguousTypeError",
    "ConfigurationError",
    "MarshallingError",
    "ParseError",
    "UnknownDiscriminatorError",
    "UnsupportedTypeError",
]
