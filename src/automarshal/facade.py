"""JSON auto-marshalling facade."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, overload

import msgspec

from automarshal.decode import TreeDecoder
from automarshal.encode import JsonTree, TreeEncoder
from automarshal.errors import ConfigurationError, ParseError
from automarshal.registry import MarshallingConfig
from automarshal.settings import MarshallingSettings
from automarshal.views import ViewTag, is_view_tag
from serde_msgspec import decode_json_lines, dumps_json, encode_json_lines, loads_json

_LOGGER = logging.getLogger(__name__)


def _check_view(view: ViewTag | None) -> None:
    if view is not None and not is_view_tag(view):
        msg = f"Expected a View subclass or str, got {view!r}"
        raise TypeError(msg)


class AutoMarshalling:
    """Convert typed values to and from JSON text and JSON trees.

    The facade freezes its :class:`MarshallingConfig` on construction, after
    which every call is a pure function of its arguments.

    Parameters
    ----------
    config
        Registered families and views. Defaults to an empty config using the
        settings' discriminator field.
    settings
        Runtime settings. Defaults to :class:`MarshallingSettings`.

    Raises
    ------
    ConfigurationError
        Raised when ``config`` and ``settings`` disagree on the
        discriminator field.
    """

    def __init__(
        self,
        config: MarshallingConfig | None = None,
        *,
        settings: MarshallingSettings | None = None,
    ) -> None:
        self._settings = settings or MarshallingSettings()
        if config is None:
            config = MarshallingConfig(discriminator_field=self._settings.discriminator_field)
        elif settings is not None and config.discriminator_field != settings.discriminator_field:
            msg = (
                f"Config discriminator {config.discriminator_field!r} does not match "
                f"settings discriminator {settings.discriminator_field!r}."
            )
            raise ConfigurationError(msg)
        self._config = config.freeze()
        _LOGGER.debug("Created AutoMarshalling with discriminator %r", config.discriminator_field)

    @property
    def config(self) -> MarshallingConfig:
        """Return the frozen registration tables."""
        return self._config

    @property
    def settings(self) -> MarshallingSettings:
        """Return the runtime settings."""
        return self._settings

    def _encoder(self, view: ViewTag | None) -> TreeEncoder:
        _check_view(view)
        return TreeEncoder(self._config, view)

    def _decoder(self, view: ViewTag | None) -> TreeDecoder:
        _check_view(view)
        return TreeDecoder(self._config, view, strict=self._settings.strict)

    def to_tree(self, value: object, *, view: ViewTag | None = None) -> JsonTree:
        """Encode a value into a JSON tree using its runtime type.

        Parameters
        ----------
        value
            Value to encode.
        view
            Optional view restricting the emitted fields.

        Returns
        -------
        JsonTree
            Builtin dict/list/scalar tree.
        """
        return self._encoder(view).encode(value)

    @overload
    def from_tree[T](self, tree: JsonTree, target_type: type[T], *, view: ViewTag | None = None) -> T: ...

    @overload
    def from_tree(self, tree: JsonTree, target_type: Any, *, view: ViewTag | None = None) -> Any: ...

    def from_tree(self, tree: JsonTree, target_type: Any, *, view: ViewTag | None = None) -> Any:
        """Decode a JSON tree into ``target_type``.

        Parameters
        ----------
        tree
            Builtin dict/list/scalar tree.
        target_type
            Target type or annotation such as ``list[Parent]``.
        view
            Optional view; hidden fields take their default values.

        Returns
        -------
        Any
            Freshly constructed value.
        """
        return self._decoder(view).decode(tree, target_type)

    def serialize(self, value: object, *, view: ViewTag | None = None) -> str:
        """Serialize a value to compact JSON text.

        Returns
        -------
        str
            Compact JSON text.
        """
        return dumps_json(self.to_tree(value, view=view)).decode("utf-8")

    @overload
    def deserialize[T](self, text: str | bytes, target_type: type[T], *, view: ViewTag | None = None) -> T: ...

    @overload
    def deserialize(self, text: str | bytes, target_type: Any, *, view: ViewTag | None = None) -> Any: ...

    def deserialize(self, text: str | bytes, target_type: Any, *, view: ViewTag | None = None) -> Any:
        """Deserialize JSON text into ``target_type``.

        Parameters
        ----------
        text
            UTF-8 JSON text.
        target_type
            Target type or annotation.
        view
            Optional view; hidden fields take their default values.

        Returns
        -------
        Any
            Freshly constructed value.
        """
        return self.from_tree(self.parse(text), target_type, view=view)

    def writer_for(self, static_type: Any, *, view: ViewTag | None = None) -> Callable[[object], str]:
        """Return a serializer bound to a static type.

        The writer emits strictly the declared field set of ``static_type``.
        Extra fields of an unregistered runtime subtype are dropped, unlike
        :meth:`serialize`, which follows runtime types. Registered polymorphic
        members keep their own fields and type tag.

        Parameters
        ----------
        static_type
            Declared type or annotation such as ``list[Parent]``.
        view
            Optional view restricting the emitted fields.

        Returns
        -------
        Callable[[object], str]
            Function producing compact JSON text.
        """
        encoder = self._encoder(view)

        def write(value: object) -> str:
            return dumps_json(encoder.encode_as(value, static_type)).decode("utf-8")

        return write

    @staticmethod
    def parse(text: str | bytes) -> JsonTree:
        """Parse JSON text into an untyped tree.

        Returns
        -------
        JsonTree
            Builtin dict/list/scalar tree.

        Raises
        ------
        ParseError
            Raised when the text is not well-formed JSON.
        """
        try:
            return loads_json(text)
        except msgspec.DecodeError as exc:
            raise ParseError(str(exc)) from exc

    @staticmethod
    def compact(tree: JsonTree) -> str:
        """Render a JSON tree as compact text.

        Returns
        -------
        str
            Compact JSON text.
        """
        return dumps_json(tree).decode("utf-8")

    def pretty(self, value: object, *, view: ViewTag | None = None) -> str:
        """Serialize a value to indented JSON text.

        Returns
        -------
        str
            JSON text indented by ``settings.pretty_indent``.
        """
        tree = self.to_tree(value, view=view)
        return dumps_json(tree, pretty=True, indent=self._settings.pretty_indent).decode("utf-8")

    def serialize_lines(self, values: Iterable[object], *, view: ViewTag | None = None) -> str:
        """Serialize values to JSON Lines, one compact document per line.

        Returns
        -------
        str
            Newline-terminated JSON Lines text.
        """
        encoder = self._encoder(view)
        return encode_json_lines([encoder.encode(value) for value in values]).decode("utf-8")

    def deserialize_lines(
        self,
        text: str | bytes,
        target_type: Any,
        *,
        view: ViewTag | None = None,
    ) -> list[Any]:
        """Deserialize JSON Lines into a list of ``target_type`` values.

        Returns
        -------
        list[Any]
            One decoded value per non-empty line.

        Raises
        ------
        ParseError
            Raised when a line is malformed or does not fit the target.
        """
        try:
            trees = decode_json_lines(text)
        except msgspec.DecodeError as exc:
            raise ParseError(str(exc)) from exc
        decoder = self._decoder(view)
        return [decoder.decode(tree, target_type, f"$[{index}]") for index, tree in enumerate(trees)]


__all__ = ["AutoMarshalling"]
