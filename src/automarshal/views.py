"""View tags controlling per-field visibility.

A view is a marker class deriving from :class:`View`. Views form a hierarchy:
a field declared visible in ``Public`` is also visible when marshalling under
``Private`` if ``Private`` subclasses ``Public``. Fields without any declared
view are visible under every view.

Fields declare their views either inline::

    class Account(msgspec.Struct):
        balance: Annotated[int, visible_in(Private)]
        name: Annotated[str, visible_in(Public)]

or through :meth:`automarshal.registry.MarshallingConfig.register_views`.
"""

from __future__ import annotations

from collections.abc import Iterable

import msgspec

VIEWS_META_KEY = "x-automarshal-views"

type ViewTag = type[View] | str


class View:
    """Base marker class for view tags."""


def visible_in(*views: ViewTag) -> msgspec.Meta:
    """Return ``Annotated`` metadata declaring the views a field belongs to.

    Parameters
    ----------
    *views
        View tags the field is visible under.

    Returns
    -------
    msgspec.Meta
        Metadata to place inside ``typing.Annotated``.

    Raises
    ------
    TypeError
        Raised when a tag is neither a ``View`` subclass nor a string.
    """
    for view in views:
        if not is_view_tag(view):
            msg = f"Expected a View subclass or str, got {view!r}"
            raise TypeError(msg)
    return msgspec.Meta(extra={VIEWS_META_KEY: tuple(views)})


def is_view_tag(value: object) -> bool:
    """Return True when the value can be used as a view tag."""
    if isinstance(value, str):
        return bool(value)
    return isinstance(value, type) and issubclass(value, View)


def views_from_metadata(metadata: Iterable[object]) -> tuple[ViewTag, ...]:
    """Collect view tags from ``Annotated`` metadata entries.

    Returns
    -------
    tuple[ViewTag, ...]
        Declared views, empty when none were declared.
    """
    found: list[ViewTag] = []
    for item in metadata:
        if not isinstance(item, msgspec.Meta) or item.extra is None:
            continue
        found.extend(item.extra.get(VIEWS_META_KEY, ()))
    return tuple(found)


def view_includes(active: ViewTag, declared: ViewTag) -> bool:
    """Return True when the active view covers a declared view."""
    if isinstance(active, str) or isinstance(declared, str):
        return active == declared
    return issubclass(active, declared)


def is_visible(declared: tuple[ViewTag, ...], active: ViewTag | None) -> bool:
    """Return True when a field with ``declared`` views is visible.

    Parameters
    ----------
    declared
        Views the field declares; empty means unscoped.
    active
        View in effect for the call, ``None`` for no filtering.

    Returns
    -------
    bool
        Whether the field takes part in encoding/decoding.
    """
    if active is None or not declared:
        return True
    return any(view_includes(active, view) for view in declared)


__all__ = [
    "VIEWS_META_KEY",
    "View",
    "ViewTag",
    "is_view_tag",
    "is_visible",
    "view_includes",
    "views_from_metadata",
    "visible_in",
]
