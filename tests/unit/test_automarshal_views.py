"""View visibility and projection tests."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Annotated

import msgspec
import pytest

from automarshal import AutoMarshalling, MarshallingConfig, ParseError, View, visible_in
from automarshal.views import VIEWS_META_KEY, is_visible, view_includes, views_from_metadata
from tests.test_helpers.marshalling_models import (
    Address,
    ArbObjectWithView,
    Private,
    Profile,
    Public,
    RegisteredViewObject,
)


class Admin(View):
    """Unrelated view outside the Public/Private hierarchy."""


@dataclass(frozen=True)
class Ticket:
    title: str
    note: str
    assignee: str


class Priority(enum.Enum):
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class Alert:
    title: str
    priority: Annotated[Priority, visible_in("ops")]
    raised_at: Annotated[dt.datetime | None, visible_in("ops")]


@dataclass(frozen=True)
class AuditEntry:
    action: str
    at: Annotated[dt.datetime, visible_in("ops")]


def test_view_hierarchy() -> None:
    """Ensure subclass views include their parents, not the reverse."""
    assert view_includes(Private, Public)
    assert not view_includes(Public, Private)
    assert not view_includes(Admin, Public)
    assert view_includes("ops", "ops")
    assert not view_includes("ops", Public)


def test_unscoped_fields_are_always_visible() -> None:
    """Ensure fields without declared views are visible under every view."""
    assert is_visible((), Admin)
    assert is_visible((Private,), None)
    assert is_visible((Public, "ops"), "ops")
    assert not is_visible((Private,), Public)


def test_visible_in_metadata() -> None:
    """Ensure visible_in stores views as msgspec metadata."""
    meta = visible_in(Private, "ops")
    assert isinstance(meta, msgspec.Meta)
    assert meta.extra == {VIEWS_META_KEY: (Private, "ops")}
    assert views_from_metadata((msgspec.Meta(ge=0), meta)) == (Private, "ops")


def test_visible_in_rejects_non_views() -> None:
    """Ensure only View subclasses and strings are accepted."""
    with pytest.raises(TypeError):
        visible_in(int)  # type: ignore[arg-type]


def test_unrelated_view_sees_unscoped_fields_only(marshalling: AutoMarshalling) -> None:
    """Ensure a view outside the hierarchy hides every scoped field."""
    assert marshalling.serialize(ArbObjectWithView(3, 5), view=Admin) == "{}"


def test_registered_view_table(marshalling: AutoMarshalling) -> None:
    """Ensure registration-level views filter dataclass fields."""
    obj = RegisteredViewObject(priv=3, pub=5, shared="both")
    assert marshalling.serialize(obj, view=Public) == '{"pub":5,"shared":"both"}'
    assert marshalling.serialize(obj, view=Private) == '{"priv":3,"pub":5,"shared":"both"}'
    text = marshalling.serialize(obj, view=Private)
    projected = marshalling.deserialize(text, RegisteredViewObject, view=Public)
    assert projected == RegisteredViewObject(priv=0, pub=5, shared="both")


def test_registered_views_override_annotations() -> None:
    """Ensure the view table takes precedence over visible_in annotations."""
    config = MarshallingConfig()
    config.register_views(ArbObjectWithView, priv=(Public,))
    marshalling = AutoMarshalling(config)
    assert marshalling.serialize(ArbObjectWithView(3, 5), view=Public) == '{"priv":3,"pub":5}'


def test_string_view_tags() -> None:
    """Ensure plain string tags match by equality."""
    config = MarshallingConfig()
    config.register_views(Ticket, note="support", assignee=("support", "ops"))
    marshalling = AutoMarshalling(config)
    ticket = Ticket(title="broken", note="call back", assignee="sam")
    assert marshalling.serialize(ticket, view="ops") == '{"title":"broken","assignee":"sam"}'
    assert marshalling.serialize(ticket, view="support") == marshalling.serialize(ticket)
    restored = marshalling.deserialize(marshalling.serialize(ticket), Ticket, view="ops")
    assert restored == Ticket(title="broken", note="", assignee="sam")


def test_projection_uses_defaults_then_zero_values(marshalling: AutoMarshalling) -> None:
    """Ensure hidden fields take declared defaults, else zero values of their type."""
    profile = Profile(
        name="ada",
        tags=["admin"],
        address=Address(street="Main", number=7),
        nickname="countess",
        score=9.5,
        labels={"rank": 1},
    )
    text = marshalling.serialize(profile)
    assert marshalling.serialize(profile, view=Public) == '{"name":"ada"}'
    projected = marshalling.deserialize(text, Profile, view=Public)
    assert projected == Profile(
        name="ada",
        tags=[],
        address=Address(street="", number=0),
        nickname=None,
        score=1.5,
        labels={},
    )
    assert marshalling.deserialize(text, Profile, view=Private) == profile


def test_invalid_view_argument(marshalling: AutoMarshalling) -> None:
    """Ensure a non-view argument is rejected before encoding."""
    with pytest.raises(TypeError):
        marshalling.serialize(ArbObjectWithView(3, 5), view=object())  # type: ignore[arg-type]


def test_hidden_enum_takes_first_member(marshalling: AutoMarshalling) -> None:
    """Ensure hidden enum fields default to their first member."""
    alert = Alert(title="disk", priority=Priority.HIGH, raised_at=dt.datetime(2025, 1, 1, tzinfo=dt.UTC))
    text = marshalling.serialize(alert)
    assert marshalling.deserialize(text, Alert, view="support") == Alert(
        title="disk",
        priority=Priority.LOW,
        raised_at=None,
    )
    assert marshalling.deserialize(text, Alert, view="ops") == alert


def test_hidden_datetime_has_no_zero_value(marshalling: AutoMarshalling) -> None:
    """Ensure hidden datetime fields without defaults are reported."""
    text = '{"action":"login","at":"2025-01-01T00:00:00Z"}'
    with pytest.raises(ParseError, match="has no zero value") as excinfo:
        marshalling.deserialize(text, AuditEntry, view="support")
    assert excinfo.value.path == "$.at"
