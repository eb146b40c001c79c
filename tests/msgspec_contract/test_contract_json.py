"""JSON wire contract tests for marshalled payloads."""

from __future__ import annotations

from automarshal import AutoMarshalling
from oauth_server import AuthRequest, ClientId
from tests.msgspec_contract._support.goldens import GOLDENS_DIR, assert_text_snapshot
from tests.test_helpers.marshalling_models import (
    Address,
    FirstChild,
    PolymorphicParent,
    Private,
    Profile,
    Public,
    SecondChild,
    build_config,
)


def _profile() -> Profile:
    return Profile(
        name="ada",
        tags=["admin"],
        address=Address(street="Main", number=7),
        nickname="countess",
        score=9.5,
        labels={"rank": 1},
    )


def test_json_contract_polymorphic_list(*, update_goldens: bool) -> None:
    """Snapshot the tagged wire form of a mixed polymorphic list."""
    marshalling = AutoMarshalling(build_config())
    items = [FirstChild("hello"), SecondChild("world")]
    text = marshalling.serialize(items)
    assert_text_snapshot(
        path=GOLDENS_DIR / "polymorphic_list.json",
        text=text,
        update=update_goldens,
    )
    assert marshalling.deserialize(text, list[PolymorphicParent]) == items


def test_json_contract_profile_views(*, update_goldens: bool) -> None:
    """Snapshot the field sets each view exposes."""
    marshalling = AutoMarshalling(build_config())
    profile = _profile()
    assert_text_snapshot(
        path=GOLDENS_DIR / "profile.public.json",
        text=marshalling.pretty(profile, view=Public),
        update=update_goldens,
    )
    private_text = marshalling.pretty(profile, view=Private)
    assert_text_snapshot(
        path=GOLDENS_DIR / "profile.private.json",
        text=private_text,
        update=update_goldens,
    )
    assert marshalling.deserialize(private_text, Profile) == profile


def test_json_contract_auth_request(*, update_goldens: bool) -> None:
    """Snapshot the camelCase wire form of an authorization request."""
    marshalling = AutoMarshalling()
    request = AuthRequest(
        client=ClientId(value="client-1"),
        scopes=("openid", "profile"),
        redirect_uri="https://app.example.com/callback",
        state="af0ifjsldkj",
    )
    text = marshalling.pretty(request)
    assert_text_snapshot(
        path=GOLDENS_DIR / "auth_request.json",
        text=text,
        update=update_goldens,
    )
    assert marshalling.deserialize(text, AuthRequest) == request
