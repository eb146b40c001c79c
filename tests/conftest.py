"""Shared pytest fixtures for marshalling tests."""

from __future__ import annotations

import pytest

from automarshal import AutoMarshalling
from tests.test_helpers.marshalling_models import build_config


@pytest.fixture
def marshalling() -> AutoMarshalling:
    """Return a facade with the sample family and views registered.

    Returns
    -------
    AutoMarshalling
        Facade over a freshly built, frozen config.
    """
    return AutoMarshalling(build_config())


@pytest.fixture(autouse=True)
def _clear_automarshal_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AUTOMARSHAL_DISCRIMINATOR_FIELD", "AUTOMARSHAL_STRICT", "AUTOMARSHAL_PRETTY_INDENT"):
        monkeypatch.delenv(name, raising=False)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register contract snapshot options."""
    parser.addoption(
        "--update-goldens",
        action="store_true",
        default=False,
        help="Regenerate JSON contract snapshots.",
    )
