"""Runtime settings for the marshalling facade."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from automarshal.registry import DEFAULT_DISCRIMINATOR_FIELD
from utils.env_utils import env_bool, env_int, env_text

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "AUTOMARSHAL"


@dataclass(frozen=True)
class MarshallingSettings:
    """Settings that do not depend on registered types.

    ``strict`` controls leaf conversion: when False, numeric and boolean
    values may also be read from JSON strings.
    """

    discriminator_field: str = DEFAULT_DISCRIMINATOR_FIELD
    strict: bool = True
    pretty_indent: int = 2


def settings_from_env(prefix: str = ENV_PREFIX) -> MarshallingSettings:
    """Build settings from ``{prefix}_*`` environment variables.

    Recognised variables are ``{prefix}_DISCRIMINATOR_FIELD``,
    ``{prefix}_STRICT`` and ``{prefix}_PRETTY_INDENT``.

    Parameters
    ----------
    prefix
        Environment variable prefix.

    Returns
    -------
    MarshallingSettings
        Settings with environment overrides applied.
    """
    defaults = MarshallingSettings()
    indent = env_int(f"{prefix}_PRETTY_INDENT", default=defaults.pretty_indent)
    if indent < 0:
        _LOGGER.warning("Ignoring negative %s_PRETTY_INDENT=%d", prefix, indent)
        indent = defaults.pretty_indent
    return MarshallingSettings(
        discriminator_field=env_text(
            f"{prefix}_DISCRIMINATOR_FIELD",
            default=defaults.discriminator_field,
        ),
        strict=env_bool(f"{prefix}_STRICT", default=defaults.strict),
        pretty_indent=indent,
    )


__all__ = ["ENV_PREFIX", "MarshallingSettings", "settings_from_env"]
