"""
Global configuration for RingLink identities.

Settings are read from the environment so that a deployment can tighten
record loading without code changes. Callers that prefer explicit settings
pass an `IdentityConfig` to the decoding entry points instead.
"""

import os

from .types import StrictBaseModel

_TRUE_VALUES: list[str] = ["1", "true", "yes", "on"]
_FALSE_VALUES: list[str] = ["0", "false", "no", "off", ""]


def _parse_flag(name: str, default: str = "0") -> bool:
    raw = os.environ.get(name, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(
        f"Invalid {name} environment variable: '{raw}'. "
        f"Supported values: {_TRUE_VALUES + _FALSE_VALUES[:-1]}"
    )


class IdentityConfig(StrictBaseModel):
    """Explicit bundle of the identity settings."""

    validate_id: bool = False
    """
    Check `id == compute_address(public_key)` whenever a record is loaded.

    Disabled by default: records carry their id and loading trusts it, which
    keeps existing stores loadable without repeating the address derivation.
    """


def load_config() -> IdentityConfig:
    """Read the identity settings from the current environment."""
    return IdentityConfig(validate_id=_parse_flag("RINGLINK_VALIDATE_ID"))


def resolve_validate_id(
    validate_id: bool | None = None, config: IdentityConfig | None = None
) -> bool:
    """
    Decide whether a load re-derives the id.

    Precedence: an explicit `validate_id`, then `config`, then the
    environment as it is at call time.
    """
    if validate_id is not None:
        return validate_id
    if config is None:
        config = load_config()
    return config.validate_id
