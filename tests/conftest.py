"""Pytest configuration and shared fixtures."""

import os

import pytest
from hypothesis import settings

if "RINGLINK_VALIDATE_ID" not in os.environ:
    os.environ["RINGLINK_VALIDATE_ID"] = "0"

from ringlink_identity import Identity  # noqa: E402

# Key generation and 32 hash rounds per example can exceed the default deadline.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")


@pytest.fixture
def identity() -> Identity:
    """A freshly generated identity."""
    return Identity.generate()


@pytest.fixture
def other_identity() -> Identity:
    """A second, unrelated identity."""
    return Identity.generate()
