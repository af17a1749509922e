"""Reusable type definitions for RingLink identities."""

from .base import RecordModel, StrictBaseModel
from .identifier import DeviceID, FixedIdentifier

__all__ = [
    "DeviceID",
    "FixedIdentifier",
    "RecordModel",
    "StrictBaseModel",
]
