"""
RingLink node identities.

Self-derived, verifiable identities for overlay nodes: an Ed25519 keypair,
a device address derived from the public key, and a canonical text record.
"""

from .config import IdentityConfig, load_config
from .derivation import ADDRESS_HASH_ROUNDS, compute_address
from .exceptions import (
    Base64DecodeError,
    CryptoProviderError,
    HexDecodeError,
    IdentityError,
    IdentityMismatchError,
    InvalidLengthError,
    RecordFormatError,
)
from .identity import Identity, PublicIdentity, verify_signature
from .types import DeviceID, FixedIdentifier

__all__ = [
    # Identities
    "Identity",
    "PublicIdentity",
    "verify_signature",
    # Settings
    "IdentityConfig",
    "load_config",
    # Addresses
    "ADDRESS_HASH_ROUNDS",
    "DeviceID",
    "FixedIdentifier",
    "compute_address",
    # Exceptions
    "IdentityError",
    "InvalidLengthError",
    "HexDecodeError",
    "Base64DecodeError",
    "CryptoProviderError",
    "RecordFormatError",
    "IdentityMismatchError",
]
