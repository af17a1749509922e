"""
RingLink node identities.

An identity is an Ed25519 keypair plus the device address derived from its
public key. The private `Identity` signs; the shareable `PublicIdentity`
verifies. The two kinds share no base class: both delegate verification to
`crypto.verify`, and `verify_signature` covers callers holding only raw
public key bytes.

Typical flow:
    1. A node calls `Identity.generate()` once and stores `to_json()`.
    2. It hands `public_identity().to_json()` to its peers.
    3. Peers rebuild a `PublicIdentity` and check signatures from `sign()`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from . import crypto
from .config import IdentityConfig, resolve_validate_id
from .derivation import compute_address
from .exceptions import IdentityMismatchError
from .types import DeviceID, FixedIdentifier

__all__ = [
    "Identity",
    "PublicIdentity",
    "check_id",
    "verify_signature",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Private RingLink identity.

    Equality and hashing cover the id and the raw private key, never the
    key handle.

    Attributes:
        id: Device address derived from the public key.
        private_key: Raw 32-byte Ed25519 private key, kept for re-export.
        key: The Ed25519 private key handle.
    """

    id: DeviceID
    private_key: bytes
    key: Ed25519PrivateKey = field(compare=False)

    @classmethod
    def generate(cls) -> Identity:
        """
        Generate a new random identity.

        Returns:
            A fresh identity whose id is derived from its public key.
        """
        key = crypto.generate_keypair()
        device_id = compute_address(crypto.export_public(key))
        logger.debug("Generated identity %s", device_id)
        return cls(id=device_id, private_key=crypto.export_private(key), key=key)

    @classmethod
    def from_private_key(cls, data: bytes) -> Identity:
        """
        Rebuild an identity from a raw private key.

        The id is derived from the key, so the result always satisfies
        `verify_id()`.

        Args:
            data: Raw 32-byte Ed25519 private key.

        Raises:
            CryptoProviderError: If `data` is not a valid private key.
        """
        key = crypto.import_private(data)
        device_id = compute_address(crypto.export_public(key))
        return cls(id=device_id, private_key=crypto.export_private(key), key=key)

    def sign(self, data: bytes) -> bytes:
        """
        Sign data with this identity.

        Ed25519 is deterministic: the same key and data always give the same
        signature.

        Returns:
            64-byte detached signature.
        """
        return crypto.sign(self.key, data)

    def verify(self, data: bytes, signature: bytes) -> bool:
        """
        Verify a signature against this identity's public key.

        Raises:
            CryptoProviderError: If `signature` is not 64 bytes long.
        """
        return crypto.verify(self.key.public_key(), data, signature)

    @property
    def public_key(self) -> bytes:
        """The raw 32-byte public key."""
        return crypto.export_public(self.key)

    def public_identity(self) -> PublicIdentity:
        """Return the shareable half of this identity, reusing the known id."""
        return PublicIdentity.new_with_id(self.id, self.public_key, validate_id=False)

    def verify_id(self) -> bool:
        """Check that the id matches the one derived from the public key."""
        return compute_address(self.public_key) == self.id

    def to_dict(self) -> dict[str, str]:
        """Encode as an `{"id", "sign"}` record."""
        from .serialization import encode_identity

        return encode_identity(self).model_dump()

    def to_json(self) -> str:
        """Encode as a JSON `{"id", "sign"}` record."""
        from .serialization import encode_identity

        return encode_identity(self).model_dump_json()

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        validate_id: bool | None = None,
        config: IdentityConfig | None = None,
    ) -> Identity:
        """
        Decode an `{"id", "sign"}` record.

        Args:
            data: The record fields.
            validate_id: Re-derive and check the id. Overrides `config`.
            config: Settings to use when `validate_id` is not given. Defaults
                to the `RINGLINK_VALIDATE_ID` environment setting.
        """
        from .serialization import IdentityRecord, decode_identity, parse_record

        record = parse_record(IdentityRecord, data, type_name="Identity")
        return decode_identity(record, validate_id=validate_id, config=config)

    @classmethod
    def from_json(
        cls,
        text: str | bytes,
        *,
        validate_id: bool | None = None,
        config: IdentityConfig | None = None,
    ) -> Identity:
        """Decode a JSON `{"id", "sign"}` record. See `from_dict`."""
        from .serialization import IdentityRecord, decode_identity, parse_record

        record = parse_record(IdentityRecord, text, type_name="Identity")
        return decode_identity(record, validate_id=validate_id, config=config)

    def __repr__(self) -> str:
        """Show the id and public key; the private key is never rendered."""
        return f"Identity(id={self.id!r}, sign={self.public_key.hex()})"


@dataclass(frozen=True, slots=True)
class PublicIdentity:
    """
    Public half of a RingLink identity.

    Equality and hashing cover the id and the raw public key.

    Attributes:
        id: Device address. Derived when built with `new`, carried as given
            when built with `new_with_id` or decoded from a record.
        public_key: Raw 32-byte Ed25519 public key.
        key: The Ed25519 public key handle.
    """

    id: DeviceID
    public_key: bytes
    key: Ed25519PublicKey = field(compare=False)

    @classmethod
    def new(cls, public_key: bytes) -> PublicIdentity:
        """
        Build a public identity from a bare public key.

        The id is derived from the key.

        Args:
            public_key: Raw public key, normally from `Identity.public_key`.

        Raises:
            CryptoProviderError: If the bytes are not a valid Ed25519 public key.
        """
        key = crypto.import_public(public_key)
        return cls(id=compute_address(public_key), public_key=bytes(public_key), key=key)

    @classmethod
    def new_with_id(
        cls,
        device_id: FixedIdentifier | bytes,
        public_key: bytes,
        *,
        validate_id: bool | None = None,
        config: IdentityConfig | None = None,
    ) -> PublicIdentity:
        """
        Build a public identity from a public key and an already-known id.

        Args:
            device_id: The id to carry. Raw bytes are taken as a `DeviceID`.
            public_key: Raw Ed25519 public key.
            validate_id: Re-derive and check the id. Overrides `config`.
            config: Settings to use when `validate_id` is not given. Defaults
                to the `RINGLINK_VALIDATE_ID` environment setting.

        Raises:
            InvalidLengthError: If raw `device_id` bytes are not a device id.
            CryptoProviderError: If the bytes are not a valid Ed25519 public key.
            IdentityMismatchError: If validation is on and the id does not match.
        """
        if not isinstance(device_id, FixedIdentifier):
            device_id = DeviceID.try_from(device_id)

        key = crypto.import_public(public_key)
        if resolve_validate_id(validate_id, config):
            check_id(device_id, public_key)
        return cls(id=device_id, public_key=bytes(public_key), key=key)

    def verify(self, data: bytes, signature: bytes) -> bool:
        """
        Verify a signature against this public key.

        Raises:
            CryptoProviderError: If `signature` is not 64 bytes long.
        """
        return crypto.verify(self.key, data, signature)

    def verify_id(self) -> bool:
        """Check that the id matches the one derived from the public key."""
        return compute_address(self.public_key) == self.id

    def to_dict(self) -> dict[str, str]:
        """Encode as an `{"id", "sign"}` record."""
        from .serialization import encode_public_identity

        return encode_public_identity(self).model_dump()

    def to_json(self) -> str:
        """Encode as a JSON `{"id", "sign"}` record."""
        from .serialization import encode_public_identity

        return encode_public_identity(self).model_dump_json()

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        validate_id: bool | None = None,
        config: IdentityConfig | None = None,
    ) -> PublicIdentity:
        """
        Decode an `{"id", "sign"}` record received from a peer.

        Args:
            data: The record fields.
            validate_id: Re-derive and check the id. Overrides `config`.
            config: Settings to use when `validate_id` is not given. Defaults
                to the `RINGLINK_VALIDATE_ID` environment setting.
        """
        from .serialization import PublicIdentityRecord, decode_public_identity, parse_record

        record = parse_record(PublicIdentityRecord, data, type_name="PublicIdentity")
        return decode_public_identity(record, validate_id=validate_id, config=config)

    @classmethod
    def from_json(
        cls,
        text: str | bytes,
        *,
        validate_id: bool | None = None,
        config: IdentityConfig | None = None,
    ) -> PublicIdentity:
        """Decode a JSON `{"id", "sign"}` record. See `from_dict`."""
        from .serialization import PublicIdentityRecord, decode_public_identity, parse_record

        record = parse_record(PublicIdentityRecord, text, type_name="PublicIdentity")
        return decode_public_identity(record, validate_id=validate_id, config=config)

    def __repr__(self) -> str:
        return f"PublicIdentity(id={self.id!r}, sign={self.public_key.hex()})"


def check_id(device_id: FixedIdentifier, public_key: bytes) -> None:
    """
    Check a declared id against the id derived from `public_key`.

    Raises:
        IdentityMismatchError: If the two differ.
    """
    derived = compute_address(public_key, type(device_id))
    if derived != device_id:
        logger.warning("Declared id %s does not match derived id %s", device_id, derived)
        raise IdentityMismatchError(device_id.hex(), derived.hex())


def verify_signature(public_key: bytes, data: bytes, signature: bytes) -> bool:
    """
    Verify a signature against a raw Ed25519 public key.

    Args:
        public_key: Raw 32-byte public key.
        data: Original message that was signed.
        signature: 64-byte detached signature.

    Returns:
        True if signature is valid, False otherwise.

    Raises:
        CryptoProviderError: If the key or the signature is malformed.
    """
    return crypto.verify(crypto.import_public(public_key), data, signature)
