"""
Canonical text records for RingLink identities.

Both identity kinds serialize to the same two-field shape:

    {"id": "<hex device id>", "sign": "<standard base64 of the raw key>"}

For an `Identity` the key is the raw private key; for a `PublicIdentity` it
is the raw public key. Field names and order are part of the wire contract.

Decoding runs in a fixed order so that the first problem is the one
reported:
    1. record shape  -> RecordFormatError
    2. `id` hex      -> HexDecodeError / InvalidLengthError
    3. `sign` base64 -> Base64DecodeError
    4. key import    -> CryptoProviderError

The `id` is trusted as given unless id validation is enabled, in which case
a mismatch raises IdentityMismatchError.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from . import crypto
from .config import IdentityConfig, resolve_validate_id
from .exceptions import Base64DecodeError, RecordFormatError
from .identity import Identity, PublicIdentity, check_id
from .types import DeviceID, RecordModel

__all__ = [
    "IdentityRecord",
    "PublicIdentityRecord",
    "decode_identity",
    "decode_public_identity",
    "encode_identity",
    "encode_public_identity",
    "parse_record",
]

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=RecordModel)


class IdentityRecord(RecordModel):
    """Serialized private identity."""

    id: str
    """Hex of the device id."""

    sign: str
    """Standard base64 of the raw private key."""


class PublicIdentityRecord(RecordModel):
    """Serialized public identity."""

    id: str
    """Hex of the device id."""

    sign: str
    """Standard base64 of the raw public key."""


def parse_record(model: type[RecordT], data: Any, *, type_name: str) -> RecordT:
    """
    Validate the shape of a record.

    Args:
        model: Record model to validate against.
        data: JSON text or bytes, or an already-decoded mapping.
        type_name: Identity kind, for error context.

    Raises:
        RecordFormatError: If the data is not an object with string
            `id` and `sign` fields.
    """
    try:
        if isinstance(data, (str, bytes, bytearray)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise RecordFormatError(type_name, detail) from exc


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(text: str, *, field: str) -> bytes:
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise Base64DecodeError(str(exc), field=field) from exc

    # Non-zero padding bits decode to the same bytes as the canonical text.
    if _b64encode(raw) != text:
        raise Base64DecodeError("non-canonical encoding", field=field)
    return raw


def encode_identity(identity: Identity) -> IdentityRecord:
    """Build the record for a private identity."""
    return IdentityRecord(id=identity.id.hex(), sign=_b64encode(identity.private_key))


def decode_identity(
    record: IdentityRecord,
    *,
    validate_id: bool | None = None,
    config: IdentityConfig | None = None,
) -> Identity:
    """
    Rebuild a private identity from its record.

    Args:
        record: The validated record.
        validate_id: Re-derive and check the id. Overrides `config`.
        config: Settings to use when `validate_id` is not given. Defaults
            to the `RINGLINK_VALIDATE_ID` environment setting.

    Raises:
        HexDecodeError: If `id` is not hex.
        InvalidLengthError: If `id` does not decode to a device id.
        Base64DecodeError: If `sign` is not canonical standard base64.
        CryptoProviderError: If `sign` does not hold an Ed25519 private key.
        IdentityMismatchError: If validation is on and the id does not match.
    """
    device_id = DeviceID.parse(record.id, field="id")
    raw = _b64decode(record.sign, field="sign")
    key = crypto.import_private(raw)

    if resolve_validate_id(validate_id, config):
        check_id(device_id, crypto.export_public(key))

    logger.debug("Loaded identity %s", device_id)
    return Identity(id=device_id, private_key=raw, key=key)


def encode_public_identity(identity: PublicIdentity) -> PublicIdentityRecord:
    """Build the record for a public identity."""
    return PublicIdentityRecord(id=identity.id.hex(), sign=_b64encode(identity.public_key))


def decode_public_identity(
    record: PublicIdentityRecord,
    *,
    validate_id: bool | None = None,
    config: IdentityConfig | None = None,
) -> PublicIdentity:
    """
    Rebuild a public identity from a record received from a peer.

    Args:
        record: The validated record.
        validate_id: Re-derive and check the id. Overrides `config`.
        config: Settings to use when `validate_id` is not given. Defaults
            to the `RINGLINK_VALIDATE_ID` environment setting.

    Raises:
        HexDecodeError: If `id` is not hex.
        InvalidLengthError: If `id` does not decode to a device id.
        Base64DecodeError: If `sign` is not canonical standard base64.
        CryptoProviderError: If `sign` does not hold an Ed25519 public key.
        IdentityMismatchError: If validation is on and the id does not match.
    """
    device_id = DeviceID.parse(record.id, field="id")
    raw = _b64decode(record.sign, field="sign")

    identity = PublicIdentity.new_with_id(
        device_id, raw, validate_id=resolve_validate_id(validate_id, config)
    )
    logger.debug("Loaded public identity %s", device_id)
    return identity
