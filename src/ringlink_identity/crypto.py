"""
Cryptographic primitives for RingLink identities.

RingLink uses:
- Ed25519 for identity signatures (deterministic, 64-byte detached signatures)
- BLAKE2b-512 for address derivation

Every call into the `cryptography` backend goes through this module so that
backend failures surface as `CryptoProviderError` with the failing operation
named, instead of leaking backend exception types to callers.
"""

from __future__ import annotations

from typing import Final

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .exceptions import CryptoProviderError

PRIVATE_KEY_SIZE: Final = 32
"""Raw Ed25519 private key (seed) size in bytes."""

PUBLIC_KEY_SIZE: Final = 32
"""Raw Ed25519 public key size in bytes."""

SIGNATURE_SIZE: Final = 64
"""Ed25519 signature size (R || S, each 32 bytes)."""

DIGEST_SIZE: Final = 64
"""BLAKE2b-512 output size in bytes."""


def generate_keypair() -> Ed25519PrivateKey:
    """
    Generate a fresh Ed25519 keypair.

    Returns:
        Private key handle; the public half is available from it.
    """
    return Ed25519PrivateKey.generate()


def import_private(data: bytes) -> Ed25519PrivateKey:
    """
    Load an Ed25519 private key from its raw 32-byte form.

    Raises:
        CryptoProviderError: If `data` is not a valid raw private key.
    """
    try:
        return Ed25519PrivateKey.from_private_bytes(bytes(data))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CryptoProviderError("import_private", str(exc)) from exc


def import_public(data: bytes) -> Ed25519PublicKey:
    """
    Load an Ed25519 public key from its raw 32-byte form.

    Raises:
        CryptoProviderError: If `data` is not a valid raw public key.
    """
    try:
        return Ed25519PublicKey.from_public_bytes(bytes(data))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CryptoProviderError("import_public", str(exc)) from exc


def export_private(key: Ed25519PrivateKey) -> bytes:
    """Return the raw 32-byte private key."""
    return key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def export_public(key: Ed25519PrivateKey | Ed25519PublicKey) -> bytes:
    """Return the raw 32-byte public key of either half of a keypair."""
    if isinstance(key, Ed25519PrivateKey):
        key = key.public_key()
    return key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def sign(key: Ed25519PrivateKey, message: bytes) -> bytes:
    """
    Sign a message with Ed25519.

    The scheme hashes internally, so `message` is signed as-is.

    Returns:
        64-byte detached signature.
    """
    return key.sign(bytes(message))


def verify(key: Ed25519PublicKey, message: bytes, signature: bytes) -> bool:
    """
    Verify an Ed25519 signature.

    A well-formed signature that does not match yields False. A signature of
    the wrong size is not an Ed25519 signature at all and is rejected.

    Returns:
        True if the signature is valid, False otherwise.

    Raises:
        CryptoProviderError: If `signature` is not 64 bytes long.
    """
    if len(signature) != SIGNATURE_SIZE:
        raise CryptoProviderError(
            "verify",
            f"signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}",
        )

    try:
        key.verify(bytes(signature), bytes(message))
        return True
    except InvalidSignature:
        return False


def blake2b512(data: bytes) -> bytes:
    """
    Compute BLAKE2b with a 64-byte digest.

    Raises:
        CryptoProviderError: If the backend does not provide BLAKE2b-512.
    """
    try:
        h = hashes.Hash(hashes.BLAKE2b(DIGEST_SIZE))
    except UnsupportedAlgorithm as exc:
        raise CryptoProviderError("hash", f"BLAKE2b-512 unavailable: {exc}") from exc

    h.update(bytes(data))
    return h.finalize()
