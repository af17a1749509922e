"""
Address derivation for RingLink identities.

A device address is computed from the raw public signing key by iterated
hashing:

    digest = BLAKE2b-512(public_key)
    repeat 31 times: digest = BLAKE2b-512(digest)
    address = digest[:DeviceID.LENGTH]

There is no salt and no per-round domain separation. Existing addresses
depend on this exact construction, so it must not change.
"""

from __future__ import annotations

from typing import Final, TypeVar

from .crypto import DIGEST_SIZE, blake2b512
from .types import DeviceID, FixedIdentifier

ADDRESS_HASH_ROUNDS: Final = 32
"""Total number of BLAKE2b-512 applications."""

IdentifierT = TypeVar("IdentifierT", bound=FixedIdentifier)


def compute_address(
    public_key: bytes,
    identifier: type[IdentifierT] = DeviceID,  # type: ignore[assignment]
) -> IdentifierT:
    """
    Compute the address of a public key.

    Args:
        public_key: Raw public key bytes. Any length is accepted.
        identifier: Identifier type to produce. Defaults to `DeviceID`.

    Returns:
        The first `identifier.LENGTH` bytes of the final digest.

    Raises:
        ValueError: If the identifier is longer than the digest.
        CryptoProviderError: If BLAKE2b-512 is unavailable.
    """
    if identifier.LENGTH > DIGEST_SIZE:
        raise ValueError(
            f"{identifier.__name__} is {identifier.LENGTH} bytes, "
            f"longer than the {DIGEST_SIZE}-byte digest"
        )

    digest = blake2b512(public_key)
    for _ in range(ADDRESS_HASH_ROUNDS - 1):
        digest = blake2b512(digest)

    return identifier.from_bytes(digest[: identifier.LENGTH])
