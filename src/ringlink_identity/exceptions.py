"""Exception hierarchy for RingLink identities."""

from __future__ import annotations


class IdentityError(Exception):
    """
    Base exception for all identity-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidLengthError(IdentityError, ValueError):
    """
    Raised when a byte sequence does not match an identifier's fixed length.

    Attributes:
        type_name: The identifier type being constructed.
        expected: The exact number of bytes required.
        actual: The number of bytes received.
    """

    def __init__(self, type_name: str, *, expected: int, actual: int) -> None:
        self.type_name = type_name
        self.expected = expected
        self.actual = actual

        super().__init__(f"{type_name} expects exactly {expected} bytes, got {actual}")


class _TextDecodeError(IdentityError, ValueError):
    """Shared shape of the text codec errors."""

    encoding: str = "text"

    def __init__(self, detail: str, *, field: str | None = None) -> None:
        self.field = field
        self.detail = detail

        if field:
            msg = f"Invalid {self.encoding} in field '{field}': {detail}"
        else:
            msg = f"Invalid {self.encoding}: {detail}"

        super().__init__(msg)


class HexDecodeError(_TextDecodeError):
    """
    Raised when hex text cannot be decoded.

    Attributes:
        field: The record field being decoded (if any).
        detail: What the decoder rejected.
    """

    encoding = "hex"


class Base64DecodeError(_TextDecodeError):
    """
    Raised when base64 text cannot be decoded.

    Attributes:
        field: The record field being decoded (if any).
        detail: What the decoder rejected.
    """

    encoding = "base64"


class CryptoProviderError(IdentityError):
    """
    Raised when the cryptography backend rejects an operation.

    Covers unsupported algorithms, malformed key imports, and signatures
    that are structurally invalid for Ed25519.

    Attributes:
        operation: The provider operation that failed (e.g. "import_public").
        detail: Description of what went wrong.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail

        super().__init__(f"{operation} failed: {detail}")


class RecordFormatError(IdentityError, ValueError):
    """
    Raised when a serialized record does not have the expected shape.

    Attributes:
        type_name: The identity kind being decoded.
        detail: Description of the structural problem.
    """

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail

        super().__init__(f"Malformed {type_name} record: {detail}")


class IdentityMismatchError(IdentityError):
    """
    Raised when a declared id does not match the id derived from its key.

    Only raised when id validation is enabled.

    Attributes:
        declared: Hex of the id carried by the record.
        derived: Hex of the id computed from the public key.
    """

    def __init__(self, declared: str, derived: str) -> None:
        self.declared = declared
        self.derived = derived

        super().__init__(f"Declared id {declared} does not match derived id {derived}")
