"""
Fixed-length identifier types.

A `FixedIdentifier` is an immutable run of exactly `LENGTH` bytes whose
canonical text form is lowercase hex. Concrete kinds are declared either by
subclassing with a `LENGTH` or by parametrizing the base:

    class DeviceID(FixedIdentifier):
        LENGTH = 10

    NodeKey = FixedIdentifier[32]

Both routes produce the same behavior: byte-wise equality, ordering and
hashing, strict length checks, and a hex codec.

Decoding errors are `HexDecodeError` and `InvalidLengthError` when calling
`parse` or `try_from` directly. Pydantic models wrap them in a
`ValidationError`.
"""

from __future__ import annotations

import binascii
from functools import cache
from typing import Any, ClassVar, Iterable

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from ..exceptions import HexDecodeError, InvalidLengthError


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a bytes-like value to raw bytes.

    Accepts:
      - `bytes` / `bytearray` / `memoryview`
      - Iterables of integers in [0, 255]

    Raises:
      TypeError if the value is not bytes-like.
      ValueError if an iterable holds values outside [0, 255].
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, Iterable) and not isinstance(value, str):
        # bytes(bytearray(iterable)) enforces each element is an int in 0..255
        return bytes(bytearray(value))
    raise TypeError(f"Expected a bytes-like value, got {type(value).__name__}")


class FixedIdentifier(bytes):
    """
    A base class for fixed-length identifiers that inherits from `bytes`.

    Subclasses set:
      - `LENGTH`: exact number of bytes the instance must contain.

    Instances are immutable byte objects with strict length checking.
    Equality, ordering and hashing are those of the underlying bytes.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = None) -> Self:
        """
        Create and validate a new identifier.

        Args:
            value: Bytes-like data of exactly `LENGTH` bytes, hex text, or
                `None` for the all-zero identifier.

        Raises:
            InvalidLengthError: If the byte length differs from `LENGTH`.
            HexDecodeError: If `value` is text that is not valid hex.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        if value is None:
            return super().__new__(cls, bytes(cls.LENGTH))
        if isinstance(value, str):
            return cls.parse(value)

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise InvalidLengthError(cls.__name__, expected=cls.LENGTH, actual=len(b))
        return super().__new__(cls, b)

    def __class_getitem__(cls, length: int) -> type[FixedIdentifier]:
        """Return the identifier type of exactly `length` bytes."""
        if not isinstance(length, int) or isinstance(length, bool) or length <= 0:
            raise TypeError(f"FixedIdentifier length must be a positive int, got {length!r}")
        return _parametrize(length)

    @classmethod
    def zero(cls) -> Self:
        """Create a new identifier filled with zero bytes."""
        return cls(None)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """
        Wrap an exactly-sized byte string.

        Raises:
            InvalidLengthError: If `data` is not `LENGTH` bytes long.
        """
        return cls(data)

    @classmethod
    def try_from(cls, data: bytes | bytearray | memoryview | Iterable[int]) -> Self:
        """
        Build an identifier from a byte sequence of unknown length.

        Raises:
            InvalidLengthError: If the sequence is not `LENGTH` bytes long.
        """
        return cls(_coerce_to_bytes(data))

    @classmethod
    def parse(cls, text: str, *, field: str | None = None) -> Self:
        """
        Decode hex text (either case) into an identifier.

        No prefix or whitespace is accepted: the text must be exactly
        `2 * LENGTH` hex characters.

        Args:
            text: Hex text to decode.
            field: Name of the record field being decoded, for error context.

        Raises:
            HexDecodeError: If the text holds non-hex characters or has odd length.
            InvalidLengthError: If the decoded bytes are not `LENGTH` long.
        """
        try:
            raw = binascii.unhexlify(text)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise HexDecodeError(str(exc), field=field) from exc

        if len(raw) != cls.LENGTH:
            raise InvalidLengthError(cls.__name__, expected=cls.LENGTH, actual=len(raw))
        return super().__new__(cls, raw)

    def to_buffer(self) -> bytearray:
        """Return a mutable copy of the raw bytes."""
        return bytearray(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Accepts an existing instance, hex text, or exactly `LENGTH` raw bytes.
        Serializes to the canonical hex string.

        Bad hex inside a model surfaces as pydantic's `ValidationError`, not
        as `HexDecodeError`. The error raised by `parse` is kept in the
        error context: `exc.errors()[0]["ctx"]["error"]`.
        """
        from_text = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(cls.parse),
            ]
        )
        from_bytes = core_schema.chain_schema(
            [
                core_schema.bytes_schema(min_length=cls.LENGTH, max_length=cls.LENGTH),
                core_schema.no_info_plain_validator_function(cls),
            ]
        )

        return core_schema.json_or_python_schema(
            # JSON only ever carries the hex form.
            json_schema=from_text,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_text, from_bytes],
                mode="left_to_right",
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(lambda x: x.hex()),
        )

    def __str__(self) -> str:
        """Return the canonical hex form."""
        return self.hex()

    def __repr__(self) -> str:
        """Return the hex form labelled with the identifier kind."""
        return f"{type(self).__name__}({self.hex()})"


@cache
def _parametrize(length: int) -> type[FixedIdentifier]:
    return type(f"FixedIdentifier{length}", (FixedIdentifier,), {"LENGTH": length})


class DeviceID(FixedIdentifier):
    """Address of a RingLink device, derived from its signing key."""

    LENGTH = 10
