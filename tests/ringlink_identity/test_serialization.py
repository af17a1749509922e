"""Tests for identity text records."""

import base64
import json

import pytest

from ringlink_identity import (
    Base64DecodeError,
    CryptoProviderError,
    DeviceID,
    HexDecodeError,
    Identity,
    IdentityMismatchError,
    InvalidLengthError,
    PublicIdentity,
    RecordFormatError,
)
from ringlink_identity.config import IdentityConfig
from ringlink_identity.serialization import (
    IdentityRecord,
    decode_identity,
    encode_identity,
    encode_public_identity,
)

_B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


class TestIdentityRecord:
    """Tests for private identity records."""

    def test_record_fields(self, identity: Identity) -> None:
        record = identity.to_dict()
        assert list(record) == ["id", "sign"]
        assert record["id"] == identity.id.hex()
        assert base64.b64decode(record["sign"]) == identity.private_key

    def test_json_shape(self, identity: Identity) -> None:
        text = identity.to_json()
        assert text == (
            f'{{"id":"{identity.id.hex()}",'
            f'"sign":"{base64.b64encode(identity.private_key).decode()}"}}'
        )

    def test_roundtrip(self, identity: Identity) -> None:
        restored = Identity.from_json(identity.to_json())
        assert restored == identity
        assert restored.to_json() == identity.to_json()

    def test_dict_roundtrip(self, identity: Identity) -> None:
        assert Identity.from_dict(identity.to_dict()) == identity

    def test_ping_scenario(self, identity: Identity) -> None:
        """A restored identity's public half accepts the original's signature."""
        restored = Identity.from_json(identity.to_json())
        signature = identity.sign(b"ping")
        assert restored.public_identity().verify(b"ping", signature)

    def test_id_trusted_by_default(self, identity: Identity) -> None:
        record = identity.to_dict() | {"id": DeviceID.zero().hex()}
        restored = Identity.from_dict(record, validate_id=False)
        assert restored.id == DeviceID.zero()
        assert not restored.verify_id()

    def test_id_validated_on_request(self, identity: Identity) -> None:
        record = identity.to_dict() | {"id": DeviceID.zero().hex()}
        with pytest.raises(IdentityMismatchError):
            Identity.from_dict(record, validate_id=True)

    def test_environment_default(self, identity: Identity, monkeypatch) -> None:
        monkeypatch.setenv("RINGLINK_VALIDATE_ID", "1")
        record = identity.to_dict() | {"id": DeviceID.zero().hex()}
        with pytest.raises(IdentityMismatchError):
            Identity.from_dict(record)
        assert Identity.from_dict(identity.to_dict()) == identity

    def test_config_object(self, identity: Identity) -> None:
        record = identity.to_dict() | {"id": DeviceID.zero().hex()}
        with pytest.raises(IdentityMismatchError):
            Identity.from_dict(record, config=IdentityConfig(validate_id=True))
        with pytest.raises(IdentityMismatchError):
            decode_identity(IdentityRecord(**record), config=IdentityConfig(validate_id=True))

    def test_explicit_flag_overrides_config(self, identity: Identity, monkeypatch) -> None:
        monkeypatch.setenv("RINGLINK_VALIDATE_ID", "1")
        record = identity.to_dict() | {"id": DeviceID.zero().hex()}
        restored = Identity.from_dict(
            record, validate_id=False, config=IdentityConfig(validate_id=True)
        )
        assert restored.id == DeviceID.zero()
        relaxed = Identity.from_dict(record, config=IdentityConfig(validate_id=False))
        assert relaxed.id == DeviceID.zero()

    def test_module_functions(self, identity: Identity) -> None:
        record = encode_identity(identity)
        assert isinstance(record, IdentityRecord)
        assert decode_identity(record) == identity

    def test_unknown_fields_ignored(self, identity: Identity) -> None:
        record = identity.to_dict() | {"comment": "laptop"}
        assert Identity.from_dict(record) == identity


class TestPublicIdentityRecord:
    """Tests for public identity records."""

    def test_record_fields(self, identity: Identity) -> None:
        public = identity.public_identity()
        record = public.to_dict()
        assert record == {
            "id": identity.id.hex(),
            "sign": base64.b64encode(identity.public_key).decode(),
        }
        assert encode_public_identity(public).model_dump() == record

    def test_roundtrip(self, identity: Identity) -> None:
        public = identity.public_identity()
        restored = PublicIdentity.from_json(public.to_json())
        assert restored == public
        assert restored.to_json() == public.to_json()

    def test_peer_verifies(self, identity: Identity) -> None:
        peer_view = PublicIdentity.from_json(identity.public_identity().to_json())
        assert peer_view.verify(b"ping", identity.sign(b"ping"))

    def test_id_validated_on_request(self, identity: Identity, other_identity: Identity) -> None:
        record = identity.public_identity().to_dict() | {"id": other_identity.id.hex()}
        assert PublicIdentity.from_dict(record, validate_id=False).id == other_identity.id
        with pytest.raises(IdentityMismatchError):
            PublicIdentity.from_dict(record, validate_id=True)

    def test_id_validated_by_config(self, identity: Identity, other_identity: Identity) -> None:
        text = PublicIdentity.new_with_id(
            other_identity.id, identity.public_key, validate_id=False
        ).to_json()
        with pytest.raises(IdentityMismatchError):
            PublicIdentity.from_json(text, config=IdentityConfig(validate_id=True))
        assert PublicIdentity.from_json(text, config=IdentityConfig()).id == other_identity.id


@pytest.mark.parametrize("cls", [Identity, PublicIdentity])
class TestMalformedRecords:
    """Malformed input yields typed errors, never crashes."""

    def _valid(self, cls, identity: Identity) -> dict[str, str]:
        if cls is Identity:
            return identity.to_dict()
        return identity.public_identity().to_dict()

    @pytest.mark.parametrize("bad_id", ["zz" * 10, "abc", "not hex at all"])
    def test_non_hex_id(self, cls, identity: Identity, bad_id: str) -> None:
        record = self._valid(cls, identity) | {"id": bad_id}
        with pytest.raises(HexDecodeError) as exc_info:
            cls.from_dict(record)
        assert exc_info.value.field == "id"

    @pytest.mark.parametrize("bad_id", ["", "00", "00" * 11])
    def test_wrong_length_id(self, cls, identity: Identity, bad_id: str) -> None:
        record = self._valid(cls, identity) | {"id": bad_id}
        with pytest.raises(InvalidLengthError):
            cls.from_dict(record)

    @pytest.mark.parametrize("bad_sign", ["***", "abc", "AAAA AAAA", "A"])
    def test_invalid_base64(self, cls, identity: Identity, bad_sign: str) -> None:
        record = self._valid(cls, identity) | {"sign": bad_sign}
        with pytest.raises(Base64DecodeError) as exc_info:
            cls.from_dict(record)
        assert exc_info.value.field == "sign"

    def test_non_canonical_base64(self, cls, identity: Identity) -> None:
        record = self._valid(cls, identity)
        sign = record["sign"]
        # 32 bytes encode to 43 symbols and one "=", leaving two unused low bits.
        assert sign.endswith("=") and not sign.endswith("==")
        index = _B64_ALPHABET.index(sign[-2]) ^ 1
        altered = sign[:-2] + _B64_ALPHABET[index] + "="
        assert base64.b64decode(altered) == base64.b64decode(sign)

        with pytest.raises(Base64DecodeError) as exc_info:
            cls.from_dict(record | {"sign": altered})
        assert exc_info.value.field == "sign"

    def test_unpadded_base64(self, cls, identity: Identity) -> None:
        record = self._valid(cls, identity)
        with pytest.raises(Base64DecodeError):
            cls.from_dict(record | {"sign": record["sign"].rstrip("=")})

    @pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
    def test_invalid_key(self, cls, identity: Identity, size: int) -> None:
        record = self._valid(cls, identity) | {"sign": base64.b64encode(bytes(size)).decode()}
        with pytest.raises(CryptoProviderError):
            cls.from_dict(record)

    def test_id_checked_before_sign(self, cls, identity: Identity) -> None:
        with pytest.raises(HexDecodeError):
            cls.from_dict({"id": "nope", "sign": "***"})

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not json",
            "[]",
            "null",
            '{"id": "00"}',
            '{"sign": "AAAA"}',
            '{"id": 1, "sign": "AAAA"}',
        ],
    )
    def test_bad_shape(self, cls, text: str) -> None:
        with pytest.raises(RecordFormatError):
            cls.from_json(text)

    def test_bad_shape_dict(self, cls) -> None:
        with pytest.raises(RecordFormatError):
            cls.from_dict({"id": None, "sign": None})

    def test_errors_are_value_errors(self, cls, identity: Identity) -> None:
        record = self._valid(cls, identity) | {"id": "zz"}
        with pytest.raises(ValueError):
            cls.from_dict(record)

    def test_json_bytes_input(self, cls, identity: Identity) -> None:
        record = self._valid(cls, identity)
        restored = cls.from_json(json.dumps(record).encode())
        assert restored.to_dict() == record
