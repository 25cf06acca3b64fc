"""
Tests for checkpoint payload encoding, decoding and validation.

Critical: decoding must reject any non-canonical input, and validation
must report the first failing rule in a fixed order.
"""

import pytest

from xrelay.codec import (
    MAX_CID_LENGTH,
    MAX_CLOCK_SKEW,
    MAX_MESSAGE_AGE,
    MIN_CID_LENGTH,
    VERSION,
    checkpoint_id,
    decode,
    encode,
    encode_legacy,
    is_expired,
    is_too_old,
    message_hash,
    peek_version,
    tag_from_text,
    tag_to_text,
    validate,
    validate_with_errors,
    validation_error,
)
from xrelay.core.errors import (
    InvalidCIDError,
    InvalidCreatorError,
    InvalidExpirationError,
    InvalidSourceChainError,
    InvalidTimestampError,
    InvalidVersionError,
    MalformedMessageError,
    MessageTooOldError,
    RejectionReason,
)
from xrelay.core.ids import ZERO_ADDRESS
from xrelay.tests.factories import CID, DAY, NOW, make_message, make_payload


def _set_word(data: bytes, index: int, value: bytes) -> bytes:
    return data[: index * 32] + value.rjust(32, b"\x00") + data[(index + 1) * 32 :]


def test_encode_decode_round_trip():
    """Decoding an encoded message yields the same message."""
    msg = make_message(revoked=True)
    assert decode(encode(msg)) == msg


def test_encoding_is_deterministic():
    """Same message must produce identical bytes."""
    assert encode(make_message()) == encode(make_message())


def test_encoded_layout():
    """Head of 8 words, string offset pointing past the head, padded tail."""
    data = make_payload()

    # 8 head words + length word + 59 cid bytes padded to 64
    assert len(data) == 8 * 32 + 32 + 64
    assert int.from_bytes(data[0:32], "big") == VERSION
    assert int.from_bytes(data[32:64], "big") == 8 * 32
    assert int.from_bytes(data[256:288], "big") == len(CID)


def test_legacy_layout_decodes_with_revoked_false():
    """Seven-field legacy payloads decode with revoked defaulted."""
    msg = make_message(version=1)
    decoded = decode(encode_legacy(msg))

    assert decoded.version == 1
    assert decoded.revoked is False
    assert decoded.cid == CID


def test_legacy_payload_fails_version_check():
    """A decoded legacy message is rejected by validation."""
    decoded = decode(encode_legacy(make_message(version=1)))

    with pytest.raises(InvalidVersionError):
        validate_with_errors(decoded, NOW)


def test_unknown_version_falls_back_to_legacy_layout():
    """Version 3 decodes with the legacy layout, then fails validation."""
    data = encode(make_message(version=3, revoked=True))
    decoded = decode(data)

    assert peek_version(data) == 3
    assert decoded.version == 3
    assert decoded.revoked is False
    assert decoded.cid == CID
    with pytest.raises(InvalidVersionError):
        validate_with_errors(decoded, NOW)


def test_legacy_layout_with_current_version_is_malformed():
    """Version 2 selects the 8-word head; a 7-word payload has no valid bool there."""
    data = encode_legacy(make_message(version=VERSION))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_empty_payload():
    with pytest.raises(MalformedMessageError):
        decode(b"")


def test_decode_truncated_payload():
    """Truncation anywhere must raise MalformedMessageError, never IndexError."""
    data = make_payload()
    for cut in (1, 31, 32, 100, 255, 256, 300, len(data) - 1):
        with pytest.raises(MalformedMessageError):
            decode(data[:cut])


def test_decode_rejects_oversized_version_word():
    data = _set_word(make_payload(), 0, (256).to_bytes(2, "big"))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_dirty_address_bits():
    data = bytearray(make_payload())
    data[4 * 32] = 0xFF

    with pytest.raises(MalformedMessageError):
        decode(bytes(data))


def test_decode_rejects_non_canonical_bool():
    data = _set_word(make_payload(), 7, b"\x02")

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_chain_id_overflow():
    data = _set_word(make_payload(), 6, (70000).to_bytes(3, "big"))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_out_of_range_string_offset():
    data = _set_word(make_payload(), 1, (32_000).to_bytes(2, "big"))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_unaligned_string_offset():
    data = _set_word(make_payload(), 1, (257).to_bytes(2, "big"))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_string_length_past_end():
    data = _set_word(make_payload(), 8, (1000).to_bytes(2, "big"))

    with pytest.raises(MalformedMessageError):
        decode(data)


def test_decode_rejects_dirty_string_padding():
    data = bytearray(make_payload())
    data[-1] = 0x01

    with pytest.raises(MalformedMessageError):
        decode(bytes(data))


def test_decode_rejects_invalid_utf8():
    data = bytearray(make_payload())
    data[9 * 32] = 0xFF

    with pytest.raises(MalformedMessageError):
        decode(bytes(data))


def test_malformed_error_reason():
    with pytest.raises(MalformedMessageError) as exc:
        decode(b"\x00" * 10)
    assert exc.value.reason == RejectionReason.MALFORMED


def test_encode_rejects_values_that_do_not_fit():
    with pytest.raises(ValueError):
        encode(make_message(source_chain_id=70000))
    with pytest.raises(ValueError):
        encode(make_message(version=256))
    with pytest.raises(ValueError):
        encode(make_message(expires_at=-1))


def test_valid_message_passes():
    msg = make_message()

    assert validate(msg, NOW) is True
    assert validation_error(msg, NOW) is None
    validate_with_errors(msg, NOW)


@pytest.mark.parametrize(
    "overrides,error",
    [
        ({"version": 1}, InvalidVersionError),
        ({"version": 3}, InvalidVersionError),
        ({"cid": ""}, InvalidCIDError),
        ({"cid": "a" * (MIN_CID_LENGTH - 1)}, InvalidCIDError),
        ({"cid": "a" * (MAX_CID_LENGTH + 1)}, InvalidCIDError),
        ({"created_at": NOW + MAX_CLOCK_SKEW + 1}, InvalidTimestampError),
        ({"expires_at": NOW}, InvalidExpirationError),
        ({"expires_at": NOW - 1}, InvalidExpirationError),
        ({"creator": ZERO_ADDRESS}, InvalidCreatorError),
        ({"source_chain_id": 0}, InvalidSourceChainError),
        ({"created_at": NOW - MAX_MESSAGE_AGE - 1}, MessageTooOldError),
    ],
)
def test_validation_errors(overrides, error):
    """Each rule raises its own error type."""
    msg = make_message(**overrides)

    with pytest.raises(error):
        validate_with_errors(msg, NOW)
    assert validate(msg, NOW) is False
    assert isinstance(validation_error(msg, NOW), error)


def test_validation_boundaries_accepted():
    """Values exactly on each boundary are accepted."""
    for msg in (
        make_message(cid="a" * MIN_CID_LENGTH),
        make_message(cid="a" * MAX_CID_LENGTH),
        make_message(created_at=NOW + MAX_CLOCK_SKEW),
        make_message(expires_at=NOW + 1),
        make_message(created_at=NOW - MAX_MESSAGE_AGE + 1),
        make_message(created_at=NOW - MAX_MESSAGE_AGE),
    ):
        assert validate(msg, NOW), msg


def test_cid_length_counts_utf8_bytes():
    """A cid of 34 characters but 102 bytes is too long."""
    msg = make_message(cid="日" * 34)

    with pytest.raises(InvalidCIDError):
        validate_with_errors(msg, NOW)


def test_validation_order():
    """The first failing rule wins."""
    msg = make_message(version=1, cid="short", creator=ZERO_ADDRESS, source_chain_id=0)
    assert isinstance(validation_error(msg, NOW), InvalidVersionError)

    msg = make_message(cid="short", expires_at=NOW - 1)
    assert isinstance(validation_error(msg, NOW), InvalidCIDError)

    msg = make_message(created_at=NOW + DAY, expires_at=NOW - 1)
    assert isinstance(validation_error(msg, NOW), InvalidTimestampError)

    msg = make_message(expires_at=NOW, creator=ZERO_ADDRESS)
    assert isinstance(validation_error(msg, NOW), InvalidExpirationError)

    msg = make_message(creator=ZERO_ADDRESS, source_chain_id=0)
    assert isinstance(validation_error(msg, NOW), InvalidCreatorError)

    msg = make_message(source_chain_id=0, created_at=NOW - MAX_MESSAGE_AGE - 1)
    assert isinstance(validation_error(msg, NOW), InvalidSourceChainError)


def test_custom_clock_skew():
    msg = make_message(created_at=NOW + 10)

    assert validate(msg, NOW, max_clock_skew=10)
    assert not validate(msg, NOW, max_clock_skew=0)


def test_is_expired_and_too_old():
    msg = make_message()

    assert not is_expired(msg, NOW)
    assert is_expired(msg, NOW + DAY)
    assert not is_too_old(msg, NOW + MAX_MESSAGE_AGE)
    assert is_too_old(msg, NOW + MAX_MESSAGE_AGE + 1)


def test_checkpoint_id_ignores_cid_and_times():
    """Checkpoint id depends only on creator, tag and source chain."""
    a = make_message()
    b = make_message(cid="b" * 50, expires_at=NOW + 2 * DAY, created_at=NOW - 5)

    assert checkpoint_id(a) == checkpoint_id(b)


def test_checkpoint_id_differs_per_chain_tag_and_creator():
    base = checkpoint_id(make_message())

    assert checkpoint_id(make_message(source_chain_id=6)) != base
    assert checkpoint_id(make_message(tag=tag_from_text("other"))) != base
    assert checkpoint_id(make_message(creator="0x" + "44" * 20)) != base


def test_message_hash_covers_every_field():
    base = message_hash(make_message())

    assert message_hash(make_message()) == base
    assert message_hash(make_message(revoked=True)) != base
    assert message_hash(make_message(created_at=NOW - 1)) != base
    assert base.startswith("0x") and len(base) == 66


def test_tag_text_round_trip():
    tag = tag_from_text("test")

    assert tag == "0x" + b"test".hex() + "00" * 28
    assert tag_to_text(tag) == "test"


def test_tag_text_too_long():
    tag_from_text("x" * 31)
    with pytest.raises(ValueError):
        tag_from_text("x" * 32)


def test_message_normalizes_identifiers():
    """Creator and tag are stored as lowercase fixed-width hex."""
    msg = make_message(creator="0x" + "AB" * 20, tag="0x01")

    assert msg.creator == "0x" + "ab" * 20
    assert msg.tag == "0x" + "00" * 31 + "01"
