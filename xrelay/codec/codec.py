"""
Checkpoint message codec.

Two wire layouts share the same leading fields:

    v1 (legacy): (uint8 version, string cid, bytes32 tag, uint256 expires_at,
                  address creator, uint256 created_at, uint16 source_chain_id)
    v2:          v1 + (bool revoked)

Decoding dispatches on the leading version word. Only an exact match with
VERSION selects the v2 layout; every other value is parsed with the legacy
layout and revoked defaults to False. An unknown future version therefore
decodes as legacy and is then rejected by validation on the version check.
"""

from typing import Optional

from ..core.errors import (
    InvalidCIDError,
    InvalidCreatorError,
    InvalidExpirationError,
    InvalidSourceChainError,
    InvalidTimestampError,
    InvalidVersionError,
    MessageTooOldError,
    SemanticValidationError,
)
from ..core.ids import ADDRESS_SIZE, WORD_SIZE, is_zero, sha256_hex, to_bytes
from .abi import (
    WordReader,
    encode_address,
    encode_bool,
    encode_bytes32,
    encode_tuple,
    encode_uint,
)
from .constants import (
    HEAD_WORDS,
    LEGACY_HEAD_WORDS,
    MAX_CID_LENGTH,
    MAX_CLOCK_SKEW,
    MAX_MESSAGE_AGE,
    MIN_CID_LENGTH,
    VERSION,
)
from .message import CheckpointMessage

_CID_WORD = 1


def _head(message: CheckpointMessage) -> list:
    return [
        encode_uint(message.version, 8),
        b"",  # cid offset, filled by encode_tuple
        encode_bytes32(message.tag),
        encode_uint(message.expires_at),
        encode_address(message.creator),
        encode_uint(message.created_at),
        encode_uint(message.source_chain_id, 16),
    ]


def encode(message: CheckpointMessage) -> bytes:
    """
    Encode a message with the current (v2) layout.

    Identical input always yields identical bytes.

    Raises:
        ValueError: If a field does not fit its wire type
    """
    head = _head(message) + [encode_bool(message.revoked)]
    return encode_tuple(head, _CID_WORD, message.cid)


def encode_legacy(message: CheckpointMessage) -> bytes:
    """Encode with the legacy 7-field layout (no revoked flag)."""
    return encode_tuple(_head(message), _CID_WORD, message.cid)


def peek_version(data: bytes) -> int:
    """
    Read the leading uint8 version discriminant.

    Raises:
        MalformedMessageError: If data is shorter than one word or dirty
    """
    reader = WordReader(data)
    reader.require_words(1)
    return reader.uint(0, 8)


def decode(data: bytes) -> CheckpointMessage:
    """
    Decode payload bytes into a CheckpointMessage.

    Raises:
        MalformedMessageError: If bytes are truncated or not canonically encoded
    """
    reader = WordReader(data)
    version = peek_version(data)

    if version == VERSION:
        reader.require_words(HEAD_WORDS)
        revoked = reader.boolean(7)
    else:
        reader.require_words(LEGACY_HEAD_WORDS)
        revoked = False

    return CheckpointMessage(
        version=version,
        cid=reader.string(_CID_WORD),
        tag=reader.bytes32(2),
        expires_at=reader.uint(3),
        creator=reader.address(4),
        created_at=reader.uint(5),
        source_chain_id=reader.uint(6, 16),
        revoked=revoked,
    )


def validate_with_errors(
    message: CheckpointMessage, now: int, max_clock_skew: int = MAX_CLOCK_SKEW
) -> None:
    """
    Check a decoded message against the reception-time instant `now`.

    Checks run in a fixed order and the first failure is raised.

    Raises:
        InvalidVersionError: version is not exactly VERSION
        InvalidCIDError: cid empty or outside [MIN_CID_LENGTH, MAX_CID_LENGTH] bytes
        InvalidTimestampError: created_at more than max_clock_skew in the future
        InvalidExpirationError: expires_at is not strictly after now
        InvalidCreatorError: creator is the zero address
        InvalidSourceChainError: source_chain_id is zero
        MessageTooOldError: now - created_at exceeds MAX_MESSAGE_AGE
    """
    if message.version != VERSION:
        raise InvalidVersionError(f"unsupported version {message.version}, expected {VERSION}")

    cid_len = len(message.cid.encode("utf-8"))
    if cid_len == 0 or cid_len < MIN_CID_LENGTH or cid_len > MAX_CID_LENGTH:
        raise InvalidCIDError(
            f"cid length {cid_len} outside [{MIN_CID_LENGTH}, {MAX_CID_LENGTH}]"
        )

    if message.created_at > now + max_clock_skew:
        raise InvalidTimestampError(f"created_at {message.created_at} is in the future (now={now})")

    if message.expires_at <= now:
        raise InvalidExpirationError(f"expires_at {message.expires_at} is not after now={now}")

    if is_zero(message.creator):
        raise InvalidCreatorError("creator is the zero address")

    if message.source_chain_id == 0:
        raise InvalidSourceChainError("source chain id is zero")

    if is_too_old(message, now):
        raise MessageTooOldError(
            f"message age {now - message.created_at}s exceeds {MAX_MESSAGE_AGE}s"
        )


def validate(
    message: CheckpointMessage, now: int, max_clock_skew: int = MAX_CLOCK_SKEW
) -> bool:
    """Boolean form of validate_with_errors."""
    try:
        validate_with_errors(message, now, max_clock_skew)
    except SemanticValidationError:
        return False
    return True


def validation_error(
    message: CheckpointMessage, now: int, max_clock_skew: int = MAX_CLOCK_SKEW
) -> Optional[SemanticValidationError]:
    """Return the first validation failure, or None if the message is valid."""
    try:
        validate_with_errors(message, now, max_clock_skew)
    except SemanticValidationError as ex:
        return ex
    return None


def is_expired(message: CheckpointMessage, now: int) -> bool:
    return message.expires_at <= now


def is_too_old(message: CheckpointMessage, now: int) -> bool:
    return now - message.created_at > MAX_MESSAGE_AGE


def checkpoint_id(message: CheckpointMessage) -> str:
    """
    Quasi-identifier over (creator, tag, source chain).

    Convenience lookup key only. Storage is keyed by the transport message id.
    """
    packed = (
        to_bytes(message.creator, ADDRESS_SIZE)
        + to_bytes(message.tag, WORD_SIZE)
        + message.source_chain_id.to_bytes(2, "big")
    )
    return sha256_hex(packed)


def message_hash(message: CheckpointMessage) -> str:
    """Integrity hash over every encoded field, for auditing."""
    return sha256_hex(encode(message))


def tag_from_text(text: str) -> str:
    """
    Right-pad a short UTF-8 label into a 32-byte tag.

    Raises:
        ValueError: If the label is longer than 31 bytes
    """
    raw = text.encode("utf-8")
    if len(raw) > WORD_SIZE - 1:
        raise ValueError("tag text must be at most 31 bytes")
    return "0x" + raw.ljust(WORD_SIZE, b"\x00").hex()


def tag_to_text(tag: str) -> str:
    """Inverse of tag_from_text. Non-text tags come back with replacement chars."""
    return to_bytes(tag, WORD_SIZE).rstrip(b"\x00").decode("utf-8", errors="replace")
