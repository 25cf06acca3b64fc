"""
Fixed-width identifiers and stable hashing.

Addresses, emitter ids, tags and message ids are handled internally as raw
bytes and exposed as lowercase 0x-prefixed hex strings of their fixed width.
"""

import hashlib
from typing import Union

ADDRESS_SIZE = 20
WORD_SIZE = 32

ZERO_ADDRESS = "0x" + "00" * ADDRESS_SIZE
ZERO_BYTES32 = "0x" + "00" * WORD_SIZE

HexLike = Union[str, bytes, bytearray]


def to_bytes(value: HexLike, size: int) -> bytes:
    """
    Convert a hex string or raw bytes into exactly `size` bytes.

    Shorter inputs are left-padded with zeros, matching how a 20-byte
    address is widened into a 32-byte emitter identifier.

    Raises:
        ValueError: If the value is not valid hex or is wider than `size`
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value[2:] if value[:2] in ("0x", "0X") else value
        if len(text) % 2:
            text = "0" + text
        try:
            raw = bytes.fromhex(text)
        except ValueError as ex:
            raise ValueError(f"invalid hex value: {value!r}") from ex
    else:
        raise TypeError(f"expected hex string or bytes, got {type(value).__name__}")

    if len(raw) > size:
        raise ValueError(f"value is {len(raw)} bytes, expected at most {size}")
    return raw.rjust(size, b"\x00")


def to_hex(value: HexLike, size: int) -> str:
    """Normalize to a lowercase 0x-prefixed hex string of `size` bytes."""
    return "0x" + to_bytes(value, size).hex()


def normalize_address(value: HexLike) -> str:
    return to_hex(value, ADDRESS_SIZE)


def normalize_bytes32(value: HexLike) -> str:
    return to_hex(value, WORD_SIZE)


def is_zero(value: HexLike) -> bool:
    """True if every byte of the identifier is zero."""
    if isinstance(value, str):
        text = value[2:] if value[:2] in ("0x", "0X") else value
        return set(text) <= {"0"}
    return not any(value)


def sha256_hex(data: bytes) -> str:
    """SHA-256 digest as a 0x-prefixed hex string."""
    return "0x" + hashlib.sha256(data).hexdigest()


def content_hash(cid: str) -> str:
    """
    Hash of a content identifier, used for indexing and comparison.

    Example:
        content_hash("bafy...") -> "0x5c1e..."
    """
    return sha256_hex(cid.encode("utf-8"))

