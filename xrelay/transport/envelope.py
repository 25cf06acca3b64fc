"""
Transport envelope model and binary layout.

Layout:
    version u8 (=1) | signature 64 bytes | body
    body = timestamp u32 | nonce u32 | chain u16 | emitter 32 bytes |
           sequence u64 | consistency u8 | payload

The message id is SHA-256(SHA-256(body)). It is assigned here, by the
transport layer, and the reception pipeline never recomputes it from the
payload.
"""

import hashlib
import struct
from dataclasses import dataclass
from typing import Optional

from ..core.ids import HexLike, WORD_SIZE, normalize_bytes32, to_bytes

ENVELOPE_VERSION = 1
SIGNATURE_SIZE = 64

_BODY_HEADER = struct.Struct(">IIH32sQB")
_PREFIX_SIZE = 1 + SIGNATURE_SIZE


@dataclass(frozen=True)
class TransportEnvelope:
    """
    Result of transport verification.

    Fields:
        chain_id: Origin transport chain id
        emitter: Origin sender identifier (32 bytes, 0x hex)
        sequence: Emitter's sequence number
        payload: Opaque application payload (checkpoint message bytes)
        message_id: Transport-assigned hash (replay key)
        valid: Whether the transport accepted the envelope
        reason: Failure reason when valid is False
    """
    chain_id: int
    emitter: str
    sequence: int
    payload: bytes
    message_id: str
    valid: bool = True
    reason: Optional[str] = None
    timestamp: int = 0
    nonce: int = 0
    consistency_level: int = 0

    @classmethod
    def invalid(cls, reason: str) -> "TransportEnvelope":
        return cls(
            chain_id=0,
            emitter="0x" + "00" * WORD_SIZE,
            sequence=0,
            payload=b"",
            message_id="0x" + "00" * WORD_SIZE,
            valid=False,
            reason=reason,
        )


@dataclass(frozen=True)
class ParsedEnvelope:
    signature: bytes
    body: bytes
    envelope: TransportEnvelope


def envelope_body(
    chain_id: int,
    emitter: HexLike,
    sequence: int,
    payload: bytes,
    timestamp: int = 0,
    nonce: int = 0,
    consistency_level: int = 1,
) -> bytes:
    header = _BODY_HEADER.pack(
        timestamp, nonce, chain_id, to_bytes(emitter, WORD_SIZE), sequence, consistency_level
    )
    return header + bytes(payload)


def body_message_id(body: bytes) -> str:
    return "0x" + hashlib.sha256(hashlib.sha256(body).digest()).hexdigest()


def assemble(signature: bytes, body: bytes) -> bytes:
    if len(signature) != SIGNATURE_SIZE:
        raise ValueError(f"signature must be {SIGNATURE_SIZE} bytes")
    return bytes([ENVELOPE_VERSION]) + signature + body


def parse_envelope(raw: bytes) -> ParsedEnvelope:
    """
    Split raw transport bytes into signature, body and envelope fields.

    Raises:
        ValueError: If raw is truncated or has an unknown envelope version
    """
    if len(raw) < _PREFIX_SIZE + _BODY_HEADER.size:
        raise ValueError(f"envelope truncated: {len(raw)} bytes")
    if raw[0] != ENVELOPE_VERSION:
        raise ValueError(f"unsupported envelope version {raw[0]}")

    signature = bytes(raw[1:_PREFIX_SIZE])
    body = bytes(raw[_PREFIX_SIZE:])
    timestamp, nonce, chain_id, emitter, sequence, consistency = _BODY_HEADER.unpack_from(body)

    envelope = TransportEnvelope(
        chain_id=chain_id,
        emitter=normalize_bytes32(emitter),
        sequence=sequence,
        payload=body[_BODY_HEADER.size :],
        message_id=body_message_id(body),
        timestamp=timestamp,
        nonce=nonce,
        consistency_level=consistency,
    )
    return ParsedEnvelope(signature=signature, body=body, envelope=envelope)
