"""
Checkpoint message codec.

Provides:
- CheckpointMessage model
- Deterministic ABI encoding (v2 and legacy v1 layouts)
- Version-dispatching decoder
- Ordered semantic validation with typed errors
- Derived checkpoint id and integrity hash
"""

from .constants import (
    VERSION,
    LEGACY_VERSION,
    MIN_CID_LENGTH,
    MAX_CID_LENGTH,
    MAX_MESSAGE_AGE,
    MAX_CLOCK_SKEW,
)
from ..core.ids import content_hash
from .message import CheckpointMessage
from .codec import (
    encode,
    encode_legacy,
    decode,
    peek_version,
    validate,
    validate_with_errors,
    validation_error,
    is_expired,
    is_too_old,
    checkpoint_id,
    message_hash,
    tag_from_text,
    tag_to_text,
)

__all__ = [
    "VERSION",
    "LEGACY_VERSION",
    "MIN_CID_LENGTH",
    "MAX_CID_LENGTH",
    "MAX_MESSAGE_AGE",
    "MAX_CLOCK_SKEW",
    "CheckpointMessage",
    "encode",
    "encode_legacy",
    "decode",
    "peek_version",
    "validate",
    "validate_with_errors",
    "validation_error",
    "is_expired",
    "is_too_old",
    "checkpoint_id",
    "message_hash",
    "content_hash",
    "tag_from_text",
    "tag_to_text",
]
