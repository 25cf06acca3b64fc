"""
Reception pipeline states.

Success path:
    RECEIVED -> TRANSPORT_VERIFIED -> REPLAY_CHECKED -> EMITTER_CHECKED ->
    DECODED -> VALIDATED -> UNIQUENESS_CHECKED -> STORED -> CONSUMED

Any state may end in REJECTED. A rejection records the last state reached.
"""

from enum import Enum


class ReceptionStage(str, Enum):
    RECEIVED = "Received"
    TRANSPORT_VERIFIED = "TransportVerified"
    REPLAY_CHECKED = "ReplayChecked"
    EMITTER_CHECKED = "EmitterChecked"
    DECODED = "Decoded"
    VALIDATED = "Validated"
    UNIQUENESS_CHECKED = "UniquenessChecked"
    STORED = "Stored"
    CONSUMED = "Consumed"
    REJECTED = "Rejected"
