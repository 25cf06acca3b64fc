"""
Stored checkpoint record.

A stored checkpoint captures:
- Decoded checkpoint message fields
- Origin sender (trusted emitter) that delivered it
- Reception timestamp
keyed by the transport message id.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from ..codec.message import CheckpointMessage
from ..core.ids import content_hash, normalize_bytes32


@dataclass(frozen=True)
class StoredCheckpoint:
    """
    Immutable stored checkpoint.

    Fields:
        message_id: Transport-assigned message id (storage key)
        cid, tag, expires_at, creator, created_at, source_chain_id, revoked,
        version: Decoded CheckpointMessage fields
        emitter: Origin sender identifier (32 bytes, 0x hex)
        received_at: Reception timestamp
    """
    message_id: str
    version: int
    cid: str
    tag: str
    expires_at: int
    creator: str
    created_at: int
    source_chain_id: int
    revoked: bool
    emitter: str
    received_at: int

    @classmethod
    def from_message(
        cls, message_id: str, message: CheckpointMessage, emitter: str, received_at: int
    ) -> "StoredCheckpoint":
        return cls(
            message_id=normalize_bytes32(message_id),
            version=message.version,
            cid=message.cid,
            tag=message.tag,
            expires_at=message.expires_at,
            creator=message.creator,
            created_at=message.created_at,
            source_chain_id=message.source_chain_id,
            revoked=message.revoked,
            emitter=normalize_bytes32(emitter),
            received_at=received_at,
        )

    @property
    def content_hash(self) -> str:
        return content_hash(self.cid)

    @property
    def message(self) -> CheckpointMessage:
        return CheckpointMessage(
            version=self.version,
            cid=self.cid,
            tag=self.tag,
            expires_at=self.expires_at,
            creator=self.creator,
            created_at=self.created_at,
            source_chain_id=self.source_chain_id,
            revoked=self.revoked,
        )

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredCheckpoint":
        return cls(
            message_id=data["message_id"],
            version=data["version"],
            cid=data["cid"],
            tag=data["tag"],
            expires_at=data["expires_at"],
            creator=data["creator"],
            created_at=data["created_at"],
            source_chain_id=data["source_chain_id"],
            revoked=data.get("revoked", False),
            emitter=data["emitter"],
            received_at=data["received_at"],
        )
