"""
Receipt emitted for every accepted checkpoint.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from ..store.model import StoredCheckpoint


@dataclass(frozen=True)
class CheckpointReceipt:
    message_id: str
    content_hash: str
    tag: str
    source_chain_id: int
    creator: str
    cid: str
    expires_at: int
    received_at: int

    @classmethod
    def from_checkpoint(cls, checkpoint: StoredCheckpoint) -> "CheckpointReceipt":
        return cls(
            message_id=checkpoint.message_id,
            content_hash=checkpoint.content_hash,
            tag=checkpoint.tag,
            source_chain_id=checkpoint.source_chain_id,
            creator=checkpoint.creator,
            cid=checkpoint.cid,
            expires_at=checkpoint.expires_at,
            received_at=checkpoint.received_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
