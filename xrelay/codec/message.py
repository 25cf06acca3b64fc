"""
Checkpoint message model.

A checkpoint message carries:
- Content identifier (cid) the checkpoint is about
- 32-byte tag chosen by the creator
- Expiry and creation timestamps (unix seconds)
- Creator address and origin chain id
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from ..core.ids import HexLike, normalize_address, normalize_bytes32
from .constants import VERSION


@dataclass(frozen=True)
class CheckpointMessage:
    """
    Immutable checkpoint message.

    Fields:
        version: Wire schema version (currently 2)
        cid: Content identifier string
        tag: 32-byte opaque label (0x hex)
        expires_at: Expiry timestamp
        creator: 20-byte creator address (0x hex)
        created_at: Creation timestamp on the origin chain
        source_chain_id: Transport chain id of the origin chain
        revoked: Carried for forward compatibility, never mutated after storage
    """
    cid: str
    tag: HexLike
    expires_at: int
    creator: HexLike
    created_at: int
    source_chain_id: int
    version: int = VERSION
    revoked: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag", normalize_bytes32(self.tag))
        object.__setattr__(self, "creator", normalize_address(self.creator))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckpointMessage":
        return cls(
            version=data["version"],
            cid=data["cid"],
            tag=data["tag"],
            expires_at=data["expires_at"],
            creator=data["creator"],
            created_at=data["created_at"],
            source_chain_id=data["source_chain_id"],
            revoked=data.get("revoked", False),
        )
