"""
Checkpoint store interface and in-memory implementation.

Primary storage is keyed by transport message id. A secondary index maps
(content hash, origin chain) to the single message id that claimed it.
"""

import threading
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.errors import (
    CheckpointNotFoundError,
    DuplicateCheckpointError,
    UniquenessConflictError,
)
from ..core.ids import WORD_SIZE, content_hash, normalize_bytes32, sha256_hex, to_bytes
from .model import StoredCheckpoint

IndexKey = Tuple[str, int]


def unique_key(cid_hash: str, chain_id: int) -> str:
    """
    Hash of one (content hash, origin chain) index slot.

    Input: 32-byte content hash followed by the chain id as big-endian u16.
    """
    return sha256_hex(to_bytes(cid_hash, WORD_SIZE) + int(chain_id).to_bytes(2, "big"))


class CheckpointStore(ABC):
    """
    Abstract checkpoint storage.

    All implementations must guarantee:
    - Write-once per message id (no updates, no deletes)
    - At most one record per (content hash, origin chain), first write wins
    - Monotonic total and per-chain counters
    """

    @abstractmethod
    def put(self, checkpoint: StoredCheckpoint) -> None:
        """
        Store checkpoint and bind its uniqueness key.

        Raises:
            DuplicateCheckpointError: If message_id is already stored
            UniquenessConflictError: If (content hash, chain) is bound to another id
        """
        ...

    @abstractmethod
    def find(self, message_id: str) -> Optional[StoredCheckpoint]:
        ...

    @abstractmethod
    def find_id(self, cid: str, chain_id: int) -> Optional[str]:
        """Message id bound to (hash(cid), chain_id), if any."""
        ...

    @abstractmethod
    def total_count(self) -> int:
        ...

    @abstractmethod
    def count_by_chain(self, chain_id: int) -> int:
        ...

    @abstractmethod
    def message_ids(self) -> List[str]:
        ...

    def get(self, message_id: str) -> StoredCheckpoint:
        """
        Raises:
            CheckpointNotFoundError: If no checkpoint has this id
        """
        cp = self.find(message_id)
        if cp is None:
            raise CheckpointNotFoundError(f"no checkpoint for message {message_id}")
        return cp

    def contains(self, message_id: str) -> bool:
        return self.find(message_id) is not None

    def get_by_content_and_chain(self, cid: str, chain_id: int) -> StoredCheckpoint:
        """
        Raises:
            CheckpointNotFoundError: If cid was never stored for chain_id
        """
        message_id = self.find_id(cid, chain_id)
        if message_id is None:
            raise CheckpointNotFoundError(f"cid {cid!r} not found on chain {chain_id}")
        return self.get(message_id)

    def exists_on_any_of(self, cid: str, chain_ids: Sequence[int]) -> List[bool]:
        """Existence per chain, same length and order as chain_ids."""
        return [self.find_id(cid, chain_id) is not None for chain_id in chain_ids]

    def get_first_across_chains(self, cid: str, chain_ids: Sequence[int]) -> StoredCheckpoint:
        """
        First match scanning chain_ids in the caller's order.

        Raises:
            CheckpointNotFoundError: If cid is stored on none of the chains
        """
        for chain_id in chain_ids:
            message_id = self.find_id(cid, chain_id)
            if message_id is not None:
                return self.get(message_id)
        raise CheckpointNotFoundError(f"cid {cid!r} not found on any of {list(chain_ids)}")


class MemoryCheckpointStore(CheckpointStore):
    def __init__(self) -> None:
        self._records: Dict[str, StoredCheckpoint] = {}
        self._index: Dict[IndexKey, str] = {}
        self._by_chain: Counter = Counter()
        self._lock = threading.RLock()

    @staticmethod
    def index_key(cid: str, chain_id: int) -> IndexKey:
        return content_hash(cid), int(chain_id)

    def check_insertable(self, checkpoint: StoredCheckpoint) -> None:
        """Raise the error put() would raise, without writing anything."""
        if checkpoint.message_id in self._records:
            raise DuplicateCheckpointError(f"message {checkpoint.message_id} already stored")
        bound = self._index.get(self.index_key(checkpoint.cid, checkpoint.source_chain_id))
        if bound is not None and bound != checkpoint.message_id:
            raise UniquenessConflictError(
                f"cid already checkpointed on chain {checkpoint.source_chain_id} by {bound}"
            )

    def _apply(self, checkpoint: StoredCheckpoint) -> None:
        self._records[checkpoint.message_id] = checkpoint
        self._index[self.index_key(checkpoint.cid, checkpoint.source_chain_id)] = checkpoint.message_id
        self._by_chain[checkpoint.source_chain_id] += 1

    def put(self, checkpoint: StoredCheckpoint) -> None:
        with self._lock:
            self.check_insertable(checkpoint)
            self._apply(checkpoint)

    def find(self, message_id: str) -> Optional[StoredCheckpoint]:
        try:
            key = normalize_bytes32(message_id)
        except ValueError:
            return None
        return self._records.get(key)

    def find_id(self, cid: str, chain_id: int) -> Optional[str]:
        return self._index.get(self.index_key(cid, chain_id))

    def total_count(self) -> int:
        return len(self._records)

    def count_by_chain(self, chain_id: int) -> int:
        return self._by_chain.get(int(chain_id), 0)

    def message_ids(self) -> List[str]:
        return list(self._records.keys())

    def chain_counts(self) -> Dict[int, int]:
        return dict(self._by_chain)
