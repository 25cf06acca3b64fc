"""
Checkpoint receiver service.

One object exposing the whole surface of the relay:
- Administration: trusted emitter management (admin only)
- Reception: receive_checkpoint(raw transport bytes)
- Queries: lookups by message id, by cid and chain, across chains, counters

Usage:
    receiver = CheckpointReceiver.in_memory(verifier, admin="0xadmin")
    receiver.add_trusted_emitter("0xadmin", 10004, emitter)
    receipt = await receiver.receive_checkpoint(raw)
"""

import asyncio
from typing import List, Optional, Sequence

from .codec import MAX_CLOCK_SKEW
from .config import Settings
from .core.clock import SystemClock
from .core.ids import ZERO_BYTES32, HexLike, content_hash
from .pipeline import CheckpointReceipt, ReceptionPipeline
from .registry import AccessPolicy, FileEmitterRegistry, TrustedEmitterRegistry
from .replay import FileReplayGuard, MemoryReplayGuard, ReplayGuard
from .store import (
    CheckpointStore,
    FileCheckpointStore,
    MemoryCheckpointStore,
    StoredCheckpoint,
    unique_key,
)
from .transport import TransportVerifier


class CheckpointReceiver:
    def __init__(
        self,
        verifier: TransportVerifier,
        registry: TrustedEmitterRegistry,
        guard: ReplayGuard,
        store: CheckpointStore,
        clock=None,
        max_clock_skew: int = MAX_CLOCK_SKEW,
    ) -> None:
        self.registry = registry
        self.store = store
        self.clock = clock or SystemClock()
        self.pipeline = ReceptionPipeline(
            verifier, registry, guard, store, clock=self.clock, max_clock_skew=max_clock_skew
        )

    @classmethod
    def in_memory(cls, verifier: TransportVerifier, admin: str, clock=None) -> "CheckpointReceiver":
        """Isolated instance with fresh in-memory state."""
        return cls(
            verifier,
            TrustedEmitterRegistry(AccessPolicy(admin)),
            MemoryReplayGuard(),
            MemoryCheckpointStore(),
            clock=clock,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, verifier: TransportVerifier, clock=None
    ) -> "CheckpointReceiver":
        """Instance backed by files under settings.data_dir."""
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return cls(
            verifier,
            FileEmitterRegistry(str(settings.emitters_path), AccessPolicy(settings.admin)),
            FileReplayGuard(str(settings.consumed_path)),
            FileCheckpointStore(str(settings.checkpoints_path)),
            clock=clock,
            max_clock_skew=settings.max_clock_skew,
        )

    # ============ ADMINISTRATION ============

    def add_trusted_emitter(self, caller: str, chain_id: int, emitter: HexLike) -> None:
        self.registry.add(caller, chain_id, emitter)

    def remove_trusted_emitter(self, caller: str, chain_id: int, emitter: HexLike) -> None:
        self.registry.remove(caller, chain_id, emitter)

    def add_trusted_emitter_batch(
        self, caller: str, chain_ids: Sequence[int], emitters: Sequence[HexLike]
    ) -> None:
        self.registry.add_batch(caller, chain_ids, emitters)

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        self.registry.access.transfer(caller, new_admin)

    def is_trusted_emitter(self, chain_id: int, emitter: HexLike) -> bool:
        return self.registry.is_trusted(chain_id, emitter)

    # ============ RECEPTION ============

    async def receive_checkpoint(self, raw: bytes) -> CheckpointReceipt:
        return await self.pipeline.receive(raw)

    def receive_checkpoint_sync(self, raw: bytes) -> CheckpointReceipt:
        """Blocking variant for callers without an event loop."""
        return asyncio.run(self.pipeline.receive(raw))

    # ============ QUERIES ============

    def get_checkpoint(self, message_id: str) -> StoredCheckpoint:
        """
        Raises:
            CheckpointNotFoundError: If no checkpoint has this message id
        """
        return self.store.get(message_id)

    def get_checkpoint_by_cid(self, cid: str, chain_id: int) -> StoredCheckpoint:
        return self.store.get_by_content_and_chain(cid, chain_id)

    def get_checkpoint_from_any_chain(self, cid: str, chain_ids: Sequence[int]) -> StoredCheckpoint:
        return self.store.get_first_across_chains(cid, chain_ids)

    def check_existence_across_chains(self, cid: str, chain_ids: Sequence[int]) -> List[bool]:
        return self.store.exists_on_any_of(cid, chain_ids)

    def get_message_id_by_cid(self, cid: str, chain_id: int) -> str:
        """Message id bound to (cid, chain_id), or the zero hash if none."""
        return self.store.find_id(cid, chain_id) or ZERO_BYTES32

    def checkpoint_exists(self, message_id: str) -> bool:
        return self.store.contains(message_id)

    def is_expired(self, message_id: str, now: Optional[int] = None) -> bool:
        """Unknown ids count as expired."""
        cp = self.store.find(message_id)
        if cp is None:
            return True
        return cp.is_expired(self.clock.now() if now is None else now)

    def is_checkpoint_valid(self, message_id: str, now: Optional[int] = None) -> bool:
        """Exists and not expired."""
        return not self.is_expired(message_id, now)

    def total_checkpoints(self) -> int:
        return self.store.total_count()

    def checkpoint_count_by_chain(self, chain_id: int) -> int:
        return self.store.count_by_chain(chain_id)

    @staticmethod
    def get_cid_hash(cid: str) -> str:
        return content_hash(cid)

    @staticmethod
    def get_unique_key(cid_hash: str, chain_id: int) -> str:
        return unique_key(cid_hash, chain_id)

