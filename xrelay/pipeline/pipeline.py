"""
Reception pipeline.

Runs one transport envelope through verification, replay protection,
emitter whitelisting, decoding, validation and uniqueness checks, then
commits the checkpoint and consumes the message id.

Transactional rule: a rejection at any stage leaves the store, index,
counters and replay guard untouched. The message id is consumed only after
the checkpoint is stored, so an envelope rejected for a transient reason
(for example an emitter not yet trusted) can be delivered again later.
"""

import logging
import threading
from typing import List, Optional

from ..codec import MAX_CLOCK_SKEW, decode, validate_with_errors
from ..core.clock import SystemClock
from ..core.errors import (
    DuplicateCheckpointError,
    ReceptionError,
    ReplayError,
    TransportInvalidError,
    UniquenessConflictError,
    UntrustedEmitterError,
)
from ..logging_config import get_logger
from ..metrics import track_checkpoint_stored, track_reception, track_reception_duration
from ..registry.emitters import TrustedEmitterRegistry
from ..replay.guard import ReplayGuard
from ..store.model import StoredCheckpoint
from ..store.store import CheckpointStore
from ..transport.verifier import TransportVerifier
from .receipt import CheckpointReceipt
from .stages import ReceptionStage

logger = logging.getLogger(__name__)


class ReceptionPipeline:
    """
    Reception state machine over injected collaborators.

    The verifier await is the only suspension point. Everything after it
    runs inside one lock, so concurrent deliveries of the same envelope
    serialize and the second one is rejected as a replay.
    """

    def __init__(
        self,
        verifier: TransportVerifier,
        registry: TrustedEmitterRegistry,
        guard: ReplayGuard,
        store: CheckpointStore,
        clock=None,
        max_clock_skew: int = MAX_CLOCK_SKEW,
    ) -> None:
        self.verifier = verifier
        self.registry = registry
        self.guard = guard
        self.store = store
        self.clock = clock or SystemClock()
        self.max_clock_skew = max_clock_skew
        self._lock = threading.Lock()
        self.reconcile()

    def reconcile(self) -> List[str]:
        """
        Consume ids that are stored but not yet consumed.

        Only a crash between the store write and the consume write can leave
        such ids behind.

        Returns:
            Ids that were repaired
        """
        repaired = []
        with self._lock:
            for message_id in self.store.message_ids():
                if self.guard.is_consumed(message_id):
                    continue
                try:
                    self.guard.consume(message_id)
                except ReplayError:
                    # the writer that stored it consumed it first
                    continue
                repaired.append(message_id)
        if repaired:
            logger.warning("Consumed stored-but-unconsumed message ids", extra={"count": len(repaired)})
        return repaired

    async def receive(self, raw: bytes) -> CheckpointReceipt:
        """
        Process one raw transport message.

        Returns:
            CheckpointReceipt for the stored checkpoint

        Raises:
            ReceptionError: Typed rejection; `stage` holds the last state reached
        """
        stage = ReceptionStage.RECEIVED
        message_id: Optional[str] = None
        try:
            with track_reception_duration():
                envelope = await self.verifier.verify(raw)
                if not envelope.valid:
                    raise TransportInvalidError(envelope.reason or "transport verification failed")
                stage = ReceptionStage.TRANSPORT_VERIFIED
                message_id = envelope.message_id
                log = get_logger(__name__, trace_id=message_id)

                with self._lock:
                    # stored implies consumed; the store check covers an interrupted commit
                    if self.guard.is_consumed(message_id) or self.store.contains(message_id):
                        raise ReplayError(f"message {message_id} already processed")
                    stage = ReceptionStage.REPLAY_CHECKED

                    if not self.registry.is_trusted(envelope.chain_id, envelope.emitter):
                        raise UntrustedEmitterError(
                            f"emitter {envelope.emitter} not trusted on chain {envelope.chain_id}"
                        )
                    stage = ReceptionStage.EMITTER_CHECKED

                    message = decode(envelope.payload)
                    stage = ReceptionStage.DECODED

                    now = self.clock.now()
                    validate_with_errors(message, now, self.max_clock_skew)
                    stage = ReceptionStage.VALIDATED

                    bound = self.store.find_id(message.cid, message.source_chain_id)
                    if bound is not None:
                        raise UniquenessConflictError(
                            f"cid already checkpointed on chain {message.source_chain_id} by {bound}"
                        )
                    stage = ReceptionStage.UNIQUENESS_CHECKED

                    checkpoint = StoredCheckpoint.from_message(
                        message_id, message, envelope.emitter, received_at=now
                    )
                    try:
                        self.store.put(checkpoint)
                    except DuplicateCheckpointError as ex:
                        # another process stored this id after our replay check
                        raise ReplayError(str(ex)) from ex
                    stage = ReceptionStage.STORED

                    try:
                        self.guard.consume(message_id)
                    except ReplayError:
                        # a concurrent reconcile consumed the id we just stored
                        logger.info("Message id already consumed after store", extra={"trace_id": message_id})
                    stage = ReceptionStage.CONSUMED

        except ReceptionError as ex:
            if ex.stage is None:
                ex.stage = stage.value
            track_reception(ex.reason.value)
            logger.warning(
                "Checkpoint rejected",
                extra={
                    "trace_id": message_id or "N/A",
                    "reason": ex.reason.value,
                    "stage": ex.stage,
                    "detail": str(ex),
                },
            )
            raise

        receipt = CheckpointReceipt.from_checkpoint(checkpoint)
        track_reception("accepted")
        track_checkpoint_stored(checkpoint.source_chain_id)
        log.info(
            f"Checkpoint received from chain {checkpoint.source_chain_id} "
            f"(cid={checkpoint.cid}, creator={checkpoint.creator})"
        )
        return receipt
