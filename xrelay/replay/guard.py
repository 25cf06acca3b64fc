"""
Replay guard: at-most-once processing per transport message id.

consume() is a compare-and-set. Two callers racing on the same id cannot
both succeed; the loser gets ReplayError.
"""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, Set

from ..core.errors import ReplayError
from ..core.ids import normalize_bytes32
from ..core.journal import Journal


class ReplayGuard(ABC):
    """
    Abstract consumed-id set.

    Implementations must guarantee:
    - Add-only (a consumed id is never released)
    - consume() is atomic check-then-set
    """

    @abstractmethod
    def is_consumed(self, message_id: str) -> bool:
        ...

    @abstractmethod
    def consume(self, message_id: str) -> None:
        """
        Mark message_id consumed.

        Raises:
            ReplayError: If message_id was already consumed
        """
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class MemoryReplayGuard(ReplayGuard):
    def __init__(self, consumed: Iterable[str] = ()) -> None:
        self._consumed: Set[str] = {normalize_bytes32(m) for m in consumed}
        self._lock = threading.Lock()

    def is_consumed(self, message_id: str) -> bool:
        return normalize_bytes32(message_id) in self._consumed

    def consume(self, message_id: str) -> None:
        key = normalize_bytes32(message_id)
        with self._lock:
            if key in self._consumed:
                raise ReplayError(f"message {key} already consumed")
            self._consumed.add(key)

    def __len__(self) -> int:
        return len(self._consumed)


class FileReplayGuard(MemoryReplayGuard):
    """
    Consumed ids persisted in a hash-chained journal.

    Record format: {"message_id": "0x..."}
    Ids appended by other processes are picked up under the journal lock
    before every check.
    """

    def __init__(self, path: str) -> None:
        super().__init__()
        self.journal = Journal(path)
        self._sync()

    def _apply(self, records) -> None:
        for rec in records:
            self._consumed.add(rec["message_id"])

    def _sync(self) -> None:
        with self._lock, self.journal.exclusive() as session:
            self._apply(session.refresh())

    def is_consumed(self, message_id: str) -> bool:
        key = normalize_bytes32(message_id)
        if key in self._consumed:
            return True
        self._sync()
        return key in self._consumed

    def consume(self, message_id: str) -> None:
        key = normalize_bytes32(message_id)
        with self._lock, self.journal.exclusive() as session:
            self._apply(session.refresh())
            if key in self._consumed:
                raise ReplayError(f"message {key} already consumed")
            session.append({"message_id": key})
            self._consumed.add(key)

    def verify_chain(self) -> int:
        """Re-verify the journal; returns line count or raises IntegrityError."""
        return self.journal.verify()
