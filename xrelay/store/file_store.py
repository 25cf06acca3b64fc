"""
File-based checkpoint store on an append-only, hash-chained JSONL journal.

Each line's record is a StoredCheckpoint dict. The primary map, uniqueness
index and counters live in memory and are rebuilt from the journal on open.
"""

from ..core.journal import Journal
from .model import StoredCheckpoint
from .store import MemoryCheckpointStore


class FileCheckpointStore(MemoryCheckpointStore):
    """
    Durable checkpoint store.

    Guarantees:
    - Append-only (no mutations)
    - Fsync after each put (durability)
    - Hash chain integrity
    - Uniqueness checks see records written by other processes
    """

    def __init__(self, path: str) -> None:
        super().__init__()
        self.journal = Journal(path)
        self.refresh()

    def _apply_records(self, records) -> None:
        for rec in records:
            self._apply(StoredCheckpoint.from_dict(rec))

    def refresh(self) -> None:
        """Load records appended since the last read (by any process)."""
        with self._lock, self.journal.exclusive() as session:
            self._apply_records(session.refresh())

    def put(self, checkpoint: StoredCheckpoint) -> None:
        with self._lock, self.journal.exclusive() as session:
            self._apply_records(session.refresh())
            self.check_insertable(checkpoint)
            session.append(checkpoint.to_dict())
            self._apply(checkpoint)

    def verify_chain(self) -> int:
        """Re-verify the journal; returns line count or raises IntegrityError."""
        return self.journal.verify()
