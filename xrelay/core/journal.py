"""
Append-only JSONL journal with hash chain and exclusive file lock.

Each line: {"seq": n, "prev_hash": "...", "record_hash": "...", "record": {...}}

Several processes may share one journal. Writers take an exclusive flock,
pull in lines appended by others since their last read, run their
check-then-append, then release. This makes the check and the append one
atomic step across processes.
"""

import json
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from .canonical import canonical_json_str
from .errors import StoreError
from .integrity import ZERO_HASH, chain_record, check_link, verify_lines

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None


class JournalSession:
    """Handle valid only while the journal's exclusive lock is held."""

    def __init__(self, journal: "Journal", f) -> None:
        self._journal = journal
        self._f = f

    def refresh(self) -> List[Dict[str, Any]]:
        """Return records appended since this journal instance last read."""
        return self._journal._read_new(self._f)

    def append(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Append one record, fsync, and return the chained line."""
        return self._journal._append(self._f, record)


class Journal:
    def __init__(self, path: str) -> None:
        self.path = str(path)
        self._offset = 0
        self._next_seq = 0
        self._last_hash = ZERO_HASH

        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        if not os.path.exists(self.path):
            with open(self.path, "wb") as f:
                f.write(b"")

    @property
    def last_hash(self) -> str:
        return self._last_hash

    @contextmanager
    def exclusive(self) -> Iterator[JournalSession]:
        """
        Hold the journal's exclusive lock.

        Raises:
            StoreError: If the journal cannot be opened or locked
        """
        try:
            f = open(self.path, "a+b")
        except OSError as ex:
            raise StoreError(str(ex)) from ex
        with f:
            if fcntl:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                yield JournalSession(self, f)
            finally:
                if fcntl:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def _read_new(self, f) -> List[Dict[str, Any]]:
        f.seek(self._offset)
        records = []
        for raw in f:
            if not raw.endswith(b"\n"):
                # partial line from a crashed writer; stop before it
                break
            self._offset += len(raw)
            if not raw.strip():
                continue
            try:
                line = json.loads(raw)
            except ValueError as ex:
                raise StoreError(f"corrupt journal line in {self.path}") from ex
            self._last_hash = check_link(line, self._last_hash, self._next_seq)
            self._next_seq += 1
            records.append(line["record"])
        return records

    def _append(self, f, record: Dict[str, Any]) -> Dict[str, Any]:
        if self._read_new(f):
            raise StoreError("journal advanced since last refresh")

        line = chain_record(self._last_hash, self._next_seq, record)
        data = (canonical_json_str(line) + "\n").encode("utf-8")
        try:
            if f.seek(0, os.SEEK_END) > self._offset:
                f.truncate(self._offset)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        except OSError as ex:
            raise StoreError(str(ex)) from ex
        self._offset += len(data)
        self._next_seq += 1
        self._last_hash = line["record_hash"]
        return line

    def lines(self) -> Iterator[Dict[str, Any]]:
        """Read every complete line from disk, without verification."""
        with open(self.path, "rb") as f:
            for raw in f:
                if raw.strip() and raw.endswith(b"\n"):
                    yield json.loads(raw)

    def verify(self) -> int:
        """
        Re-verify the whole chain from disk.

        Returns:
            Number of verified lines

        Raises:
            IntegrityError: If any link is broken
        """
        lines = list(self.lines())
        verify_lines(lines)
        return len(lines)
