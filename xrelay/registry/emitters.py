"""
Trusted emitter registry.

Per-origin-chain whitelist of senders whose transport messages are accepted.
Entries are (chain_id, emitter) pairs; emitters are 32-byte identifiers.
"""

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.canonical import canonical_json_str
from ..core.errors import (
    BatchLengthMismatchError,
    EmitterAlreadyTrustedError,
    EmitterNotTrustedError,
    StoreError,
    ZeroChainIdError,
    ZeroEmitterError,
)
from ..core.ids import HexLike, is_zero, normalize_bytes32
from ..metrics import track_emitter_change
from .access import AccessPolicy

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None

logger = logging.getLogger(__name__)

Entry = Tuple[int, str]


class TrustedEmitterRegistry:
    """
    In-memory trusted emitter registry.

    Mutations require the privileged caller and apply all-or-nothing.
    Lookups are pure and unrestricted.
    """

    def __init__(self, access: AccessPolicy, entries: Iterable[Entry] = ()) -> None:
        self.access = access
        self._entries = self._normalize(entries)
        self._lock = threading.Lock()

    @staticmethod
    def _normalize(entries: Iterable[Entry]) -> FrozenSet[Entry]:
        return frozenset((int(chain_id), normalize_bytes32(emitter)) for chain_id, emitter in entries)

    @staticmethod
    def _check_pair(chain_id: int, emitter: HexLike) -> Entry:
        if chain_id == 0:
            raise ZeroChainIdError("chain id must be non-zero")
        if is_zero(emitter):
            raise ZeroEmitterError("emitter must be non-zero")
        return int(chain_id), normalize_bytes32(emitter)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Scope of one check-then-commit mutation."""
        with self._lock:
            yield

    def _commit(self, entries: FrozenSet[Entry]) -> None:
        self._entries = entries

    def add(self, caller: str, chain_id: int, emitter: HexLike) -> None:
        """
        Trust emitter on chain_id.

        Raises:
            UnauthorizedError, ZeroChainIdError, ZeroEmitterError,
            EmitterAlreadyTrustedError
        """
        self.access.require(caller)
        entry = self._check_pair(chain_id, emitter)
        with self._transaction():
            if entry in self._entries:
                raise EmitterAlreadyTrustedError(f"emitter {entry[1]} already trusted on chain {entry[0]}")
            self._commit(self._entries | {entry})
        track_emitter_change("added")
        logger.info("Trusted emitter added", extra={"chain_id": entry[0], "emitter": entry[1]})

    def remove(self, caller: str, chain_id: int, emitter: HexLike) -> None:
        """
        Raises:
            UnauthorizedError, EmitterNotTrustedError
        """
        self.access.require(caller)
        entry = (int(chain_id), normalize_bytes32(emitter))
        with self._transaction():
            if entry not in self._entries:
                raise EmitterNotTrustedError(f"emitter {entry[1]} not trusted on chain {entry[0]}")
            self._commit(self._entries - {entry})
        track_emitter_change("removed")
        logger.info("Trusted emitter removed", extra={"chain_id": entry[0], "emitter": entry[1]})

    def add_batch(
        self, caller: str, chain_ids: Sequence[int], emitters: Sequence[HexLike]
    ) -> None:
        """
        Trust several (chain_id, emitter) pairs at once.

        Every pair is checked with the rules of add(), including duplicates
        inside the batch itself. Any failure rejects the whole batch.

        Raises:
            UnauthorizedError, BatchLengthMismatchError, ZeroChainIdError,
            ZeroEmitterError, EmitterAlreadyTrustedError
        """
        self.access.require(caller)
        if len(chain_ids) != len(emitters):
            raise BatchLengthMismatchError(
                f"{len(chain_ids)} chain ids for {len(emitters)} emitters"
            )
        pending = [self._check_pair(c, e) for c, e in zip(chain_ids, emitters)]

        with self._transaction():
            staged = set(self._entries)
            for entry in pending:
                if entry in staged:
                    raise EmitterAlreadyTrustedError(
                        f"emitter {entry[1]} already trusted on chain {entry[0]}"
                    )
                staged.add(entry)
            self._commit(frozenset(staged))

        track_emitter_change("added", len(pending))
        logger.info("Trusted emitter batch added", extra={"count": len(pending)})

    def is_trusted(self, chain_id: int, emitter: HexLike) -> bool:
        try:
            entry = (int(chain_id), normalize_bytes32(emitter))
        except ValueError:
            return False
        return entry in self._entries

    def list_emitters(self, chain_id: Optional[int] = None) -> List[Entry]:
        entries = self._entries
        if chain_id is not None:
            entries = frozenset(e for e in entries if e[0] == chain_id)
        return sorted(entries)

    def __len__(self) -> int:
        return len(self._entries)


class FileEmitterRegistry(TrustedEmitterRegistry):
    """
    Registry persisted as a canonical JSON file.

    Format: {"emitters": [[chain_id, "0x..."], ...]}
    Each mutation writes a temp file and atomically replaces the old one
    before the in-memory view changes.
    """

    def __init__(self, path: str, access: AccessPolicy) -> None:
        self.path = Path(path)
        super().__init__(access, self._load())

    def _load(self) -> List[Entry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return [(int(c), str(e)) for c, e in data.get("emitters", [])]
        except (OSError, ValueError, TypeError) as ex:
            raise StoreError(f"cannot read emitter registry {self.path}: {ex}") from ex

    def _commit(self, entries: FrozenSet[Entry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        body = canonical_json_str({"emitters": [list(e) for e in sorted(entries)]})
        try:
            with open(tmp_path, "w") as f:
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as ex:
            raise StoreError(f"cannot write emitter registry {self.path}: {ex}") from ex
        super()._commit(entries)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """
        Hold an exclusive lock on the registry file and reload it.

        Mutations from other processes land before this one's checks run.
        """
        lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            try:
                f = open(lock_path, "a+b")
            except OSError as ex:
                raise StoreError(f"cannot lock emitter registry {self.path}: {ex}") from ex
            with f:
                if fcntl:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    self._entries = self._normalize(self._load())
                    yield
                finally:
                    if fcntl:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def refresh(self) -> None:
        """Reload entries written by other processes."""
        with self._transaction():
            pass
