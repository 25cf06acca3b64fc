"""
Checkpoint storage with a (content hash, origin chain) uniqueness index.

This module provides:
- StoredCheckpoint: Immutable stored record
- CheckpointStore: Abstract interface
- MemoryCheckpointStore: In-process storage
- FileCheckpointStore: Hash-chained JSONL journal
"""

from .model import StoredCheckpoint
from .store import CheckpointStore, MemoryCheckpointStore, unique_key
from .file_store import FileCheckpointStore

__all__ = [
    "StoredCheckpoint",
    "CheckpointStore",
    "MemoryCheckpointStore",
    "FileCheckpointStore",
    "unique_key",
]
