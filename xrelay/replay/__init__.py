"""
Replay protection for transport message ids.
"""

from .guard import ReplayGuard, MemoryReplayGuard, FileReplayGuard

__all__ = ["ReplayGuard", "MemoryReplayGuard", "FileReplayGuard"]
