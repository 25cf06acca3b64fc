"""
Tests for replay protection.

Critical: a message id can be consumed exactly once, across processes.
"""

import json
import os
import tempfile

import pytest

from xrelay.core.errors import IntegrityError, ReplayError
from xrelay.core.integrity import ZERO_HASH
from xrelay.replay import FileReplayGuard, MemoryReplayGuard

MID = "0x" + "ab" * 32
OTHER_MID = "0x" + "cd" * 32


def test_memory_guard_consume_once():
    guard = MemoryReplayGuard()

    assert not guard.is_consumed(MID)
    guard.consume(MID)
    assert guard.is_consumed(MID)

    with pytest.raises(ReplayError):
        guard.consume(MID)
    assert len(guard) == 1


def test_memory_guard_normalizes_ids():
    guard = MemoryReplayGuard()
    guard.consume(MID.upper().replace("0X", "0x"))

    assert guard.is_consumed(MID)


def test_memory_guard_seeded():
    guard = MemoryReplayGuard([MID])

    assert guard.is_consumed(MID)
    assert not guard.is_consumed(OTHER_MID)


def test_file_guard_persists():
    """Consumed ids survive reopening the journal."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "consumed.log")

        guard = FileReplayGuard(path)
        guard.consume(MID)

        reopened = FileReplayGuard(path)
        assert reopened.is_consumed(MID)
        assert not reopened.is_consumed(OTHER_MID)
        with pytest.raises(ReplayError):
            reopened.consume(MID)


def test_file_guard_sees_other_instance():
    """Two guards on one journal behave like two processes."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "consumed.log")
        a = FileReplayGuard(path)
        b = FileReplayGuard(path)

        a.consume(MID)

        assert b.is_consumed(MID)
        with pytest.raises(ReplayError):
            b.consume(MID)

        b.consume(OTHER_MID)
        assert a.is_consumed(OTHER_MID)
        assert a.verify_chain() == 2


def test_file_guard_hash_chain():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "consumed.log")
        guard = FileReplayGuard(path)
        guard.consume(MID)
        guard.consume(OTHER_MID)

        with open(path) as f:
            lines = [json.loads(line) for line in f]

        assert lines[0]["prev_hash"] == ZERO_HASH
        assert lines[1]["prev_hash"] == lines[0]["record_hash"]
        assert [line["record"]["message_id"] for line in lines] == [MID, OTHER_MID]


def test_file_guard_detects_tampering():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "consumed.log")
        guard = FileReplayGuard(path)
        guard.consume(MID)
        guard.consume(OTHER_MID)

        with open(path) as f:
            lines = f.readlines()
        rec = json.loads(lines[0])
        rec["record"]["message_id"] = "0x" + "ef" * 32
        lines[0] = json.dumps(rec) + "\n"
        with open(path, "w") as f:
            f.writelines(lines)

        with pytest.raises(IntegrityError):
            guard.verify_chain()
        with pytest.raises(IntegrityError):
            FileReplayGuard(path)


def test_file_guard_ignores_partial_tail():
    """A torn final line from a crashed writer is skipped and then overwritten."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "consumed.log")
        FileReplayGuard(path).consume(MID)

        with open(path, "a") as f:
            f.write('{"seq": 1, "prev_')

        guard = FileReplayGuard(path)
        assert guard.is_consumed(MID)

        guard.consume(OTHER_MID)
        assert FileReplayGuard(path).is_consumed(OTHER_MID)
        assert guard.verify_chain() == 2
