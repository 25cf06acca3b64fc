"""
Hash chain integrity for append-only journals.

Each journal line includes the hash of the previous line, so any edit,
reordering or deletion of stored checkpoints or consumed ids is detectable.
"""

import hashlib
from typing import Any, Dict, Iterable, Optional

from .canonical import canonical_json_bytes
from .errors import IntegrityError

ZERO_HASH = "0" * 64


def hash_record(prev_hash: str, seq: int, record: Dict[str, Any]) -> str:
    """
    Compute hash of a record chained to the previous hash.

    Hash input: prev_hash + canonical_json({"seq": seq, "record": record})

    Returns:
        SHA-256 hash as hex string
    """
    b = prev_hash.encode("utf-8") + canonical_json_bytes({"seq": seq, "record": record})
    return hashlib.sha256(b).hexdigest()


def chain_record(prev_hash: str, seq: int, record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create hash chain line for storage.

    Returns:
        Dict ready for JSONL serialization
    """
    return {
        "seq": seq,
        "prev_hash": prev_hash,
        "record_hash": hash_record(prev_hash, seq, record),
        "record": record,
    }


def check_link(line: Dict[str, Any], expected_prev_hash: str, expected_seq: int) -> str:
    """
    Verify one journal line against its predecessor.

    Returns:
        The line's record_hash (next expected_prev_hash)

    Raises:
        IntegrityError: On broken link, wrong sequence or hash mismatch
    """
    try:
        seq = line["seq"]
        prev_hash = line["prev_hash"]
        record_hash = line["record_hash"]
        record = line["record"]
    except (KeyError, TypeError) as ex:
        raise IntegrityError(f"journal line missing field: {ex}") from ex

    if seq != expected_seq:
        raise IntegrityError(f"sequence gap: expected {expected_seq}, found {seq}")
    if prev_hash != expected_prev_hash:
        raise IntegrityError(f"broken chain at seq {seq}: prev_hash mismatch")
    if hash_record(prev_hash, seq, record) != record_hash:
        raise IntegrityError(f"record hash mismatch at seq {seq}")
    return record_hash


def verify_lines(lines: Iterable[Dict[str, Any]]) -> Optional[str]:
    """
    Verify a complete chain from genesis.

    Returns:
        Hash of the last line, or None for an empty journal
    """
    prev = ZERO_HASH
    last = None
    for expected_seq, line in enumerate(lines):
        prev = check_link(line, prev, expected_seq)
        last = prev
    return last
