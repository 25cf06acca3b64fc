"""
Deterministic JSON for hash chains and persisted registry files.

Keys are sorted at every depth, separators carry no whitespace and text
stays UTF-8, so a record hashes the same on every platform.
"""

import json
from typing import Any


def canonical_json_str(obj: Any) -> str:
    """
    Raises:
        ValueError: If obj contains NaN or infinity
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def canonical_json_bytes(obj: Any) -> bytes:
    return canonical_json_str(obj).encode("utf-8")
