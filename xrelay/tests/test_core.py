"""
Tests for core primitives: canonical serialization, identifiers and
hash-chained journal lines.

Critical: These tests verify determinism guarantees.
"""

import pytest

from xrelay.core.canonical import canonical_json_bytes, canonical_json_str
from xrelay.core.clock import ManualClock
from xrelay.core.errors import IntegrityError
from xrelay.core.ids import content_hash, is_zero, normalize_address, normalize_bytes32, to_bytes
from xrelay.core.integrity import ZERO_HASH, chain_record, check_link, hash_record, verify_lines


def test_canonical_json_key_order():
    """Dict key order must not affect canonical output, at any depth."""
    d1 = {"z": 1, "a": {"y": 2, "b": 3}}
    d2 = {"a": {"b": 3, "y": 2}, "z": 1}

    assert canonical_json_bytes(d1) == canonical_json_bytes(d2)
    assert canonical_json_str(d1) == '{"a":{"b":3,"y":2},"z":1}'


def test_canonical_json_rejects_nan():
    with pytest.raises(ValueError):
        canonical_json_str({"x": float("nan")})


def test_canonical_json_str_compact():
    assert canonical_json_str({"b": 2, "a": (1, 2)}) == '{"a":[1,2],"b":2}'


def test_canonical_handles_unicode():
    assert "日本語" in canonical_json_str({"key": "日本語"})


def test_to_bytes_pads_and_rejects():
    assert to_bytes("0x01", 4) == b"\x00\x00\x00\x01"
    assert to_bytes("abc", 2) == b"\x0a\xbc"
    assert to_bytes(b"\x01", 2) == b"\x00\x01"

    with pytest.raises(ValueError):
        to_bytes("0xzz", 4)
    with pytest.raises(ValueError):
        to_bytes("0x" + "ff" * 5, 4)
    with pytest.raises(TypeError):
        to_bytes(5, 4)


def test_normalize_identifiers():
    assert normalize_address("0xAB") == "0x" + "00" * 19 + "ab"
    assert normalize_bytes32(b"\x01") == "0x" + "00" * 31 + "01"
    assert is_zero("0x" + "00" * 20)
    assert is_zero(b"\x00\x00")
    assert not is_zero("0x01")


def test_content_hash_is_stable():
    assert content_hash("bafy") == content_hash("bafy")
    assert content_hash("bafy") != content_hash("bafz")
    assert len(content_hash("bafy")) == 66


def test_manual_clock():
    clock = ManualClock(100)

    assert clock.now() == 100
    assert clock.advance(5) == 105
    assert clock.now() == 105


def test_chain_record_links():
    first = chain_record(ZERO_HASH, 0, {"n": 1})
    second = chain_record(first["record_hash"], 1, {"n": 2})

    assert first["record_hash"] == hash_record(ZERO_HASH, 0, {"n": 1})
    assert check_link(second, first["record_hash"], 1) == second["record_hash"]
    assert verify_lines([first, second]) == second["record_hash"]
    assert verify_lines([]) is None


def test_check_link_failures():
    first = chain_record(ZERO_HASH, 0, {"n": 1})

    with pytest.raises(IntegrityError):
        check_link(first, ZERO_HASH, 1)
    with pytest.raises(IntegrityError):
        check_link(first, "f" * 64, 0)
    with pytest.raises(IntegrityError):
        check_link({**first, "record": {"n": 2}}, ZERO_HASH, 0)
    with pytest.raises(IntegrityError):
        check_link({"seq": 0}, ZERO_HASH, 0)
