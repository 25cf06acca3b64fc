"""
Core primitives shared by every component.

- Canonical: Deterministic serialization for hash chains
- Clock: Reception-time sources
- IDs: Fixed-width identifier normalization and hashing
- Chains: Supported chain catalogue
- Errors: Reception and administration exception families
"""

from .canonical import canonical_json_bytes, canonical_json_str
from .clock import SystemClock, ManualClock
from .ids import (
    ZERO_ADDRESS,
    ZERO_BYTES32,
    content_hash,
    normalize_address,
    normalize_bytes32,
    is_zero,
)
from .errors import (
    RejectionReason,
    ReceptionError,
    CheckpointNotFoundError,
    RegistryError,
    StoreError,
    IntegrityError,
)

__all__ = [
    "canonical_json_bytes",
    "canonical_json_str",
    "SystemClock",
    "ManualClock",
    "ZERO_ADDRESS",
    "ZERO_BYTES32",
    "content_hash",
    "normalize_address",
    "normalize_bytes32",
    "is_zero",
    "RejectionReason",
    "ReceptionError",
    "CheckpointNotFoundError",
    "RegistryError",
    "StoreError",
    "IntegrityError",
]
