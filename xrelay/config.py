"""
Runtime configuration read from environment variables.

Environment Variables:
    XRELAY_DATA_DIR: Directory holding checkpoints.log, consumed.log and
        emitters.json - default: ~/.xrelay
    XRELAY_ADMIN: Identity allowed to administer trusted emitters
    XRELAY_GUARDIAN_PUBKEY: Path to the guardian Ed25519 public key (PEM)
    XRELAY_MAX_CLOCK_SKEW: Allowed future skew of created_at, seconds - default: 300
    METRICS_ENABLED: Start the Prometheus endpoint (true/false) - default: false
    METRICS_PORT: Prometheus endpoint port - default: 8080
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .codec.constants import MAX_CLOCK_SKEW


def _env_int(key: str, default: int) -> int:
    val = os.getenv(key)
    if not val:
        return default
    try:
        parsed = int(val)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _env_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def default_data_dir() -> Path:
    return Path.home() / ".xrelay"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    admin: Optional[str] = None
    guardian_pubkey: Optional[str] = None
    max_clock_skew: int = MAX_CLOCK_SKEW
    metrics_enabled: bool = False
    metrics_port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = os.getenv("XRELAY_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else default_data_dir(),
            admin=os.getenv("XRELAY_ADMIN") or None,
            guardian_pubkey=os.getenv("XRELAY_GUARDIAN_PUBKEY") or None,
            max_clock_skew=_env_int("XRELAY_MAX_CLOCK_SKEW", MAX_CLOCK_SKEW),
            metrics_enabled=_env_bool("METRICS_ENABLED"),
            metrics_port=_env_int("METRICS_PORT", 8080),
        )

    @property
    def checkpoints_path(self) -> Path:
        return self.data_dir / "checkpoints.log"

    @property
    def consumed_path(self) -> Path:
        return self.data_dir / "consumed.log"

    @property
    def emitters_path(self) -> Path:
        return self.data_dir / "emitters.json"
