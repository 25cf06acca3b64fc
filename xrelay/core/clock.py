"""
Time sources for reception-time validation.

Expiry and age checks are evaluated against the clock at processing time.
Production uses wall-clock seconds; tests pin time with ManualClock.
"""

import time
from dataclasses import dataclass


class SystemClock:
    """Unix time in whole seconds."""

    def now(self) -> int:
        return int(time.time())


@dataclass
class ManualClock:
    """
    Controllable time source.

    In tests: set `current` once and advance manually, so expiry and age
    boundaries can be hit exactly.
    """
    current: int = 0

    def now(self) -> int:
        """Get current timestamp without advancing."""
        return self.current

    def advance(self, step: int = 1) -> int:
        """Advance clock by step seconds and return the new time."""
        self.current += step
        return self.current
