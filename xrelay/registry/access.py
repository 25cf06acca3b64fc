"""
Privileged caller check for administrative operations.

A single admin identity is allowed to mutate the trusted emitter registry.
The check is evaluated at each operation boundary; queries never call it.
With no admin configured, every administrative call is refused.
"""

import threading
from typing import Optional

from ..core.errors import UnauthorizedError


class AccessPolicy:
    def __init__(self, admin: Optional[str]) -> None:
        self._admin = admin or None
        self._lock = threading.Lock()

    @property
    def admin(self) -> Optional[str]:
        return self._admin

    def require(self, caller: str) -> None:
        """
        Raises:
            UnauthorizedError: If caller is not the current admin
        """
        if self._admin is None or caller != self._admin:
            raise UnauthorizedError(f"caller {caller!r} is not the administrator")

    def transfer(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to new_admin. Only the current admin may do this."""
        with self._lock:
            self.require(caller)
            if not new_admin:
                raise ValueError("new admin identity must be non-empty")
            self._admin = new_admin
