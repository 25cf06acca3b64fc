"""
Trusted emitter administration.
"""

from .access import AccessPolicy
from .emitters import TrustedEmitterRegistry, FileEmitterRegistry

__all__ = ["AccessPolicy", "TrustedEmitterRegistry", "FileEmitterRegistry"]
