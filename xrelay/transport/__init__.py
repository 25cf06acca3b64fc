"""
Cross-chain transport collaborators.

Provides:
- TransportEnvelope and the binary envelope layout
- TransportVerifier contract
- GuardianKey / GuardianVerifier (Ed25519 signed envelopes)
- MockTransport (unsigned envelopes for tests)
"""

from .envelope import TransportEnvelope, parse_envelope, envelope_body, body_message_id
from .verifier import TransportVerifier, MockTransport
from .guardian import GuardianKey, GuardianVerifier, ensure_keypair

__all__ = [
    "TransportEnvelope",
    "parse_envelope",
    "envelope_body",
    "body_message_id",
    "TransportVerifier",
    "MockTransport",
    "GuardianKey",
    "GuardianVerifier",
    "ensure_keypair",
]
