"""
Transport verifier contract and the mock transport.

The reception pipeline awaits verify() before any other step. Verifiers
report bad input through TransportEnvelope.valid / reason and do not raise.
"""

from abc import ABC, abstractmethod

from ..core.ids import HexLike
from .envelope import (
    SIGNATURE_SIZE,
    TransportEnvelope,
    assemble,
    envelope_body,
    parse_envelope,
)


class TransportVerifier(ABC):
    @abstractmethod
    async def verify(self, raw: bytes) -> TransportEnvelope:
        """
        Verify raw transport bytes.

        Returns:
            TransportEnvelope; valid=False with a reason when rejected
        """
        ...


class MockTransport(TransportVerifier):
    """
    Unsigned envelopes for tests and local runs.

    Envelopes carry a zero signature that is never checked. Setting
    `accept = False` makes every verification fail, like a transport
    whose guardians refuse to sign.
    """

    def __init__(self, accept: bool = True) -> None:
        self.accept = accept

    def create_envelope(
        self,
        chain_id: int,
        emitter: HexLike,
        sequence: int,
        payload: bytes,
        timestamp: int = 0,
        nonce: int = 0,
    ) -> bytes:
        body = envelope_body(chain_id, emitter, sequence, payload, timestamp, nonce)
        return assemble(b"\x00" * SIGNATURE_SIZE, body)

    async def verify(self, raw: bytes) -> TransportEnvelope:
        if not self.accept:
            return TransportEnvelope.invalid("mock transport rejects all envelopes")
        try:
            return parse_envelope(raw).envelope
        except ValueError as ex:
            return TransportEnvelope.invalid(str(ex))
