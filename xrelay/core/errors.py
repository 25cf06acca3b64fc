"""
Exception types for the checkpoint relay.

Two independent families:
- ReceptionError: rejections raised by the reception pipeline. Each carries a
  RejectionReason and the pipeline stage where it was raised.
- RegistryError: administrative failures on the trusted emitter registry.
"""

from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    TRANSPORT_INVALID = "TransportInvalid"
    REPLAY = "Replay"
    UNTRUSTED = "Untrusted"
    MALFORMED = "Malformed"
    INVALID_VERSION = "InvalidVersion"
    INVALID_CID = "InvalidCID"
    INVALID_TIMESTAMP = "InvalidTimestamp"
    INVALID_EXPIRATION = "InvalidExpiration"
    INVALID_CREATOR = "InvalidCreator"
    INVALID_SOURCE_CHAIN = "InvalidSourceChain"
    MESSAGE_TOO_OLD = "MessageTooOld"
    UNIQUENESS_CONFLICT = "UniquenessConflict"


class ReceptionError(Exception):
    """Base class for every pipeline rejection."""

    reason: RejectionReason

    def __init__(self, message: str = "", stage: Optional[str] = None) -> None:
        super().__init__(message or self.reason.value)
        self.stage = stage


class TransportInvalidError(ReceptionError):
    """Raised when the transport verifier rejects the envelope."""
    reason = RejectionReason.TRANSPORT_INVALID


class ReplayError(ReceptionError):
    """Raised when the message id has already been consumed."""
    reason = RejectionReason.REPLAY


class UntrustedEmitterError(ReceptionError):
    """Raised when (origin chain, sender) is not whitelisted."""
    reason = RejectionReason.UNTRUSTED


class MalformedMessageError(ReceptionError):
    """Raised when payload bytes cannot be decoded."""
    reason = RejectionReason.MALFORMED


class SemanticValidationError(ReceptionError):
    """Decoded message failed one of the semantic checks."""
    reason: RejectionReason


class InvalidVersionError(SemanticValidationError):
    reason = RejectionReason.INVALID_VERSION


class InvalidCIDError(SemanticValidationError):
    reason = RejectionReason.INVALID_CID


class InvalidTimestampError(SemanticValidationError):
    reason = RejectionReason.INVALID_TIMESTAMP


class InvalidExpirationError(SemanticValidationError):
    reason = RejectionReason.INVALID_EXPIRATION


class InvalidCreatorError(SemanticValidationError):
    reason = RejectionReason.INVALID_CREATOR


class InvalidSourceChainError(SemanticValidationError):
    reason = RejectionReason.INVALID_SOURCE_CHAIN


class MessageTooOldError(SemanticValidationError):
    reason = RejectionReason.MESSAGE_TOO_OLD


class UniquenessConflictError(ReceptionError):
    """Raised when (content hash, origin chain) is already bound to another id."""
    reason = RejectionReason.UNIQUENESS_CONFLICT


class CheckpointNotFoundError(LookupError):
    """Query miss. Never mutates state."""
    pass


class DuplicateCheckpointError(Exception):
    """Raised when a message id is already stored."""
    pass


class StoreError(Exception):
    """Raised when checkpoint store or replay guard I/O fails."""
    pass


class IntegrityError(Exception):
    """Raised when hash chain verification fails."""
    pass


class RegistryError(Exception):
    """Base class for trusted emitter administration failures."""
    pass


class UnauthorizedError(RegistryError):
    """Caller is not the privileged administrator."""
    pass


class ZeroChainIdError(RegistryError):
    pass


class ZeroEmitterError(RegistryError):
    pass


class EmitterAlreadyTrustedError(RegistryError):
    pass


class EmitterNotTrustedError(RegistryError):
    pass


class BatchLengthMismatchError(RegistryError):
    pass
