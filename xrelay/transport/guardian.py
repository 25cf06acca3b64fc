"""
Ed25519 guardian signatures for transport envelopes.

A single guardian key signs the envelope body. GuardianVerifier checks the
signature with the guardian's public key before exposing envelope fields.

Key management:
- Dev mode: ~/.xrelay/keys/guardian_ed25519
- Prod mode: mounted secret, path passed explicitly
"""

import hashlib
import os
from pathlib import Path
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..core.ids import HexLike
from .envelope import TransportEnvelope, assemble, envelope_body, parse_envelope
from .verifier import TransportVerifier


def _pubkey_id(public_key: Ed25519PublicKey) -> str:
    public_pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(public_pem).hexdigest()[:16]


class GuardianKey:
    """
    Ed25519 guardian signing key.

    Provides:
    - Key generation and PEM load/save
    - Envelope signing
    """

    def __init__(self, private_key: Ed25519PrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()

    @classmethod
    def generate(cls) -> "GuardianKey":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def load_from_file(cls, path: str) -> "GuardianKey":
        """
        Load private key from PEM file.

        Raises:
            FileNotFoundError: If key file doesn't exist
            ValueError: If key format is invalid
        """
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=None)

        if not isinstance(private_key, Ed25519PrivateKey):
            raise ValueError("Key file is not Ed25519 private key")

        return cls(private_key)

    def save_to_file(self, path: str, public_path: Optional[str] = None) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        private_pem = self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        with open(path, "wb") as f:
            f.write(private_pem)

        if public_path:
            with open(public_path, "wb") as f:
                f.write(self.get_public_key_pem())

    def sign(self, body: bytes) -> bytes:
        return self.private_key.sign(body)

    def get_pubkey_id(self) -> str:
        """SHA-256 of the public key PEM, first 16 hex chars."""
        return _pubkey_id(self.public_key)

    def get_public_key_pem(self) -> bytes:
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def build_envelope(
        self,
        chain_id: int,
        emitter: HexLike,
        sequence: int,
        payload: bytes,
        timestamp: int = 0,
        nonce: int = 0,
        consistency_level: int = 1,
    ) -> bytes:
        """Build and sign a complete transport envelope."""
        body = envelope_body(chain_id, emitter, sequence, payload, timestamp, nonce, consistency_level)
        return assemble(self.sign(body), body)


class GuardianVerifier(TransportVerifier):
    """Accepts envelopes whose body is signed by the configured guardian."""

    def __init__(self, public_key: Ed25519PublicKey):
        self.public_key = public_key

    @classmethod
    def load_from_file(cls, path: str) -> "GuardianVerifier":
        with open(path, "rb") as f:
            public_key = serialization.load_pem_public_key(f.read())

        if not isinstance(public_key, Ed25519PublicKey):
            raise ValueError("Key file is not Ed25519 public key")

        return cls(public_key)

    @classmethod
    def from_guardian_key(cls, key: GuardianKey) -> "GuardianVerifier":
        return cls(key.public_key)

    def get_pubkey_id(self) -> str:
        return _pubkey_id(self.public_key)

    async def verify(self, raw: bytes) -> TransportEnvelope:
        try:
            parsed = parse_envelope(raw)
        except ValueError as ex:
            return TransportEnvelope.invalid(str(ex))

        try:
            self.public_key.verify(parsed.signature, parsed.body)
        except InvalidSignature:
            return TransportEnvelope.invalid("invalid guardian signature")

        return parsed.envelope


def get_default_key_path() -> Path:
    return Path.home() / ".xrelay" / "keys" / "guardian_ed25519"


def ensure_keypair(key_path: Optional[str] = None) -> Tuple[str, str]:
    """
    Ensure guardian keypair exists (generate if missing).

    Returns:
        (private_key_path, public_key_path) tuple
    """
    if key_path is None:
        key_path = str(get_default_key_path())

    public_key_path = key_path + ".pub"

    if not os.path.exists(key_path):
        GuardianKey.generate().save_to_file(key_path, public_key_path)

    return key_path, public_key_path
