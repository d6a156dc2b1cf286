"""
Ed25519 keypairs for ledger accounts.

Provides key generation, signing and verification. A keypair's public key
is its ledger address.
"""

from __future__ import annotations
import hashlib
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey,
)
from cryptography.hazmat.primitives import serialization

from ..runtime.address import Address


class Ed25519Error(Exception):
    """Base exception for Ed25519 operations."""
    pass


def verify_signature(address: Union[Address, bytes], signature: bytes, message: bytes) -> bool:
    """
    Verify a signature against a message for the given address.

    Args:
        address: Address (public key) of the signer
        signature: 64-byte Ed25519 signature
        message: Message that was signed

    Returns:
        True if signature is valid
    """
    if len(signature) != 64:
        return False
    key_bytes = address.to_bytes() if isinstance(address, Address) else bytes(address)
    try:
        CryptoEd25519PublicKey.from_public_bytes(key_bytes).verify(signature, message)
        return True
    except (InvalidSignature, ValueError):
        return False


class Keypair:
    """
    Ed25519 keypair.

    Provides signing operations and the derived address.
    """

    def __init__(self, private_key_bytes: bytes):
        """
        Initialize from 32-byte private key seed.

        Args:
            private_key_bytes: 32-byte Ed25519 private key seed

        Raises:
            Ed25519Error: If key is invalid
        """
        if len(private_key_bytes) != 32:
            raise Ed25519Error(f"Ed25519 private key must be 32 bytes, got {len(private_key_bytes)}")

        self._key_bytes = private_key_bytes
        try:
            self._crypto_key = CryptoEd25519PrivateKey.from_private_bytes(private_key_bytes)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 private key: {e}")

        self._address = Address(
            self._crypto_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        )

    @classmethod
    def generate(cls) -> Keypair:
        """Generate a new random keypair."""
        crypto_key = CryptoEd25519PrivateKey.generate()
        private_bytes = crypto_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return cls(private_bytes)

    @classmethod
    def from_seed(cls, seed: Union[str, bytes]) -> Keypair:
        """
        Derive a keypair from an arbitrary seed using SHA-256.

        For deterministic test keys.
        """
        if isinstance(seed, str):
            seed = seed.encode('utf-8')
        return cls(hashlib.sha256(seed).digest())

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> Keypair:
        """
        Load a keypair from a 64-byte secret key (seed followed by public key).

        Raises:
            Ed25519Error: If the embedded public key does not match the seed
        """
        if len(secret_key) != 64:
            raise Ed25519Error(f"Secret key must be 64 bytes, got {len(secret_key)}")
        keypair = cls(bytes(secret_key[:32]))
        if keypair.address.to_bytes() != bytes(secret_key[32:]):
            raise Ed25519Error("Secret key public half does not match its seed")
        return keypair

    @property
    def address(self) -> Address:
        """The ledger address (public key) of this keypair."""
        return self._address

    def to_bytes(self) -> bytes:
        """Get the 32-byte private key seed."""
        return self._key_bytes

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Message to sign

        Returns:
            64-byte Ed25519 signature
        """
        return self._crypto_key.sign(message)

    def verify(self, signature: bytes, message: bytes) -> bool:
        return verify_signature(self._address, signature, message)

    def __str__(self) -> str:
        return f"Keypair({self._address})"

    def __repr__(self) -> str:
        return f"Keypair(address='{self._address}')"


__all__ = ["Ed25519Error", "Keypair", "verify_signature"]
