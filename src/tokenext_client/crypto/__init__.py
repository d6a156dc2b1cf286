"""
Cryptographic primitives for the token extension SDK.
"""

from .ed25519 import Ed25519Error, Keypair, verify_signature

__all__ = ["Ed25519Error", "Keypair", "verify_signature"]
