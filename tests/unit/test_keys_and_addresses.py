"""
Addresses, base58 and Ed25519 keypairs.
"""

import pytest

from tokenext_client.crypto import Ed25519Error, Keypair, verify_signature
from tokenext_client.runtime.address import (
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    Address,
    b58decode,
    b58encode,
)

from helpers.factories import mk_keypair


@pytest.mark.unit
class TestAddress:

    def test_system_program_is_zero(self):
        assert SYSTEM_PROGRAM_ID.to_bytes() == bytes(32)
        assert Address.default() == SYSTEM_PROGRAM_ID

    def test_text_form(self):
        assert str(TOKEN_2022_PROGRAM_ID) == "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
        assert Address(TOKEN_2022_PROGRAM_ID.to_bytes()) == TOKEN_2022_PROGRAM_ID
        assert TOKEN_2022_PROGRAM_ID == "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

    def test_leading_zeros(self):
        raw = bytes(3) + b"\x01\x02"
        assert b58encode(raw).startswith("111")
        assert b58decode(b58encode(raw)) == raw

    @pytest.mark.parametrize("value", ["", "0OIl", "abc", b"\x01" * 31])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            Address(value)

    def test_hashable(self):
        assert len({Address(bytes(32)), SYSTEM_PROGRAM_ID}) == 1


@pytest.mark.unit
class TestKeypair:

    def test_seeded_keys_are_deterministic(self):
        assert mk_keypair("x").address == mk_keypair("x").address
        assert mk_keypair("x").address != mk_keypair("y").address

    def test_sign_and_verify(self):
        keypair = mk_keypair("signer")
        signature = keypair.sign(b"message")
        assert len(signature) == 64
        assert keypair.verify(signature, b"message")
        assert verify_signature(keypair.address, signature, b"message")
        assert not verify_signature(keypair.address, signature, b"other")
        assert not verify_signature(keypair.address, signature[:63], b"message")

    def test_secret_key(self):
        keypair = mk_keypair("secret")
        restored = Keypair.from_secret_key(keypair.to_bytes() + keypair.address.to_bytes())
        assert restored.address == keypair.address
        with pytest.raises(Ed25519Error):
            Keypair.from_secret_key(keypair.to_bytes() + bytes(32))

    def test_bad_seed_length(self):
        with pytest.raises(Ed25519Error):
            Keypair(bytes(31))

    def test_generated_keys_differ(self):
        assert Keypair.generate().address != Keypair.generate().address
