"""
Address Pydantic custom type for ledger account addresses.

An address is a 32-byte public key rendered in base58 text form.
"""

from __future__ import annotations
from typing import Any, Union
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema


B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
B58_MAP = {c: i for i, c in enumerate(B58_ALPHABET)}

ADDRESS_LENGTH = 32


def b58decode(s: Union[str, bytes]) -> bytes:
    """Decode a base58 string into bytes."""
    if isinstance(s, str):
        s_bytes = s.encode("ascii")
    else:
        s_bytes = s
    num = 0
    for c in s_bytes:
        if c not in B58_MAP:
            raise ValueError("Invalid base58 character")
        num = num * 58 + B58_MAP[c]
    # Count leading zeros
    n_pad = 0
    for c in s_bytes:
        if c == B58_ALPHABET[0]:
            n_pad += 1
        else:
            break
    full = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * n_pad + full


def b58encode(b: bytes) -> str:
    """Encode bytes as a base58 string."""
    n_pad = 0
    for c in b:
        if c == 0:
            n_pad += 1
        else:
            break
    num = int.from_bytes(b, "big")
    out = bytearray()
    while num > 0:
        num, rem = divmod(num, 58)
        out.append(B58_ALPHABET[rem])
    out.extend(B58_ALPHABET[0] for _ in range(n_pad))
    out.reverse()
    return out.decode("ascii")


class Address:
    """Custom Pydantic type for 32-byte ledger addresses."""

    __slots__ = ("_raw",)

    def __init__(self, value: Union[str, bytes, "Address"]):
        if isinstance(value, Address):
            raw = value._raw
        elif isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
        elif isinstance(value, str):
            if not value:
                raise ValueError("Address cannot be empty")
            try:
                raw = b58decode(value)
            except ValueError as e:
                raise ValueError(f"Invalid address '{value}': {e}")
        else:
            raise ValueError(f"Address must be str or bytes, got {type(value).__name__}")

        if len(raw) != ADDRESS_LENGTH:
            raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(raw)}")
        self._raw = raw

    @classmethod
    def default(cls) -> "Address":
        """The all-zero address, used where an optional key is absent."""
        return cls(bytes(ADDRESS_LENGTH))

    def to_bytes(self) -> bytes:
        return self._raw

    def __bytes__(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return b58encode(self._raw)

    def __repr__(self) -> str:
        return f"Address('{self}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Address):
            return self._raw == other._raw
        elif isinstance(other, str):
            return str(self) == other
        return False

    def __hash__(self) -> int:
        return hash(self._raw)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates the Address."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def _validate(cls, value: Any, _info=None) -> "Address":
        """Validate and convert the input to an Address."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (str, bytes, bytearray)):
            return cls(value)
        # Keypairs and public keys expose their address
        address = getattr(value, "address", None)
        if isinstance(address, cls):
            return address
        raise ValueError(f"Invalid Address: {value!r}")


SYSTEM_PROGRAM_ID = Address("11111111111111111111111111111111")
TOKEN_2022_PROGRAM_ID = Address("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
SYSVAR_RENT_ID = Address("SysvarRent111111111111111111111111111111111")


__all__ = [
    "Address",
    "ADDRESS_LENGTH",
    "b58decode",
    "b58encode",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "SYSVAR_RENT_ID",
]
