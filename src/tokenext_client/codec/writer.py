"""
Binary Writer for token program wire formats.

Little-endian primitives, borsh-style length-prefixed strings and the
compact-u16 arrays used by legacy transaction messages.
"""

import struct
from typing import List, Optional

from ..runtime.address import Address, ADDRESS_LENGTH


class BinaryWriter:
    """
    Binary writer accumulating bytes for instruction data and account state.
    """

    def __init__(self):
        """Initialize writer with empty byte buffer."""
        self._bb: List[int] = []

    def __len__(self) -> int:
        return len(self._bb)

    def u8(self, v: int) -> "BinaryWriter":
        """Write unsigned 8-bit integer."""
        self._bb.append(v & 0xFF)
        return self

    def bool(self, v: bool) -> "BinaryWriter":
        return self.u8(1 if v else 0)

    def u16le(self, v: int) -> "BinaryWriter":
        """Write unsigned 16-bit integer in little-endian format."""
        self._bb.extend(struct.pack('<H', v & 0xFFFF))
        return self

    def i16le(self, v: int) -> "BinaryWriter":
        """
        Write signed 16-bit integer in little-endian format.

        Raises:
            struct.error: If the value does not fit in 16 bits
        """
        self._bb.extend(struct.pack('<h', v))
        return self

    def u32le(self, v: int) -> "BinaryWriter":
        """Write unsigned 32-bit integer in little-endian format."""
        self._bb.extend(struct.pack('<I', v & 0xFFFFFFFF))
        return self

    def u64le(self, v: int) -> "BinaryWriter":
        """Write unsigned 64-bit integer in little-endian format."""
        self._bb.extend(struct.pack('<Q', v & 0xFFFFFFFFFFFFFFFF))
        return self

    def i64le(self, v: int) -> "BinaryWriter":
        self._bb.extend(struct.pack('<q', v))
        return self

    def bytes(self, v: bytes) -> "BinaryWriter":
        """Write raw bytes without length prefix."""
        self._bb.extend(v)
        return self

    def address(self, v: Address) -> "BinaryWriter":
        """Write a 32-byte address."""
        return self.bytes(v.to_bytes())

    def optional_nonzero_address(self, v: Optional[Address]) -> "BinaryWriter":
        """
        Write an optional address as 32 bytes, all zero when absent.

        Used by extension configs that store ``OptionalNonZeroPubkey``.
        """
        if v is None:
            return self.bytes(bytes(ADDRESS_LENGTH))
        return self.address(v)

    def coption_address(self, v: Optional[Address]) -> "BinaryWriter":
        """
        Write an instruction-level ``COption<Pubkey>``.

        A present key is a 1 tag byte followed by 32 bytes; an absent key is a
        single 0 byte.
        """
        if v is None:
            return self.u8(0)
        self.u8(1)
        return self.address(v)

    def string(self, s: str) -> "BinaryWriter":
        """Write a UTF-8 string with a u32 little-endian length prefix."""
        encoded = s.encode("utf-8")
        self.u32le(len(encoded))
        return self.bytes(encoded)

    def compact_u16(self, v: int) -> "BinaryWriter":
        """
        Write a compact-u16 (short vec length).

        Same 7-bit continuation encoding as ULEB128, limited to 16 bits.
        """
        if v < 0 or v > 0xFFFF:
            raise ValueError(f"compact-u16 out of range: {v}")
        x = v
        while x >= 0x80:
            self.u8((x & 0x7F) | 0x80)
            x >>= 7
        self.u8(x)
        return self

    def to_bytes(self) -> bytes:
        """Return accumulated bytes as immutable bytes object."""
        return bytes(self._bb)
