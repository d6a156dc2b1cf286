"""
Binary Reader for token program wire formats.

Mirror of ``BinaryWriter``: little-endian primitives, borsh strings,
compact-u16 lengths and the account-state ``COption`` encoding.
"""

import builtins
import struct
from typing import Optional

from ..runtime.address import Address, ADDRESS_LENGTH


class BinaryReader:
    """
    Binary reader over an immutable byte buffer.
    """

    def __init__(self, buf: builtins.bytes):
        """
        Initialize reader with byte buffer.

        Args:
            buf: Byte buffer to read from
        """
        self._buf = buf
        self._off = 0

    @property
    def eof(self) -> bool:
        """True if at end of buffer."""
        return self._off >= len(self._buf)

    @property
    def offset(self) -> int:
        return self._off

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._off

    def _take(self, n: int) -> builtins.bytes:
        if self._off + n > len(self._buf):
            raise IndexError(f"Buffer overflow: attempting to read {n} bytes beyond end")
        out = self._buf[self._off : self._off + n]
        self._off += n
        return out

    def u8(self) -> int:
        """Read unsigned 8-bit integer."""
        return self._take(1)[0]

    def u16le(self) -> int:
        return struct.unpack("<H", self._take(2))[0]

    def i16le(self) -> int:
        return struct.unpack("<h", self._take(2))[0]

    def u32le(self) -> int:
        return struct.unpack("<I", self._take(4))[0]

    def u64le(self) -> int:
        return struct.unpack("<Q", self._take(8))[0]

    def i64le(self) -> int:
        return struct.unpack("<q", self._take(8))[0]

    def bytes(self, n: int) -> builtins.bytes:
        """Read n bytes from buffer."""
        return self._take(n)

    def skip(self, n: int) -> None:
        self._take(n)

    def address(self) -> Address:
        return Address(self._take(ADDRESS_LENGTH))

    def optional_nonzero_address(self) -> Optional[Address]:
        """Read a 32-byte address where all zeros means absent."""
        raw = self._take(ADDRESS_LENGTH)
        if raw == bytes(ADDRESS_LENGTH):
            return None
        return Address(raw)

    def state_coption_address(self) -> Optional[Address]:
        """
        Read an account-state ``COption<Pubkey>``: a u32 tag followed by 32 bytes.
        """
        tag = self.u32le()
        raw = self._take(ADDRESS_LENGTH)
        return Address(raw) if tag == 1 else None

    def coption_address(self) -> Optional[Address]:
        """Read an instruction-level ``COption<Pubkey>``: a tag byte, then 32 bytes if present."""
        if self.u8() == 0:
            return None
        return self.address()

    def string(self) -> str:
        """Read a UTF-8 string with a u32 little-endian length prefix."""
        n = self.u32le()
        return self._take(n).decode("utf-8")

    def compact_u16(self) -> int:
        x = 0
        s = 0
        while True:
            b = self.u8()
            x |= (b & 0x7F) << s
            if b < 0x80:
                break
            s += 7
            if s > 14:
                raise ValueError("compact-u16 overflow")
        return x
