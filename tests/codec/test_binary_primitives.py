"""
Little-endian primitives, strings, options and compact-u16.
"""

import pytest

from tokenext_client.codec import BinaryReader, BinaryWriter

from helpers.factories import mk_address


@pytest.mark.unit
class TestPrimitives:

    def test_little_endian_integers(self):
        data = BinaryWriter().u16le(0x0102).u32le(0x01020304).u64le(1).i16le(-2).i64le(-1).to_bytes()
        assert data[:2] == b"\x02\x01"
        assert data[2:6] == b"\x04\x03\x02\x01"
        assert data[6:14] == b"\x01" + bytes(7)
        assert data[14:16] == b"\xfe\xff"
        assert data[16:] == b"\xff" * 8

        reader = BinaryReader(data)
        assert (reader.u16le(), reader.u32le(), reader.u64le(), reader.i16le(), reader.i64le()) == (
            0x0102, 0x01020304, 1, -2, -1
        )
        assert reader.eof is True
        assert reader.remaining == 0

    def test_eof_tracks_position(self):
        reader = BinaryReader(b"\x01\x02")
        assert reader.eof is False
        reader.u8()
        assert reader.eof is False
        reader.u8()
        assert reader.eof is True

    def test_string_is_u32_prefixed_utf8(self):
        data = BinaryWriter().string("héllo").to_bytes()
        assert data[:4] == (6).to_bytes(4, "little")
        assert BinaryReader(data).string() == "héllo"

    def test_read_past_end(self):
        with pytest.raises(IndexError):
            BinaryReader(b"\x01").u16le()

    @pytest.mark.parametrize("value,encoded", [
        (0, b"\x00"),
        (0x7F, b"\x7f"),
        (0x80, b"\x80\x01"),
        (0x3FFF, b"\xff\x7f"),
        (0x4000, b"\x80\x80\x01"),
        (0xFFFF, b"\xff\xff\x03"),
    ])
    def test_compact_u16(self, value, encoded):
        assert BinaryWriter().compact_u16(value).to_bytes() == encoded
        assert BinaryReader(encoded).compact_u16() == value

    def test_compact_u16_range(self):
        with pytest.raises(ValueError):
            BinaryWriter().compact_u16(0x10000)


@pytest.mark.unit
class TestOptionalAddresses:

    def test_instruction_coption(self):
        address = mk_address("a")
        assert BinaryWriter().coption_address(None).to_bytes() == b"\x00"
        present = BinaryWriter().coption_address(address).to_bytes()
        assert present == b"\x01" + address.to_bytes()
        assert BinaryReader(present).coption_address() == address
        assert BinaryReader(b"\x00").coption_address() is None

    def test_optional_nonzero(self):
        assert BinaryWriter().optional_nonzero_address(None).to_bytes() == bytes(32)
        assert BinaryReader(bytes(32)).optional_nonzero_address() is None

    def test_state_coption_ignores_payload_when_absent(self):
        data = bytes(4) + mk_address("junk").to_bytes()
        assert BinaryReader(data).state_coption_address() is None
