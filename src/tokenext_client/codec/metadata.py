"""
Token metadata codec.

Packs descriptive metadata the way the token metadata interface stores it
inside a mint's TLV area:

    update_authority (32) | mint (32) | name | symbol | uri | additional

Strings are u32-length-prefixed UTF-8; ``additional`` is a u32 pair count
followed by key/value strings. The encoded length depends only on the
metadata value: both addresses are fixed-size and an absent update authority
is written as 32 zero bytes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..models import DescriptiveMetadata
from ..runtime.address import Address, ADDRESS_LENGTH
from .reader import BinaryReader
from .writer import BinaryWriter

STRING_PREFIX_SIZE = 4
PAIR_COUNT_SIZE = 4
FIXED_HEADER_SIZE = 2 * ADDRESS_LENGTH


@dataclass(frozen=True)
class TokenMetadataState:
    """Metadata as read back from a mint account."""
    update_authority: Optional[Address]
    mint: Address
    metadata: DescriptiveMetadata


class MetadataCodec:
    """Length-prefixed encoding of descriptive metadata."""

    def encode(self, metadata: DescriptiveMetadata, mint: Optional[Address] = None) -> bytes:
        """
        Encode metadata for storage.

        Args:
            metadata: Metadata to encode
            mint: Mint the metadata belongs to (zero address when not yet known)

        Returns:
            Packed metadata bytes
        """
        writer = BinaryWriter()
        writer.optional_nonzero_address(metadata.update_authority)
        writer.optional_nonzero_address(mint)
        writer.string(metadata.name)
        writer.string(metadata.symbol)
        writer.string(metadata.uri)
        writer.u32le(len(metadata.additional))
        for key, value in metadata.additional:
            writer.string(key)
            writer.string(value)
        return writer.to_bytes()

    def encoded_length(self, metadata: DescriptiveMetadata) -> int:
        """Size of ``encode(metadata)`` without building the bytes."""
        size = FIXED_HEADER_SIZE
        for text in (metadata.name, metadata.symbol, metadata.uri):
            size += STRING_PREFIX_SIZE + len(text.encode("utf-8"))
        size += PAIR_COUNT_SIZE
        for key, value in metadata.additional:
            size += 2 * STRING_PREFIX_SIZE + len(key.encode("utf-8")) + len(value.encode("utf-8"))
        return size

    def decode(self, data: bytes) -> TokenMetadataState:
        """
        Decode packed metadata.

        On-ledger values are not re-validated against the composition byte
        limits since other issuers may have written longer fields.
        """
        reader = BinaryReader(data)
        update_authority = reader.optional_nonzero_address()
        mint = reader.address()
        name = reader.string()
        symbol = reader.string()
        uri = reader.string()
        count = reader.u32le()
        additional = [(reader.string(), reader.string()) for _ in range(count)]
        metadata = DescriptiveMetadata.model_construct(
            name=name,
            symbol=symbol,
            uri=uri,
            additional=additional,
            update_authority=update_authority,
        )
        return TokenMetadataState(update_authority=update_authority, mint=mint, metadata=metadata)


default_codec = MetadataCodec()


__all__ = ["MetadataCodec", "TokenMetadataState", "default_codec"]
