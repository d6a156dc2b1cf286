"""
Binary codecs for the token extension SDK.

Key components:
- writer.py / reader.py: little-endian primitives, borsh strings, compact-u16
- account.py: mint account base record and TLV entries
- metadata.py: descriptive metadata packing
- transaction.py: legacy transaction messages and signing
"""

from .reader import BinaryReader
from .writer import BinaryWriter
from .metadata import MetadataCodec, TokenMetadataState, default_codec
from .transaction import (
    AccountMeta,
    Instruction,
    Message,
    SignedTransaction,
    compile_message,
    sign_message,
    estimate_transaction_size,
    PACKET_DATA_SIZE,
)

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "MetadataCodec",
    "TokenMetadataState",
    "default_codec",
    "AccountMeta",
    "Instruction",
    "Message",
    "SignedTransaction",
    "compile_message",
    "sign_message",
    "estimate_transaction_size",
    "PACKET_DATA_SIZE",
]
