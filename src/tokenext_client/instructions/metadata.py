"""
Token metadata interface instructions.

Each instruction starts with an 8-byte discriminator: the first eight bytes
of the SHA-256 of ``spl_token_metadata_interface:<name>``.
"""

from __future__ import annotations
import hashlib
from typing import Union

from ..codec.transaction import AccountMeta, Instruction
from ..codec.writer import BinaryWriter
from ..enums import MetadataField
from ..runtime.address import Address, TOKEN_2022_PROGRAM_ID


def discriminator(name: str) -> bytes:
    return hashlib.sha256(f"spl_token_metadata_interface:{name}".encode("utf-8")).digest()[:8]


INITIALIZE_DISCRIMINATOR = discriminator("initialize_account")
UPDATE_FIELD_DISCRIMINATOR = discriminator("updating_field")
REMOVE_KEY_DISCRIMINATOR = discriminator("remove_key_ix")


def initialize_metadata(
    metadata: Address,
    update_authority: Address,
    mint: Address,
    mint_authority: Address,
    name: str,
    symbol: str,
    uri: str,
    program_id: Address = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Write name, symbol and uri; the mint authority must sign."""
    data = (
        BinaryWriter()
        .bytes(INITIALIZE_DISCRIMINATOR)
        .string(name)
        .string(symbol)
        .string(uri)
        .to_bytes()
    )
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta(metadata, is_writable=True),
            AccountMeta(update_authority),
            AccountMeta(mint),
            AccountMeta(mint_authority, is_signer=True),
        ),
        data=data,
    )


def encode_field(field: Union[MetadataField, str], writer: BinaryWriter) -> None:
    """Write a field selector; strings are always custom keys."""
    if isinstance(field, MetadataField):
        if field == MetadataField.KEY:
            raise ValueError("MetadataField.KEY needs the key name; pass the key string instead")
        writer.u8(field)
        return
    writer.u8(MetadataField.KEY)
    writer.string(field)


def update_field(
    metadata: Address,
    update_authority: Address,
    field: Union[MetadataField, str],
    value: str,
    program_id: Address = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Set a standard field or add/replace a custom key."""
    writer = BinaryWriter().bytes(UPDATE_FIELD_DISCRIMINATOR)
    encode_field(field, writer)
    writer.string(value)
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta(metadata, is_writable=True),
            AccountMeta(update_authority, is_signer=True),
        ),
        data=writer.to_bytes(),
    )


def remove_key(
    metadata: Address,
    update_authority: Address,
    key: str,
    idempotent: bool = False,
    program_id: Address = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    data = BinaryWriter().bytes(REMOVE_KEY_DISCRIMINATOR).bool(idempotent).string(key).to_bytes()
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta(metadata, is_writable=True),
            AccountMeta(update_authority, is_signer=True),
        ),
        data=data,
    )
