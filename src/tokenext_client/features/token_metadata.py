"""
Embedded token metadata feature.
"""

from __future__ import annotations
from typing import Union

from ..codec.metadata import MetadataCodec, TokenMetadataState, default_codec
from ..codec.transaction import Instruction
from ..enums import ExtensionKind, ExtensionType, MetadataField
from ..instructions import metadata as metadata_ix
from ..runtime.address import Address
from ..runtime.errors import ConfigurationError
from .base import Feature
from .mint import Mint

_STANDARD_FIELDS = {
    "name": MetadataField.NAME,
    "symbol": MetadataField.SYMBOL,
    "uri": MetadataField.URI,
}


class TokenMetadataFeature(Feature):
    """Reads and edits metadata stored on the mint itself."""

    kind = ExtensionKind.METADATA_POINTER

    def __init__(self, mint: Mint, codec: MetadataCodec = default_codec):
        super().__init__(mint)
        self.codec = codec

    def read_metadata(self) -> TokenMetadataState:
        """
        Raises:
            ConfigurationError: If the mint holds no metadata
        """
        value = self.mint.extension_data(ExtensionType.TOKEN_METADATA)
        if value is None:
            raise ConfigurationError(f"Mint {self.mint.address} holds no token metadata")
        return self.codec.decode(value)

    def update_field(self, update_authority: Address, field: Union[MetadataField, str], value: str) -> Instruction:
        """
        Set ``name``, ``symbol``, ``uri`` or a custom key.

        The strings "name", "symbol" and "uri" select the standard fields.
        """
        if isinstance(field, str):
            field = _STANDARD_FIELDS.get(field, field)
        return metadata_ix.update_field(self.mint.address, update_authority, field, value)

    def remove_key(self, update_authority: Address, key: str, idempotent: bool = False) -> Instruction:
        if key in _STANDARD_FIELDS:
            raise ConfigurationError(f"'{key}' is a standard field and cannot be removed")
        return metadata_ix.remove_key(self.mint.address, update_authority, key, idempotent)


__all__ = ["TokenMetadataFeature"]
