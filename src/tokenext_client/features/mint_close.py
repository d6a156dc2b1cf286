"""
Mint close authority feature.
"""

from __future__ import annotations
from typing import Optional

from ..codec.account import decode_address
from ..codec.transaction import Instruction
from ..enums import ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from .base import Feature


class MintCloseFeature(Feature):
    kind = ExtensionKind.MINT_CLOSE_AUTHORITY

    def close_authority(self) -> Optional[Address]:
        return decode_address(self._value())

    def close_mint(self, destination: Address, close_authority: Address) -> Instruction:
        """Close the mint and reclaim its balance; supply must be zero."""
        return token_ix.close_account(self.mint.address, destination, close_authority)


__all__ = ["MintCloseFeature"]
