"""
Permanent delegate feature.
"""

from __future__ import annotations
from typing import Optional

from ..codec.account import decode_address
from ..codec.transaction import Instruction
from ..enums import ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from .base import Feature


class PermanentDelegateFeature(Feature):
    kind = ExtensionKind.PERMANENT_DELEGATE

    def delegate(self) -> Optional[Address]:
        return decode_address(self._value())

    def delegated_transfer(
        self,
        source: Address,
        destination: Address,
        delegate: Address,
        amount: int,
        decimals: int,
    ) -> Instruction:
        """Move tokens out of any holder's account, signed by the delegate."""
        return token_ix.transfer_checked(source, self.mint.address, destination, delegate, amount, decimals)

    def delegated_burn(self, account: Address, delegate: Address, amount: int, decimals: int) -> Instruction:
        return token_ix.burn_checked(account, self.mint.address, delegate, amount, decimals)


__all__ = ["PermanentDelegateFeature"]
