"""
Transfer hook feature.
"""

from __future__ import annotations
from typing import Optional

from ..codec.account import PointerState, decode_pointer
from ..codec.transaction import Instruction
from ..enums import ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from .base import Feature


class TransferHookFeature(Feature):
    kind = ExtensionKind.TRANSFER_HOOK

    def config(self) -> PointerState:
        """Hook authority and program id."""
        return decode_pointer(self._value())

    def update_program_id(self, authority: Address, program_id: Optional[Address]) -> Instruction:
        return token_ix.update_transfer_hook(self.mint.address, authority, program_id)


__all__ = ["TransferHookFeature"]
