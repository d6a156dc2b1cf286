"""
Default account state feature.
"""

from __future__ import annotations

from ..codec.account import decode_default_account_state
from ..codec.transaction import Instruction
from ..enums import AccountState, ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from ..runtime.errors import ConfigurationError
from .base import Feature


class DefaultAccountStateFeature(Feature):
    kind = ExtensionKind.DEFAULT_ACCOUNT_STATE

    def default_state(self) -> AccountState:
        return decode_default_account_state(self._value())

    def update_default_state(self, freeze_authority: Address, state: AccountState) -> Instruction:
        if state == AccountState.UNINITIALIZED:
            raise ConfigurationError("default account state must be initialized or frozen")
        return token_ix.update_default_account_state(self.mint.address, freeze_authority, state)


__all__ = ["DefaultAccountStateFeature"]
