"""
Transfer fee feature.

Fee computation plus the instructions that move withheld fees and adjust
the fee schedule.
"""

from __future__ import annotations
from typing import Optional, Sequence

from ..codec.account import TransferFeeConfigState, decode_transfer_fee_config
from ..codec.transaction import Instruction
from ..composer.fees import calculate_fee
from ..enums import ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from .base import Feature
from .mint import Mint


class TransferFeeFeature(Feature):
    kind = ExtensionKind.TRANSFER_FEE

    def __init__(self, mint: Mint, config: Optional[TransferFeeConfigState] = None):
        super().__init__(mint)
        self.config = config

    @classmethod
    def load(cls, mint: Mint) -> TransferFeeFeature:
        """Read the fee configuration from the mint account."""
        feature = cls(mint)
        feature.config = decode_transfer_fee_config(feature._value())
        return feature

    def _loaded(self) -> TransferFeeConfigState:
        if self.config is None:
            self.config = decode_transfer_fee_config(self._value())
        return self.config

    def calculate_fee(self, amount: int, epoch: Optional[int] = None) -> int:
        """Fee withheld on ``amount`` under the schedule active at ``epoch`` (latest when omitted)."""
        config = self._loaded()
        fee = config.newer_transfer_fee if epoch is None else config.fee_for_epoch(epoch)
        return calculate_fee(amount, fee.transfer_fee_basis_points, fee.maximum_fee)

    def transfer_checked_with_fee(
        self,
        source: Address,
        destination: Address,
        owner: Address,
        amount: int,
        decimals: int,
        fee: Optional[int] = None,
    ) -> Instruction:
        if fee is None:
            fee = self.calculate_fee(amount)
        return token_ix.transfer_checked_with_fee(
            source, self.mint.address, destination, owner, amount, decimals, fee
        )

    def harvest_withheld_to_mint(self, sources: Sequence[Address]) -> Instruction:
        return token_ix.harvest_withheld_tokens_to_mint(self.mint.address, sources)

    def withdraw_withheld_from_mint(self, destination: Address, authority: Address) -> Instruction:
        return token_ix.withdraw_withheld_tokens_from_mint(self.mint.address, destination, authority)

    def withdraw_withheld_from_accounts(
        self,
        destination: Address,
        authority: Address,
        sources: Sequence[Address],
    ) -> Instruction:
        return token_ix.withdraw_withheld_tokens_from_accounts(self.mint.address, destination, authority, sources)

    def set_transfer_fee(self, authority: Address, fee_basis_points: int, max_fee: int) -> Instruction:
        return token_ix.set_transfer_fee(self.mint.address, authority, fee_basis_points, max_fee)


__all__ = ["TransferFeeFeature"]
