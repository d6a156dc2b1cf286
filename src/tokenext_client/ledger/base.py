"""
Ledger client interface.

The composition engine consumes three ledger operations: a minimum-funding
quote, all-or-nothing submission of an instruction bundle, and raw account
reads.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ..codec.transaction import Instruction
from ..enums import Commitment
from ..runtime.address import Address


@dataclass(frozen=True)
class Confirmation:
    """Handle for a confirmed atomic submission."""
    signature: str
    slot: Optional[int] = None
    commitment: Commitment = Commitment.CONFIRMED


class LedgerClient(ABC):
    """
    Base ledger client interface.
    """

    @abstractmethod
    def minimum_funding(self, byte_size: int) -> int:
        """
        Minimum balance keeping an account of ``byte_size`` bytes alive.
        """
        pass

    @abstractmethod
    def submit_atomic(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence,
        fee_payer: Optional[Address] = None,
    ) -> Confirmation:
        """
        Submit instructions as one all-or-nothing transaction and wait for
        confirmation.

        Args:
            instructions: Instructions in execution order
            signers: Keypairs for every required signature
            fee_payer: Paying account; the first signer when omitted

        Raises:
            SubmissionError: If the ledger rejects the bundle
                or it cannot be delivered or confirmed
            NetworkError: If fetching data needed to build the bundle fails
        """
        pass

    @abstractmethod
    def read_account(self, address: Address) -> bytes:
        """
        Raw data of an account.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        pass


def resolve_fee_payer(signers: Sequence, fee_payer: Optional[Address]) -> Address:
    if fee_payer is not None:
        return fee_payer
    if not signers:
        raise ValueError("At least one signer is required to pay fees")
    return signers[0].address


__all__ = ["Confirmation", "LedgerClient", "resolve_fee_payer"]
