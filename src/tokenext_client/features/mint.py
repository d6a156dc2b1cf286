"""
Mint handle.

A mint is an address plus the ledger it lives on. Feature modules operate
on the handle instead of subclassing it, so any mint can gain feature
wrappers after creation.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Union

from ..codec.account import MintState, decode_mint
from ..codec.transaction import Instruction
from ..enums import ExtensionKind, ExtensionType
from ..ledger.base import Confirmation, LedgerClient
from ..runtime.address import Address
from ..runtime.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Mint:
    """Handle on an existing mint account."""

    def __init__(self, address: Union[Address, str], ledger: LedgerClient):
        self.address = address if isinstance(address, Address) else Address(address)
        self.ledger = ledger

    def __repr__(self) -> str:
        return f"Mint({self.address})"

    def read_state(self) -> MintState:
        """
        Fetch and decode the mint account.

        Raises:
            AccountNotFoundError: If the account does not exist
            ConfigurationError: If the account is not a mint
        """
        data = self.ledger.read_account(self.address)
        try:
            return decode_mint(data)
        except ValueError as e:
            raise ConfigurationError(f"Account {self.address} is not a mint: {e}", cause=e)

    def extension_types(self) -> List[Union[ExtensionType, int]]:
        return self.read_state().extension_types()

    def extensions(self) -> List[ExtensionKind]:
        """Composable extension kinds present on the mint."""
        kinds = []
        for code in self.extension_types():
            try:
                kinds.append(ExtensionKind(int(code)))
            except ValueError:
                continue
        return kinds

    def has_extension(self, kind: Union[ExtensionKind, ExtensionType]) -> bool:
        return int(kind) in {int(code) for code in self.extension_types()}

    def extension_data(self, extension_type: ExtensionType) -> Optional[bytes]:
        return self.read_state().extension_data(extension_type)


def submit(
    ledger: LedgerClient,
    instructions: Sequence[Instruction],
    fee_payer,
    *signers,
) -> Confirmation:
    """
    Submit feature instructions atomically.

    Args:
        ledger: Ledger client
        instructions: Instructions built by a feature wrapper
        fee_payer: Keypair paying the transaction fee
        *signers: Authority keypairs the instructions require
    """
    if isinstance(instructions, Instruction):
        instructions = [instructions]
    logger.info(f"Submitting {len(instructions)} feature instruction(s)")
    return ledger.submit_atomic(list(instructions), [fee_payer, *signers], fee_payer.address)


__all__ = ["Mint", "submit"]
