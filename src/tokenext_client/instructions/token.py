"""
Token program instructions.

Base mint and transfer instructions plus the initialize and update
instructions of every composable extension. Extension instructions are
prefixed by the extension's instruction code and a sub-instruction byte.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Optional, Sequence

from ..codec.transaction import AccountMeta, Instruction
from ..codec.writer import BinaryWriter
from ..enums import AccountState
from ..runtime.address import Address, SYSVAR_RENT_ID, TOKEN_2022_PROGRAM_ID


class TokenInstruction(IntEnum):
    INITIALIZE_MINT = 0
    CLOSE_ACCOUNT = 9
    TRANSFER_CHECKED = 12
    BURN_CHECKED = 15
    INITIALIZE_MINT_CLOSE_AUTHORITY = 25
    TRANSFER_FEE_EXTENSION = 26
    DEFAULT_ACCOUNT_STATE_EXTENSION = 28
    INITIALIZE_NON_TRANSFERABLE_MINT = 32
    INTEREST_BEARING_MINT_EXTENSION = 33
    INITIALIZE_PERMANENT_DELEGATE = 35
    TRANSFER_HOOK_EXTENSION = 36
    METADATA_POINTER_EXTENSION = 39


class TransferFeeInstruction(IntEnum):
    INITIALIZE_TRANSFER_FEE_CONFIG = 0
    TRANSFER_CHECKED_WITH_FEE = 1
    WITHDRAW_WITHHELD_TOKENS_FROM_MINT = 2
    WITHDRAW_WITHHELD_TOKENS_FROM_ACCOUNTS = 3
    HARVEST_WITHHELD_TOKENS_TO_MINT = 4
    SET_TRANSFER_FEE = 5


INITIALIZE = 0
UPDATE = 1


def _ix(accounts, data: bytes, program_id: Address = TOKEN_2022_PROGRAM_ID) -> Instruction:
    return Instruction(program_id=program_id, accounts=tuple(accounts), data=data)


def _writable_mint(mint: Address) -> AccountMeta:
    return AccountMeta(mint, is_writable=True)


# =============================================================================
# Base mint
# =============================================================================

def initialize_mint(
    mint: Address,
    decimals: int,
    mint_authority: Address,
    freeze_authority: Optional[Address] = None,
) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.INITIALIZE_MINT)
        .u8(decimals)
        .address(mint_authority)
        .coption_address(freeze_authority)
        .to_bytes()
    )
    return _ix([_writable_mint(mint), AccountMeta(SYSVAR_RENT_ID)], data)


def transfer_checked(
    source: Address,
    mint: Address,
    destination: Address,
    authority: Address,
    amount: int,
    decimals: int,
) -> Instruction:
    data = BinaryWriter().u8(TokenInstruction.TRANSFER_CHECKED).u64le(amount).u8(decimals).to_bytes()
    return _ix(
        [
            AccountMeta(source, is_writable=True),
            AccountMeta(mint),
            AccountMeta(destination, is_writable=True),
            AccountMeta(authority, is_signer=True),
        ],
        data,
    )


def burn_checked(account: Address, mint: Address, authority: Address, amount: int, decimals: int) -> Instruction:
    data = BinaryWriter().u8(TokenInstruction.BURN_CHECKED).u64le(amount).u8(decimals).to_bytes()
    return _ix(
        [
            AccountMeta(account, is_writable=True),
            _writable_mint(mint),
            AccountMeta(authority, is_signer=True),
        ],
        data,
    )


def close_account(account: Address, destination: Address, authority: Address) -> Instruction:
    data = BinaryWriter().u8(TokenInstruction.CLOSE_ACCOUNT).to_bytes()
    return _ix(
        [
            AccountMeta(account, is_writable=True),
            AccountMeta(destination, is_writable=True),
            AccountMeta(authority, is_signer=True),
        ],
        data,
    )


# =============================================================================
# Extension initialization
# =============================================================================

def initialize_transfer_fee_config(
    mint: Address,
    fee_authority: Optional[Address],
    withdraw_authority: Optional[Address],
    fee_basis_points: int,
    max_fee: int,
) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.INITIALIZE_TRANSFER_FEE_CONFIG)
        .coption_address(fee_authority)
        .coption_address(withdraw_authority)
        .u16le(fee_basis_points)
        .u64le(max_fee)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


def initialize_permanent_delegate(mint: Address, delegate: Address) -> Instruction:
    data = BinaryWriter().u8(TokenInstruction.INITIALIZE_PERMANENT_DELEGATE).address(delegate).to_bytes()
    return _ix([_writable_mint(mint)], data)


def initialize_interest_bearing_mint(mint: Address, rate_authority: Optional[Address], rate: int) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.INTEREST_BEARING_MINT_EXTENSION)
        .u8(INITIALIZE)
        .optional_nonzero_address(rate_authority)
        .i16le(rate)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


def initialize_transfer_hook(mint: Address, authority: Optional[Address], program_id: Address) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_HOOK_EXTENSION)
        .u8(INITIALIZE)
        .optional_nonzero_address(authority)
        .optional_nonzero_address(program_id)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


def initialize_non_transferable_mint(mint: Address) -> Instruction:
    data = BinaryWriter().u8(TokenInstruction.INITIALIZE_NON_TRANSFERABLE_MINT).to_bytes()
    return _ix([_writable_mint(mint)], data)


def initialize_default_account_state(mint: Address, state: AccountState) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.DEFAULT_ACCOUNT_STATE_EXTENSION)
        .u8(INITIALIZE)
        .u8(state)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


def initialize_mint_close_authority(mint: Address, close_authority: Optional[Address]) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.INITIALIZE_MINT_CLOSE_AUTHORITY)
        .coption_address(close_authority)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


def initialize_metadata_pointer(
    mint: Address,
    authority: Optional[Address],
    metadata_address: Optional[Address],
) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.METADATA_POINTER_EXTENSION)
        .u8(INITIALIZE)
        .optional_nonzero_address(authority)
        .optional_nonzero_address(metadata_address)
        .to_bytes()
    )
    return _ix([_writable_mint(mint)], data)


# =============================================================================
# Post-creation extension operations
# =============================================================================

def transfer_checked_with_fee(
    source: Address,
    mint: Address,
    destination: Address,
    authority: Address,
    amount: int,
    decimals: int,
    fee: int,
) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.TRANSFER_CHECKED_WITH_FEE)
        .u64le(amount)
        .u8(decimals)
        .u64le(fee)
        .to_bytes()
    )
    return _ix(
        [
            AccountMeta(source, is_writable=True),
            AccountMeta(mint),
            AccountMeta(destination, is_writable=True),
            AccountMeta(authority, is_signer=True),
        ],
        data,
    )


def withdraw_withheld_tokens_from_mint(mint: Address, destination: Address, authority: Address) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.WITHDRAW_WITHHELD_TOKENS_FROM_MINT)
        .to_bytes()
    )
    return _ix(
        [
            _writable_mint(mint),
            AccountMeta(destination, is_writable=True),
            AccountMeta(authority, is_signer=True),
        ],
        data,
    )


def withdraw_withheld_tokens_from_accounts(
    mint: Address,
    destination: Address,
    authority: Address,
    sources: Sequence[Address],
) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.WITHDRAW_WITHHELD_TOKENS_FROM_ACCOUNTS)
        .u8(len(sources))
        .to_bytes()
    )
    accounts = [
        AccountMeta(mint),
        AccountMeta(destination, is_writable=True),
        AccountMeta(authority, is_signer=True),
    ]
    accounts.extend(AccountMeta(source, is_writable=True) for source in sources)
    return _ix(accounts, data)


def harvest_withheld_tokens_to_mint(mint: Address, sources: Sequence[Address]) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.HARVEST_WITHHELD_TOKENS_TO_MINT)
        .to_bytes()
    )
    accounts = [_writable_mint(mint)]
    accounts.extend(AccountMeta(source, is_writable=True) for source in sources)
    return _ix(accounts, data)


def set_transfer_fee(mint: Address, authority: Address, fee_basis_points: int, max_fee: int) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_FEE_EXTENSION)
        .u8(TransferFeeInstruction.SET_TRANSFER_FEE)
        .u16le(fee_basis_points)
        .u64le(max_fee)
        .to_bytes()
    )
    return _ix([_writable_mint(mint), AccountMeta(authority, is_signer=True)], data)


def update_interest_rate(mint: Address, rate_authority: Address, rate: int) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.INTEREST_BEARING_MINT_EXTENSION)
        .u8(UPDATE)
        .i16le(rate)
        .to_bytes()
    )
    return _ix([_writable_mint(mint), AccountMeta(rate_authority, is_signer=True)], data)


def update_default_account_state(mint: Address, freeze_authority: Address, state: AccountState) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.DEFAULT_ACCOUNT_STATE_EXTENSION)
        .u8(UPDATE)
        .u8(state)
        .to_bytes()
    )
    return _ix([_writable_mint(mint), AccountMeta(freeze_authority, is_signer=True)], data)


def update_transfer_hook(mint: Address, authority: Address, program_id: Optional[Address]) -> Instruction:
    data = (
        BinaryWriter()
        .u8(TokenInstruction.TRANSFER_HOOK_EXTENSION)
        .u8(UPDATE)
        .optional_nonzero_address(program_id)
        .to_bytes()
    )
    return _ix([_writable_mint(mint), AccountMeta(authority, is_signer=True)], data)
