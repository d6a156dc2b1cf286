"""
System program instructions.
"""

from __future__ import annotations

from ..codec.transaction import AccountMeta, Instruction
from ..codec.writer import BinaryWriter
from ..runtime.address import Address, SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID

CREATE_ACCOUNT = 0
TRANSFER = 2


def create_account(
    payer: Address,
    new_account: Address,
    lamports: int,
    space: int,
    owner: Address = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Allocate ``space`` bytes for a new account funded with ``lamports``."""
    data = (
        BinaryWriter()
        .u32le(CREATE_ACCOUNT)
        .u64le(lamports)
        .u64le(space)
        .address(owner)
        .to_bytes()
    )
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(new_account, is_signer=True, is_writable=True),
        ),
        data=data,
    )


def transfer(source: Address, destination: Address, lamports: int) -> Instruction:
    data = BinaryWriter().u32le(TRANSFER).u64le(lamports).to_bytes()
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(source, is_signer=True, is_writable=True),
            AccountMeta(destination, is_writable=True),
        ),
        data=data,
    )
