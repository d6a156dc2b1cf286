"""
Mint account state codec.

A mint with extensions is laid out as the 82-byte base record, zero padding
up to the 165-byte token-account length, a one-byte account-type marker and
then a sequence of TLV entries (u16 type, u16 length, value). A mint without
extensions is only the base record.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from ..enums import AccountState, AccountType, ExtensionType
from ..runtime.address import Address, ADDRESS_LENGTH
from .reader import BinaryReader
from .writer import BinaryWriter

MINT_SIZE = 82
ACCOUNT_SIZE = 165
ACCOUNT_TYPE_SIZE = 1
TYPE_SIZE = 2
LENGTH_SIZE = 2
TLV_START = ACCOUNT_SIZE + ACCOUNT_TYPE_SIZE


@dataclass
class MintState:
    """Decoded base record and raw TLV entries of a mint account."""
    mint_authority: Optional[Address]
    supply: int
    decimals: int
    is_initialized: bool
    freeze_authority: Optional[Address]
    account_type: Optional[AccountType] = None
    tlv: List[Tuple[int, bytes]] = field(default_factory=list)

    def extension_types(self) -> List[Union[ExtensionType, int]]:
        """Types of the TLV entries in account order; unknown codes stay ints."""
        out: List[Union[ExtensionType, int]] = []
        for type_code, _ in self.tlv:
            try:
                out.append(ExtensionType(type_code))
            except ValueError:
                out.append(type_code)
        return out

    def extension_data(self, extension_type: ExtensionType) -> Optional[bytes]:
        for type_code, value in self.tlv:
            if type_code == int(extension_type):
                return value
        return None


@dataclass(frozen=True)
class TransferFee:
    epoch: int
    maximum_fee: int
    transfer_fee_basis_points: int


@dataclass(frozen=True)
class TransferFeeConfigState:
    transfer_fee_config_authority: Optional[Address]
    withdraw_withheld_authority: Optional[Address]
    withheld_amount: int
    older_transfer_fee: TransferFee
    newer_transfer_fee: TransferFee

    def fee_for_epoch(self, epoch: int) -> TransferFee:
        if epoch >= self.newer_transfer_fee.epoch:
            return self.newer_transfer_fee
        return self.older_transfer_fee


@dataclass(frozen=True)
class InterestBearingConfigState:
    rate_authority: Optional[Address]
    initialization_timestamp: int
    pre_update_average_rate: int
    last_update_timestamp: int
    current_rate: int


@dataclass(frozen=True)
class PointerState:
    """Shared shape of metadata-pointer and transfer-hook configs."""
    authority: Optional[Address]
    target: Optional[Address]


def decode_mint(data: bytes) -> MintState:
    """
    Decode a mint account.

    Raises:
        ValueError: If the data is too short or the TLV area is malformed
    """
    if len(data) < MINT_SIZE:
        raise ValueError(f"Mint account data must be at least {MINT_SIZE} bytes, got {len(data)}")

    reader = BinaryReader(data)
    mint_authority = reader.state_coption_address()
    supply = reader.u64le()
    decimals = reader.u8()
    is_initialized = reader.u8() == 1
    freeze_authority = reader.state_coption_address()

    state = MintState(
        mint_authority=mint_authority,
        supply=supply,
        decimals=decimals,
        is_initialized=is_initialized,
        freeze_authority=freeze_authority,
    )
    if len(data) <= ACCOUNT_SIZE:
        return state

    state.account_type = AccountType(data[ACCOUNT_SIZE])
    reader = BinaryReader(data[TLV_START:])
    while reader.remaining >= TYPE_SIZE + LENGTH_SIZE:
        type_code = reader.u16le()
        if type_code == ExtensionType.UNINITIALIZED:
            break
        length = reader.u16le()
        if length > reader.remaining:
            raise ValueError(f"TLV entry {type_code} claims {length} bytes, {reader.remaining} left")
        state.tlv.append((type_code, reader.bytes(length)))
    return state


def encode_mint(
    mint_authority: Optional[Address],
    decimals: int,
    *,
    supply: int = 0,
    is_initialized: bool = True,
    freeze_authority: Optional[Address] = None,
    tlv: Optional[List[Tuple[int, bytes]]] = None,
) -> bytes:
    """Encode a mint account; the inverse of ``decode_mint``."""
    writer = BinaryWriter()
    _state_coption(writer, mint_authority)
    writer.u64le(supply)
    writer.u8(decimals)
    writer.bool(is_initialized)
    _state_coption(writer, freeze_authority)
    if not tlv:
        return writer.to_bytes()

    writer.bytes(bytes(ACCOUNT_SIZE - MINT_SIZE))
    writer.u8(AccountType.MINT)
    for type_code, value in tlv:
        writer.u16le(int(type_code))
        writer.u16le(len(value))
        writer.bytes(value)
    return writer.to_bytes()


def _state_coption(writer: BinaryWriter, value: Optional[Address]) -> None:
    writer.u32le(0 if value is None else 1)
    writer.optional_nonzero_address(value)


def decode_transfer_fee_config(value: bytes) -> TransferFeeConfigState:
    reader = BinaryReader(value)
    config_authority = reader.optional_nonzero_address()
    withdraw_authority = reader.optional_nonzero_address()
    withheld = reader.u64le()
    older = TransferFee(reader.u64le(), reader.u64le(), reader.u16le())
    newer = TransferFee(reader.u64le(), reader.u64le(), reader.u16le())
    return TransferFeeConfigState(config_authority, withdraw_authority, withheld, older, newer)


def encode_transfer_fee_config(state: TransferFeeConfigState) -> bytes:
    writer = BinaryWriter()
    writer.optional_nonzero_address(state.transfer_fee_config_authority)
    writer.optional_nonzero_address(state.withdraw_withheld_authority)
    writer.u64le(state.withheld_amount)
    for fee in (state.older_transfer_fee, state.newer_transfer_fee):
        writer.u64le(fee.epoch).u64le(fee.maximum_fee).u16le(fee.transfer_fee_basis_points)
    return writer.to_bytes()


def decode_interest_bearing_config(value: bytes) -> InterestBearingConfigState:
    reader = BinaryReader(value)
    return InterestBearingConfigState(
        rate_authority=reader.optional_nonzero_address(),
        initialization_timestamp=reader.i64le(),
        pre_update_average_rate=reader.i16le(),
        last_update_timestamp=reader.i64le(),
        current_rate=reader.i16le(),
    )


def encode_interest_bearing_config(state: InterestBearingConfigState) -> bytes:
    writer = BinaryWriter()
    writer.optional_nonzero_address(state.rate_authority)
    writer.i64le(state.initialization_timestamp)
    writer.i16le(state.pre_update_average_rate)
    writer.i64le(state.last_update_timestamp)
    writer.i16le(state.current_rate)
    return writer.to_bytes()


def decode_pointer(value: bytes) -> PointerState:
    reader = BinaryReader(value)
    return PointerState(reader.optional_nonzero_address(), reader.optional_nonzero_address())


def decode_address(value: bytes) -> Optional[Address]:
    """Decode a single optional address (permanent delegate, close authority)."""
    return BinaryReader(value).optional_nonzero_address()


def decode_default_account_state(value: bytes) -> AccountState:
    return AccountState(value[0])


__all__ = [
    "MINT_SIZE",
    "ACCOUNT_SIZE",
    "ACCOUNT_TYPE_SIZE",
    "TYPE_SIZE",
    "LENGTH_SIZE",
    "MintState",
    "TransferFee",
    "TransferFeeConfigState",
    "InterestBearingConfigState",
    "PointerState",
    "decode_mint",
    "encode_mint",
    "decode_transfer_fee_config",
    "encode_transfer_fee_config",
    "decode_interest_bearing_config",
    "encode_interest_bearing_config",
    "decode_pointer",
    "decode_address",
    "decode_default_account_state",
]
