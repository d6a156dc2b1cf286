"""
In-memory ledger.

A deterministic local ledger for tests and dry runs. It keeps lamport
balances and account data, verifies signatures, and applies each bundle
all-or-nothing: every instruction runs against a staged copy of the state,
which is committed only when all of them succeed.

System account creation and transfers are executed, as are the token
program instructions used to create a mint: extension declarations, base
mint initialization, and embedded metadata writes. The emulation enforces
the program's phase rules (extensions before the base mint, metadata after
it, exact account sizing, storage funding after every growth). Other token
instructions are rejected.
"""

from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..codec.account import (
    ACCOUNT_SIZE,
    MINT_SIZE,
    TLV_START,
    TransferFee,
    TransferFeeConfigState,
    encode_transfer_fee_config,
    decode_pointer,
    encode_mint,
)
from ..codec.metadata import MetadataCodec
from ..codec.reader import BinaryReader
from ..codec.transaction import PACKET_DATA_SIZE, Instruction, compile_message, sign_message
from ..codec.writer import BinaryWriter
from ..crypto.ed25519 import verify_signature
from ..enums import AccountState, AccountType, Commitment, ExtensionType, MetadataField
from ..instructions.metadata import (
    INITIALIZE_DISCRIMINATOR,
    REMOVE_KEY_DISCRIMINATOR,
    UPDATE_FIELD_DISCRIMINATOR,
)
from ..instructions.system import CREATE_ACCOUNT, TRANSFER
from ..instructions.token import INITIALIZE, TokenInstruction, TransferFeeInstruction
from ..models import DescriptiveMetadata
from ..runtime.address import Address, b58encode, SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID
from ..runtime.errors import AccountNotFoundError, SubmissionError
from .base import Confirmation, LedgerClient, resolve_fee_payer
from .rent import RentSchedule

logger = logging.getLogger(__name__)

LAMPORTS_PER_SIGNATURE = 5000
MULTISIG_SIZE = 355
IS_INITIALIZED_OFFSET = 45


@dataclass(frozen=True)
class LedgerAccount:
    lamports: int
    data: bytes = b""
    owner: Address = SYSTEM_PROGRAM_ID


@dataclass(frozen=True)
class SubmittedBundle:
    signature: str
    slot: int
    instructions: Tuple[Instruction, ...]
    signers: Tuple[Address, ...]


class InstructionError(Exception):
    """Raised by the emulator when one instruction fails."""
    pass


class InMemoryLedger(LedgerClient):
    """
    Ledger client backed by in-process state.
    """

    def __init__(self, rent: Optional[RentSchedule] = None, clock: int = 1_700_000_000):
        self.rent = rent or RentSchedule()
        self.clock = clock
        self._accounts: Dict[Address, LedgerAccount] = {}
        self._rejections: List[str] = []
        self._slots = itertools.count(1)
        self.submitted: List[SubmittedBundle] = []
        self.funding_queries: List[int] = []
        self._codec = MetadataCodec()

    # =========================================================================
    # State helpers
    # =========================================================================

    def airdrop(self, address: Address, lamports: int) -> None:
        current = self._accounts.get(address)
        if current is None:
            self._accounts[address] = LedgerAccount(lamports)
        else:
            self._accounts[address] = replace(current, lamports=current.lamports + lamports)

    def put_account(self, address: Address, data: bytes, owner: Address = TOKEN_2022_PROGRAM_ID,
                    lamports: Optional[int] = None) -> None:
        if lamports is None:
            lamports = self.rent.minimum_funding(len(data))
        self._accounts[address] = LedgerAccount(lamports, bytes(data), owner)

    def get_account(self, address: Address) -> Optional[LedgerAccount]:
        return self._accounts.get(address)

    def balance(self, address: Address) -> int:
        account = self._accounts.get(address)
        return account.lamports if account else 0

    def reject_next(self, reason: str) -> None:
        """Make the next submission fail with ``reason``."""
        self._rejections.append(reason)

    # =========================================================================
    # LedgerClient
    # =========================================================================

    def minimum_funding(self, byte_size: int) -> int:
        self.funding_queries.append(byte_size)
        return self.rent.minimum_funding(byte_size)

    def read_account(self, address: Address) -> bytes:
        account = self._accounts.get(address)
        if account is None:
            raise AccountNotFoundError(f"Account {address} not found", {"address": str(address)})
        return account.data

    def submit_atomic(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence,
        fee_payer: Optional[Address] = None,
    ) -> Confirmation:
        if self._rejections:
            reason = self._rejections.pop(0)
            logger.warning(f"Bundle rejected: {reason}")
            raise SubmissionError(reason)

        payer = resolve_fee_payer(signers, fee_payer)
        blockhash = bytes(32)
        try:
            message = compile_message(instructions, payer, blockhash)
            transaction = sign_message(message, signers)
        except ValueError as e:
            raise SubmissionError(str(e), cause=e)

        wire = transaction.serialize()
        if len(wire) > PACKET_DATA_SIZE:
            raise SubmissionError(
                f"transaction is {len(wire)} bytes, limit is {PACKET_DATA_SIZE}",
                {"size": len(wire), "limit": PACKET_DATA_SIZE},
            )

        payload = message.serialize()
        for key, signature in zip(message.signer_keys, transaction.signatures):
            if not verify_signature(key, signature, payload):
                raise SubmissionError(f"invalid signature for {key}")

        signed: Set[Address] = set(message.signer_keys)
        staged = dict(self._accounts)
        fee = LAMPORTS_PER_SIGNATURE * len(transaction.signatures)
        payer_account = staged.get(payer)
        if payer_account is None or payer_account.lamports < fee:
            raise SubmissionError(f"insufficient funds for fee: {payer} needs {fee} lamports")
        staged[payer] = replace(payer_account, lamports=payer_account.lamports - fee)

        for index, ix in enumerate(instructions):
            try:
                self._execute(staged, ix, signed)
            except InstructionError as e:
                logger.warning(f"Bundle rejected at instruction {index}: {e}")
                raise SubmissionError(f"instruction {index}: {e}", {"instruction": index})

        self._accounts = staged
        signature = b58encode(transaction.signature)
        slot = next(self._slots)
        self.submitted.append(
            SubmittedBundle(signature, slot, tuple(instructions), tuple(message.signer_keys))
        )
        logger.info(f"Applied bundle {signature} at slot {slot}")
        return Confirmation(signature, slot, Commitment.CONFIRMED)

    # =========================================================================
    # Emulation
    # =========================================================================

    def _execute(self, staged: Dict[Address, LedgerAccount], ix: Instruction, signed: Set[Address]) -> None:
        if ix.program_id == SYSTEM_PROGRAM_ID:
            self._system(staged, ix, signed)
        elif ix.program_id == TOKEN_2022_PROGRAM_ID:
            data = bytes(ix.data)
            if data[:8] in (INITIALIZE_DISCRIMINATOR, UPDATE_FIELD_DISCRIMINATOR, REMOVE_KEY_DISCRIMINATOR):
                self._metadata(staged, ix, signed, data)
            else:
                self._token(staged, ix, signed, data)
        else:
            raise InstructionError(f"unknown program {ix.program_id}")

    def _system(self, staged, ix: Instruction, signed: Set[Address]) -> None:
        reader = BinaryReader(bytes(ix.data))
        op = reader.u32le()
        source = ix.accounts[0].address
        if source not in signed:
            raise InstructionError(f"missing signature for {source}")
        source_account = staged.get(source)

        if op == CREATE_ACCOUNT:
            lamports, space, owner = reader.u64le(), reader.u64le(), reader.address()
            target = ix.accounts[1].address
            if target not in signed:
                raise InstructionError(f"missing signature for new account {target}")
            existing = staged.get(target)
            if existing is not None and (existing.lamports or existing.data):
                raise InstructionError(f"account {target} already in use")
            if source_account is None or source_account.lamports < lamports:
                raise InstructionError("insufficient lamports for account creation")
            staged[source] = replace(source_account, lamports=source_account.lamports - lamports)
            staged[target] = LedgerAccount(lamports, bytes(space), owner)
        elif op == TRANSFER:
            lamports = reader.u64le()
            target = ix.accounts[1].address
            if source_account is None or source_account.lamports < lamports:
                raise InstructionError("insufficient lamports for transfer")
            staged[source] = replace(source_account, lamports=source_account.lamports - lamports)
            target_account = staged.get(target) or LedgerAccount(0)
            staged[target] = replace(target_account, lamports=target_account.lamports + lamports)
        else:
            raise InstructionError(f"unsupported system instruction {op}")

    # Token program ------------------------------------------------------------

    def _mint(self, staged, address: Address) -> LedgerAccount:
        account = staged.get(address)
        if account is None:
            raise InstructionError(f"account {address} does not exist")
        if account.owner != TOKEN_2022_PROGRAM_ID:
            raise InstructionError(f"account {address} is not owned by the token program")
        return account

    @staticmethod
    def _entries(data: bytes) -> Tuple[List[Tuple[int, bytes]], int]:
        """TLV entries of an extended account and the offset after the last one."""
        entries: List[Tuple[int, bytes]] = []
        offset = TLV_START
        while offset + 4 <= len(data):
            reader = BinaryReader(data[offset:offset + 4])
            type_code, length = reader.u16le(), reader.u16le()
            if type_code == ExtensionType.UNINITIALIZED:
                break
            entries.append((type_code, data[offset + 4:offset + 4 + length]))
            offset += 4 + length
        return entries, offset

    def _declare(self, staged, ix: Instruction, extension: ExtensionType, value: bytes) -> None:
        address = ix.accounts[0].address
        account = self._mint(staged, address)
        data = bytearray(account.data)
        if len(data) >= MINT_SIZE and data[IS_INITIALIZED_OFFSET] == 1:
            raise InstructionError(f"{extension.name} must be initialized before the base mint")
        if len(data) <= ACCOUNT_SIZE:
            raise InstructionError("account has no room for extensions")
        entries, offset = self._entries(bytes(data))
        if any(code == extension for code, _ in entries):
            raise InstructionError(f"{extension.name} already initialized")
        if offset + 4 + len(value) > len(data):
            raise InstructionError(f"account too small for {extension.name}")
        data[ACCOUNT_SIZE] = AccountType.MINT
        data[offset:offset + 4 + len(value)] = (
            BinaryWriter().u16le(extension).u16le(len(value)).bytes(value).to_bytes()
        )
        staged[address] = replace(account, data=bytes(data))

    def _token(self, staged, ix: Instruction, signed: Set[Address], data: bytes) -> None:
        reader = BinaryReader(data)
        code = reader.u8()

        if code == TokenInstruction.INITIALIZE_MINT:
            self._initialize_mint(staged, ix, reader)
        elif code == TokenInstruction.TRANSFER_FEE_EXTENSION:
            if reader.u8() != TransferFeeInstruction.INITIALIZE_TRANSFER_FEE_CONFIG:
                raise InstructionError("only transfer fee initialization is supported")
            config_authority, withdraw_authority = reader.coption_address(), reader.coption_address()
            bps, max_fee = reader.u16le(), reader.u64le()
            fee = TransferFee(epoch=0, maximum_fee=max_fee, transfer_fee_basis_points=bps)
            state = TransferFeeConfigState(config_authority, withdraw_authority, 0, fee, fee)
            self._declare(staged, ix, ExtensionType.TRANSFER_FEE_CONFIG, encode_transfer_fee_config(state))
        elif code == TokenInstruction.INITIALIZE_PERMANENT_DELEGATE:
            self._declare(staged, ix, ExtensionType.PERMANENT_DELEGATE, reader.bytes(32))
        elif code == TokenInstruction.INTEREST_BEARING_MINT_EXTENSION:
            self._require_initialize(reader)
            authority, rate = reader.bytes(32), reader.i16le()
            value = (
                BinaryWriter().bytes(authority).i64le(self.clock).i16le(rate).i64le(self.clock).i16le(rate).to_bytes()
            )
            self._declare(staged, ix, ExtensionType.INTEREST_BEARING_CONFIG, value)
        elif code == TokenInstruction.TRANSFER_HOOK_EXTENSION:
            self._require_initialize(reader)
            self._declare(staged, ix, ExtensionType.TRANSFER_HOOK, reader.bytes(64))
        elif code == TokenInstruction.INITIALIZE_NON_TRANSFERABLE_MINT:
            self._declare(staged, ix, ExtensionType.NON_TRANSFERABLE, b"")
        elif code == TokenInstruction.DEFAULT_ACCOUNT_STATE_EXTENSION:
            self._require_initialize(reader)
            self._declare(staged, ix, ExtensionType.DEFAULT_ACCOUNT_STATE, reader.bytes(1))
        elif code == TokenInstruction.INITIALIZE_MINT_CLOSE_AUTHORITY:
            authority = reader.coption_address()
            value = BinaryWriter().optional_nonzero_address(authority).to_bytes()
            self._declare(staged, ix, ExtensionType.MINT_CLOSE_AUTHORITY, value)
        elif code == TokenInstruction.METADATA_POINTER_EXTENSION:
            self._require_initialize(reader)
            self._declare(staged, ix, ExtensionType.METADATA_POINTER, reader.bytes(64))
        else:
            raise InstructionError(f"token instruction {code} not supported by the in-memory ledger")

    @staticmethod
    def _require_initialize(reader: BinaryReader) -> None:
        if reader.u8() != INITIALIZE:
            raise InstructionError("only extension initialization is supported")

    def _initialize_mint(self, staged, ix: Instruction, reader: BinaryReader) -> None:
        address = ix.accounts[0].address
        account = self._mint(staged, address)
        data = bytearray(account.data)
        if len(data) < MINT_SIZE:
            raise InstructionError("account too small for a mint")
        if data[IS_INITIALIZED_OFFSET] == 1:
            raise InstructionError("mint already initialized")
        if len(data) > MINT_SIZE:
            _, used = self._entries(bytes(data))
            expected = used + 2 if used == MULTISIG_SIZE else used
            if len(data) != expected:
                raise InstructionError(
                    f"account length {len(data)} does not match declared extensions ({expected})"
                )
        if account.lamports < self.rent.minimum_funding(len(data)):
            raise InstructionError("mint is not funded for its size")

        decimals = reader.u8()
        mint_authority = reader.address()
        freeze_authority = reader.coption_address()
        default_state = dict(self._entries(bytes(data))[0]).get(ExtensionType.DEFAULT_ACCOUNT_STATE)
        if default_state == bytes([AccountState.FROZEN]) and freeze_authority is None:
            raise InstructionError("mint cannot freeze: frozen default account state without a freeze authority")
        data[:MINT_SIZE] = encode_mint(mint_authority, decimals, freeze_authority=freeze_authority)
        staged[address] = replace(account, data=bytes(data))

    # Metadata interface -------------------------------------------------------

    def _write_entries(self, account: LedgerAccount, entries: List[Tuple[int, bytes]]) -> LedgerAccount:
        writer = BinaryWriter().bytes(account.data[:TLV_START])
        for code, value in entries:
            writer.u16le(code).u16le(len(value)).bytes(value)
        data = writer.to_bytes()
        if account.lamports < self.rent.minimum_funding(len(data)):
            raise InstructionError("insufficient funds for rent after metadata growth")
        return replace(account, data=data)

    def _metadata(self, staged, ix: Instruction, signed: Set[Address], data: bytes) -> None:
        metadata_address = ix.accounts[0].address
        account = self._mint(staged, metadata_address)
        if len(account.data) < MINT_SIZE or account.data[IS_INITIALIZED_OFFSET] != 1:
            raise InstructionError("metadata requires an initialized mint")
        entries, _ = self._entries(account.data)
        reader = BinaryReader(data[8:])

        if data[:8] == INITIALIZE_DISCRIMINATOR:
            update_authority, mint, mint_authority = (meta.address for meta in ix.accounts[1:4])
            if mint != metadata_address:
                raise InstructionError("only metadata stored on the mint itself is supported")
            pointer = dict(entries).get(ExtensionType.METADATA_POINTER)
            if pointer is None or decode_pointer(pointer).target != mint:
                raise InstructionError("mint has no metadata pointer to itself")
            if mint_authority not in signed or account.data[4:36] != mint_authority.to_bytes():
                raise InstructionError("mint authority must sign metadata initialization")
            if any(code == ExtensionType.TOKEN_METADATA for code, _ in entries):
                raise InstructionError("metadata already initialized")
            name, symbol, uri = reader.string(), reader.string(), reader.string()
            metadata = DescriptiveMetadata.model_construct(
                name=name, symbol=symbol, uri=uri, additional=[], update_authority=update_authority
            )
            entries.append((ExtensionType.TOKEN_METADATA, self._codec.encode(metadata, mint)))
            staged[metadata_address] = self._write_entries(account, entries)
            return

        position = next((i for i, (code, _) in enumerate(entries) if code == ExtensionType.TOKEN_METADATA), None)
        if position is None:
            raise InstructionError("metadata not initialized")
        state = self._codec.decode(entries[position][1])
        authority = ix.accounts[1].address
        if authority not in signed or state.update_authority != authority:
            raise InstructionError("update authority must sign")

        current = state.metadata
        fields = {"name": current.name, "symbol": current.symbol, "uri": current.uri}
        additional = list(current.additional)
        if data[:8] == UPDATE_FIELD_DISCRIMINATOR:
            selector = reader.u8()
            key = reader.string() if selector == MetadataField.KEY else None
            value = reader.string()
            if key is None:
                fields[MetadataField(selector).name.lower()] = value
            else:
                keys = [k for k, _ in additional]
                if key in keys:
                    additional[keys.index(key)] = (key, value)
                else:
                    additional.append((key, value))
        else:
            idempotent = reader.u8() == 1
            key = reader.string()
            remaining = [(k, v) for k, v in additional if k != key]
            if len(remaining) == len(additional) and not idempotent:
                raise InstructionError(f"key '{key}' not found")
            additional = remaining

        updated = DescriptiveMetadata.model_construct(
            additional=additional, update_authority=state.update_authority, **fields
        )
        entries[position] = (ExtensionType.TOKEN_METADATA, self._codec.encode(updated, state.mint))
        staged[metadata_address] = self._write_entries(account, entries)


__all__ = ["InMemoryLedger", "LedgerAccount", "SubmittedBundle", "LAMPORTS_PER_SIGNATURE"]
