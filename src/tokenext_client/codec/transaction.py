"""
Legacy transaction wire codec.

Compiles instructions into a message (header, account keys, recent
blockhash, compiled instructions), signs it, and serializes the transaction
as compact-u16 prefixed signatures followed by the message.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..runtime.address import Address, b58decode
from .writer import BinaryWriter

PACKET_DATA_SIZE = 1232
SIGNATURE_LENGTH = 64


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction."""
    address: Address
    is_signer: bool = False
    is_writable: bool = False


@dataclass(frozen=True)
class Instruction:
    """A program invocation: program, referenced accounts and opaque data."""
    program_id: Address
    accounts: Sequence[AccountMeta]
    data: bytes

    def signer_addresses(self) -> List[Address]:
        return [meta.address for meta in self.accounts if meta.is_signer]


@dataclass
class MessageHeader:
    num_required_signatures: int
    num_readonly_signed: int
    num_readonly_unsigned: int


@dataclass
class CompiledInstruction:
    program_id_index: int
    account_indices: List[int]
    data: bytes


@dataclass
class Message:
    """A compiled legacy message."""
    header: MessageHeader
    account_keys: List[Address]
    recent_blockhash: bytes
    instructions: List[CompiledInstruction] = field(default_factory=list)

    @property
    def signer_keys(self) -> List[Address]:
        return self.account_keys[: self.header.num_required_signatures]

    def serialize(self) -> bytes:
        writer = BinaryWriter()
        writer.u8(self.header.num_required_signatures)
        writer.u8(self.header.num_readonly_signed)
        writer.u8(self.header.num_readonly_unsigned)
        writer.compact_u16(len(self.account_keys))
        for key in self.account_keys:
            writer.address(key)
        writer.bytes(self.recent_blockhash)
        writer.compact_u16(len(self.instructions))
        for ix in self.instructions:
            writer.u8(ix.program_id_index)
            writer.compact_u16(len(ix.account_indices))
            for index in ix.account_indices:
                writer.u8(index)
            writer.compact_u16(len(ix.data))
            writer.bytes(ix.data)
        return writer.to_bytes()


def _blockhash_bytes(blockhash: Union[str, bytes]) -> bytes:
    raw = b58decode(blockhash) if isinstance(blockhash, str) else bytes(blockhash)
    if len(raw) != 32:
        raise ValueError(f"Recent blockhash must be 32 bytes, got {len(raw)}")
    return raw


def compile_message(
    instructions: Sequence[Instruction],
    fee_payer: Address,
    recent_blockhash: Union[str, bytes],
) -> Message:
    """
    Compile instructions into a legacy message.

    Accounts are ordered fee payer first, then writable signers, readonly
    signers, writable non-signers and readonly non-signers. An account's
    signer and writable flags are the union over every reference to it.
    """
    if not instructions:
        raise ValueError("A transaction needs at least one instruction")

    flags: Dict[Address, List[bool]] = {fee_payer: [True, True]}
    for ix in instructions:
        for meta in ix.accounts:
            entry = flags.setdefault(meta.address, [False, False])
            entry[0] = entry[0] or meta.is_signer
            entry[1] = entry[1] or meta.is_writable
        flags.setdefault(ix.program_id, [False, False])

    others = [key for key in flags if key != fee_payer]
    writable_signers = [k for k in others if flags[k][0] and flags[k][1]]
    readonly_signers = [k for k in others if flags[k][0] and not flags[k][1]]
    writable = [k for k in others if not flags[k][0] and flags[k][1]]
    readonly = [k for k in others if not flags[k][0] and not flags[k][1]]

    keys = [fee_payer] + writable_signers + readonly_signers + writable + readonly
    if len(keys) > 256:
        raise ValueError(f"Too many accounts in one transaction: {len(keys)}")
    index = {key: i for i, key in enumerate(keys)}

    header = MessageHeader(
        num_required_signatures=1 + len(writable_signers) + len(readonly_signers),
        num_readonly_signed=len(readonly_signers),
        num_readonly_unsigned=len(readonly),
    )
    compiled = [
        CompiledInstruction(
            program_id_index=index[ix.program_id],
            account_indices=[index[meta.address] for meta in ix.accounts],
            data=bytes(ix.data),
        )
        for ix in instructions
    ]
    return Message(header, keys, _blockhash_bytes(recent_blockhash), compiled)


@dataclass
class SignedTransaction:
    message: Message
    signatures: List[bytes]

    def serialize(self) -> bytes:
        writer = BinaryWriter()
        writer.compact_u16(len(self.signatures))
        for signature in self.signatures:
            writer.bytes(signature)
        writer.bytes(self.message.serialize())
        return writer.to_bytes()

    def to_base64(self) -> str:
        return base64.b64encode(self.serialize()).decode("ascii")

    @property
    def signature(self) -> bytes:
        """The fee payer's signature, which identifies the transaction."""
        return self.signatures[0]


def sign_message(message: Message, signers: Iterable) -> SignedTransaction:
    """
    Sign a compiled message with every required signer.

    Args:
        message: Compiled message
        signers: Keypairs; extra keypairs are ignored

    Raises:
        ValueError: If a required signer has no keypair
    """
    by_address = {signer.address: signer for signer in signers}
    payload = message.serialize()
    signatures = []
    for key in message.signer_keys:
        signer = by_address.get(key)
        if signer is None:
            raise ValueError(f"Missing signature for {key}")
        signatures.append(signer.sign(payload))
    return SignedTransaction(message, signatures)


def estimate_transaction_size(instructions: Sequence[Instruction], fee_payer: Address) -> int:
    """Serialized size of the signed transaction; independent of the blockhash."""
    message = compile_message(instructions, fee_payer, bytes(32))
    writer = BinaryWriter()
    writer.compact_u16(message.header.num_required_signatures)
    return len(writer) + SIGNATURE_LENGTH * message.header.num_required_signatures + len(message.serialize())


__all__ = [
    "PACKET_DATA_SIZE",
    "AccountMeta",
    "Instruction",
    "Message",
    "MessageHeader",
    "CompiledInstruction",
    "SignedTransaction",
    "compile_message",
    "sign_message",
    "estimate_transaction_size",
]
