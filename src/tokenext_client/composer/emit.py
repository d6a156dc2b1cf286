"""
Instruction emission.

Turns an initialization plan into the concrete token program instructions
of the creation bundle. Authorities left unset by the caller default to the
mint authority.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..codec.transaction import Instruction
from ..enums import ExtensionKind, StepTag
from ..instructions import metadata as metadata_ix
from ..instructions import system as system_ix
from ..instructions import token as token_ix
from ..models import BaseMintParams, DescriptiveMetadata, ExtensionParams
from ..runtime.address import Address
from .layout import AccountLayout
from .ordering import InitializationPlan, InitStep


@dataclass(frozen=True)
class EmitContext:
    """Everything a step needs to become an instruction."""
    mint: Address
    payer: Address
    base: BaseMintParams
    extensions: Dict[ExtensionKind, ExtensionParams]
    layout: AccountLayout
    metadata: Optional[DescriptiveMetadata] = None

    @property
    def metadata_authority(self) -> Address:
        if self.metadata is not None and self.metadata.update_authority is not None:
            return self.metadata.update_authority
        return self.base.mint_authority

    def field_value(self, key: str) -> str:
        for k, v in self.metadata.additional:
            if k == key:
                return v
        raise KeyError(key)


def _declare(kind: ExtensionKind, ctx: EmitContext) -> Instruction:
    params = ctx.extensions[kind]
    mint = ctx.mint
    if kind == ExtensionKind.TRANSFER_FEE:
        return token_ix.initialize_transfer_fee_config(
            mint,
            params.fee_authority or ctx.base.mint_authority,
            params.withdraw_authority or ctx.base.mint_authority,
            params.fee_basis_points,
            params.max_fee,
        )
    if kind == ExtensionKind.PERMANENT_DELEGATE:
        return token_ix.initialize_permanent_delegate(mint, params.delegate)
    if kind == ExtensionKind.INTEREST_BEARING:
        return token_ix.initialize_interest_bearing_mint(
            mint, params.rate_authority or ctx.base.mint_authority, params.rate_basis_points
        )
    if kind == ExtensionKind.TRANSFER_HOOK:
        authority = params.authority or ctx.base.mint_authority
        return token_ix.initialize_transfer_hook(mint, authority, params.program_id)
    if kind == ExtensionKind.NON_TRANSFERABLE:
        return token_ix.initialize_non_transferable_mint(mint)
    if kind == ExtensionKind.DEFAULT_ACCOUNT_STATE:
        return token_ix.initialize_default_account_state(mint, params.state)
    if kind == ExtensionKind.MINT_CLOSE_AUTHORITY:
        return token_ix.initialize_mint_close_authority(mint, params.close_authority)
    if kind == ExtensionKind.METADATA_POINTER:
        authority = params.authority or ctx.base.mint_authority
        return token_ix.initialize_metadata_pointer(mint, authority, params.metadata_address or mint)
    raise ValueError(f"No declaration instruction for {kind.label}")


def emit_step(step: InitStep, ctx: EmitContext) -> Instruction:
    """Instruction for one plan step."""
    if step.tag == StepTag.ALLOCATE:
        return system_ix.create_account(
            ctx.payer,
            ctx.mint,
            lamports=ctx.layout.required_funding,
            space=ctx.layout.allocation_size,
        )
    if step.tag == StepTag.EXTENSION_INIT:
        return _declare(step.kind, ctx)
    if step.tag == StepTag.BASE_INIT:
        return token_ix.initialize_mint(
            ctx.mint,
            ctx.base.decimals,
            ctx.base.mint_authority,
            ctx.base.freeze_authority,
        )
    if step.tag == StepTag.METADATA_INIT:
        return metadata_ix.initialize_metadata(
            metadata=ctx.mint,
            update_authority=ctx.metadata_authority,
            mint=ctx.mint,
            mint_authority=ctx.base.mint_authority,
            name=ctx.metadata.name,
            symbol=ctx.metadata.symbol,
            uri=ctx.metadata.uri,
        )
    if step.tag == StepTag.METADATA_FIELD_UPDATE:
        return metadata_ix.update_field(
            ctx.mint,
            ctx.metadata_authority,
            step.field_key,
            ctx.field_value(step.field_key),
        )
    raise ValueError(f"Unknown step {step}")


def emit(plan: InitializationPlan, ctx: EmitContext) -> List[Instruction]:
    return [emit_step(step, ctx) for step in plan]


__all__ = ["EmitContext", "emit", "emit_step"]
