"""
Mint composition builder.

Accumulates base mint parameters, extension parameters and descriptive
metadata, then runs one pipeline for every combination:

    compatibility check -> layout -> initialization order -> emit

``plan()`` stops after emission and returns a :class:`CompositionPlan`;
``execute()`` also submits the bundle atomically. A builder serves exactly
one terminal call.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import ValidationError

from ..codec.metadata import MetadataCodec, default_codec
from ..codec.transaction import Instruction, estimate_transaction_size
from ..crypto.ed25519 import Keypair
from ..enums import AccountState, ExtensionKind
from ..ledger.base import Confirmation, LedgerClient
from ..models import (
    BaseMintParams,
    DefaultAccountStateParams,
    DescriptiveMetadata,
    ExtensionParams,
    InterestBearingParams,
    MetadataPointerParams,
    MintCloseAuthorityParams,
    NonTransferableParams,
    PermanentDelegateParams,
    TransferFeeParams,
    TransferHookParams,
)
from ..runtime.address import Address
from ..runtime.errors import BuilderConsumedError, ConfigurationError, UnsupportedExtensionError
from .emit import EmitContext, emit
from .layout import AccountLayout, compute_layout
from .ordering import InitializationPlan, resolve
from .rules import check

logger = logging.getLogger(__name__)


def _validate(model: Type, params: Any, kwargs: Dict[str, Any]):
    """Build a parameter model, turning validation failures into ConfigurationError."""
    if params is not None and kwargs:
        raise ConfigurationError(f"Pass either a {model.__name__} or keyword arguments, not both")
    if isinstance(params, model):
        return params
    try:
        if params is None:
            return model(**kwargs)
        if isinstance(params, dict):
            return model.model_validate(params)
        raise ConfigurationError(f"Expected {model.__name__}, got {type(params).__name__}")
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(part) for part in error['loc']) or model.__name__}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError(f"Invalid {model.__name__}: {'; '.join(issues)}", issues=issues, cause=e)


@dataclass
class CompositionState:
    """Requested configuration of one mint."""
    base: Optional[BaseMintParams] = None
    extensions: Dict[ExtensionKind, ExtensionParams] = field(default_factory=dict)
    metadata: Optional[DescriptiveMetadata] = None

    @property
    def kinds(self) -> List[ExtensionKind]:
        return sorted(self.extensions)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a confirmed creation bundle."""
    mint: Keypair
    confirmation: Confirmation
    plan: "CompositionPlan"

    @property
    def address(self) -> Address:
        return self.mint.address

    @property
    def signature(self) -> str:
        return self.confirmation.signature


class CompositionPlan:
    """
    A fully resolved creation bundle.

    Holds the layout, the abstract initialization plan, the generated mint
    identity and the concrete instructions. A plan may be submitted once.
    """

    def __init__(
        self,
        layout: AccountLayout,
        initialization_plan: InitializationPlan,
        mint: Keypair,
        payer: Address,
        instructions: Sequence[Instruction],
    ):
        self.layout = layout
        self.initialization_plan = initialization_plan
        self.mint = mint
        self.payer = payer
        self.instructions: List[Instruction] = list(instructions)
        self._submitted = False

    @property
    def mint_address(self) -> Address:
        return self.mint.address

    @property
    def steps(self) -> List[str]:
        return self.initialization_plan.describe()

    @property
    def required_signers(self) -> List[Address]:
        """Every address that must sign, fee payer first."""
        signers = [self.payer]
        for ix in self.instructions:
            for address in ix.signer_addresses():
                if address not in signers:
                    signers.append(address)
        return signers

    @property
    def estimated_size(self) -> int:
        """Serialized size of the signed bundle in bytes."""
        return estimate_transaction_size(self.instructions, self.payer)

    def missing_signers(self, signers: Sequence[Keypair]) -> List[Address]:
        available = {signer.address for signer in signers} | {self.mint.address}
        return [address for address in self.required_signers if address not in available]

    def submit(self, ledger: LedgerClient, fee_payer: Keypair, *signers: Keypair) -> ExecutionResult:
        """
        Submit the bundle as one atomic transaction.

        Args:
            ledger: Ledger client to submit through
            fee_payer: Keypair of the funding account named at plan time
            *signers: Authority keypairs the bundle requires

        Raises:
            BuilderConsumedError: If the plan was already submitted
            ConfigurationError: If the fee payer or a required signer is missing
            SubmissionError: If the ledger rejects the bundle
        """
        if self._submitted:
            raise BuilderConsumedError("Plan has already been submitted")
        if fee_payer.address != self.payer:
            raise ConfigurationError(f"Plan was built for fee payer {self.payer}, got {fee_payer.address}")
        all_signers = [fee_payer, self.mint, *signers]
        missing = self.missing_signers(all_signers)
        if missing:
            raise ConfigurationError(
                f"Missing signers: {', '.join(str(a) for a in missing)}",
                issues=[str(a) for a in missing],
            )

        self._submitted = True
        logger.info(f"Submitting creation of mint {self.mint.address} ({len(self.instructions)} instructions)")
        try:
            confirmation = ledger.submit_atomic(self.instructions, all_signers, fee_payer.address)
        except Exception:
            logger.warning(f"Creation of mint {self.mint.address} failed; identity abandoned")
            raise
        logger.info(f"Mint {self.mint.address} created in {confirmation.signature}")
        return ExecutionResult(mint=self.mint, confirmation=confirmation, plan=self)

    def to_dict(self) -> dict:
        return {
            "mint": str(self.mint.address),
            "payer": str(self.payer),
            "steps": self.steps,
            "layout": self.layout.to_dict(),
            "requiredSigners": [str(a) for a in self.required_signers],
        }


class CompositionBuilder:
    """
    Fluent builder for a mint carrying any legal combination of extensions.

    Example:
        ```python
        plan = (
            CompositionBuilder()
            .with_base(decimals=6, mint_authority=authority.address)
            .with_transfer_fee(fee_basis_points=100, max_fee=1_000_000_000)
            .with_metadata(name="Gold", symbol="GLD", uri="https://example.com/gld.json")
            .plan(payer=payer.address)
        )
        ```
    """

    def __init__(self, ledger: Optional[LedgerClient] = None, codec: MetadataCodec = default_codec):
        self.ledger = ledger
        self.codec = codec
        self._state = CompositionState()
        self._consumed = False

    def _ensure_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError()

    def _attach(self, params: ExtensionParams) -> CompositionBuilder:
        self._ensure_open()
        kind = params.kind()
        if kind in self._state.extensions:
            logger.debug(f"Replacing {kind.label} parameters")
        self._state.extensions[kind] = params
        return self

    @property
    def state(self) -> CompositionState:
        return self._state

    # =========================================================================
    # Attachment
    # =========================================================================

    def with_base(self, params: Optional[BaseMintParams] = None, **kwargs) -> CompositionBuilder:
        """Set decimals, mint authority and freeze authority."""
        self._ensure_open()
        self._state.base = _validate(BaseMintParams, params, kwargs)
        return self

    def with_extension(self, params: ExtensionParams) -> CompositionBuilder:
        """Attach any extension given its parameter model."""
        if not isinstance(params, ExtensionParams):
            raise ConfigurationError(f"Expected extension parameters, got {type(params).__name__}")
        if params.kind() == ExtensionKind.CONFIDENTIAL_BALANCES:
            return self.with_confidential_balances()
        if params.kind() == ExtensionKind.METADATA_POINTER:
            self._check_pointer_target(params, self._state.metadata)
        return self._attach(params)

    def with_transfer_fee(self, params: Optional[TransferFeeParams] = None, **kwargs) -> CompositionBuilder:
        return self._attach(_validate(TransferFeeParams, params, kwargs))

    def with_permanent_delegate(self, params: Optional[PermanentDelegateParams] = None, **kwargs) -> CompositionBuilder:
        return self._attach(_validate(PermanentDelegateParams, params, kwargs))

    def with_transfer_hook(self, params: Optional[TransferHookParams] = None, **kwargs) -> CompositionBuilder:
        return self._attach(_validate(TransferHookParams, params, kwargs))

    def with_non_transferable(self, params: Optional[NonTransferableParams] = None) -> CompositionBuilder:
        return self._attach(params or NonTransferableParams())

    def with_interest_bearing(self, params: Optional[InterestBearingParams] = None, **kwargs) -> CompositionBuilder:
        return self._attach(_validate(InterestBearingParams, params, kwargs))

    def with_default_account_state(
        self, params: Optional[DefaultAccountStateParams] = None, **kwargs
    ) -> CompositionBuilder:
        return self._attach(_validate(DefaultAccountStateParams, params, kwargs))

    def with_mint_close_authority(
        self, params: Optional[MintCloseAuthorityParams] = None, **kwargs
    ) -> CompositionBuilder:
        return self._attach(_validate(MintCloseAuthorityParams, params, kwargs))

    def with_metadata_pointer(self, params: Optional[MetadataPointerParams] = None, **kwargs) -> CompositionBuilder:
        self._ensure_open()
        params = _validate(MetadataPointerParams, params, kwargs)
        self._check_pointer_target(params, self._state.metadata)
        return self._attach(params)

    def with_confidential_balances(self, *args, **kwargs) -> CompositionBuilder:
        """Confidential balances need zero-knowledge proofs, which are not built here."""
        self._ensure_open()
        raise UnsupportedExtensionError(
            "Confidential balances are not supported: proof generation is not implemented",
            extension=ExtensionKind.CONFIDENTIAL_BALANCES.label,
        )

    def with_metadata(self, metadata: Optional[DescriptiveMetadata] = None, **kwargs) -> CompositionBuilder:
        """
        Embed descriptive metadata in the mint.

        A metadata pointer to the mint itself is requested as well unless one
        was already attached.
        """
        self._ensure_open()
        metadata = _validate(DescriptiveMetadata, metadata, kwargs)
        pointer = self._state.extensions.get(ExtensionKind.METADATA_POINTER)
        if pointer is None:
            self._attach(MetadataPointerParams())
        else:
            self._check_pointer_target(pointer, metadata)
        self._state.metadata = metadata
        return self

    def with_additional_field(self, key: str, value: str) -> CompositionBuilder:
        """Append one additional metadata field."""
        self._ensure_open()
        if self._state.metadata is None:
            raise ConfigurationError("Additional metadata fields require descriptive metadata")
        try:
            self._state.metadata = self._state.metadata.with_field(key, value)
        except ValidationError as e:
            issues = [error["msg"] for error in e.errors()]
            raise ConfigurationError(f"Invalid metadata field '{key}'", issues=issues, cause=e)
        return self

    @staticmethod
    def _check_pointer_target(pointer: MetadataPointerParams, metadata: Optional[DescriptiveMetadata]) -> None:
        if metadata is not None and pointer.metadata_address is not None:
            raise ConfigurationError(
                "Embedded metadata is stored on the mint itself; the metadata pointer cannot target "
                f"{pointer.metadata_address}"
            )

    # =========================================================================
    # Terminal operations
    # =========================================================================

    def _base_params(self, payer: Optional[Address]) -> BaseMintParams:
        if self._state.base is not None:
            return self._state.base
        if payer is None:
            raise ConfigurationError("Base mint parameters are required when no fee payer is given")
        return BaseMintParams(mint_authority=payer)

    def _check_freeze_authority(self, base: BaseMintParams) -> None:
        default_state = self._state.extensions.get(ExtensionKind.DEFAULT_ACCOUNT_STATE)
        frozen = default_state is not None and default_state.state == AccountState.FROZEN
        if frozen and base.freeze_authority is None:
            raise ConfigurationError(
                "A frozen default account state requires a freeze authority on the base mint",
                issues=["freeze_authority: required when the default account state is frozen"],
            )

    def plan(self, payer: Optional[Address] = None) -> CompositionPlan:
        """
        Resolve the full creation bundle without submitting it.

        Args:
            payer: Account funding the mint; the mint authority when omitted

        Raises:
            BuilderConsumedError: If the builder already served a terminal call
            CompatibilityError: If any forbidden pair is requested
            LayoutError: If the account or metadata block is too large
            ConfigurationError: If base parameters are missing, or a frozen default
                account state has no freeze authority
        """
        self._ensure_open()
        self._consumed = True
        state = self._state

        check(state.kinds).raise_for_violations()
        base = self._base_params(payer)
        self._check_freeze_authority(base)
        payer = payer or base.mint_authority

        layout = compute_layout(state.kinds, state.metadata, self.ledger, self.codec)
        additional = [key for key, _ in state.metadata.additional] if state.metadata else []
        order = resolve(state.kinds, state.metadata is not None, additional)
        logger.debug(f"Initialization order: {' -> '.join(order.describe())}")

        mint = Keypair.generate()
        ctx = EmitContext(
            mint=mint.address,
            payer=payer,
            base=base,
            extensions=dict(state.extensions),
            layout=layout,
            metadata=state.metadata,
        )
        plan = CompositionPlan(layout, order, mint, payer, emit(order, ctx))
        logger.debug(f"Planned mint {mint.address}: {layout.total_size} bytes, {layout.required_funding} lamports")
        return plan

    def execute(self, fee_payer: Keypair, *signers: Keypair) -> ExecutionResult:
        """
        Plan and submit the creation bundle atomically.

        Args:
            fee_payer: Keypair paying fees and funding the mint
            *signers: Authority keypairs the bundle requires besides the fee
                payer and the generated mint identity

        Raises:
            ConfigurationError: If no ledger is bound or a signer is missing;
                raised before any submission
            SubmissionError: If the ledger rejects the bundle
        """
        self._ensure_open()
        if self.ledger is None:
            self._consumed = True
            raise ConfigurationError("execute() requires a ledger client")
        plan = self.plan(payer=fee_payer.address)
        return plan.submit(self.ledger, fee_payer, *signers)


__all__ = ["CompositionBuilder", "CompositionPlan", "CompositionState", "ExecutionResult"]
