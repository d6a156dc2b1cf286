# Parameter models for mint composition
# One model per extension kind plus base mint parameters and descriptive metadata

from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Tuple, Any

from .enums import AccountState, ExtensionKind
from .runtime.address import Address


U64_MAX = 2 ** 64 - 1
MAX_FEE_BASIS_POINTS = 10_000

MAX_NAME_BYTES = 32
MAX_SYMBOL_BYTES = 10
MAX_URI_BYTES = 200


# =============================================================================
# Base mint parameters
# =============================================================================

class BaseMintParams(BaseModel):
    """Decimals and authorities written by the base-init step."""
    decimals: int = Field(9, ge=0, le=255)
    mint_authority: Address = Field(..., alias="mintAuthority")
    freeze_authority: Optional[Address] = Field(None, alias="freezeAuthority")

    model_config = {"populate_by_name": True, "frozen": True}


# =============================================================================
# Extension parameters
# =============================================================================

class ExtensionParams(BaseModel):
    """Common base of every per-extension parameter payload."""

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def kind(cls) -> ExtensionKind:
        raise NotImplementedError


class TransferFeeParams(ExtensionParams):
    """Fee-on-transfer configuration."""
    fee_basis_points: int = Field(..., alias="feeBasisPoints", ge=0, le=MAX_FEE_BASIS_POINTS)
    max_fee: int = Field(..., alias="maxFee", ge=0, le=U64_MAX)
    fee_authority: Optional[Address] = Field(None, alias="transferFeeConfigAuthority")
    withdraw_authority: Optional[Address] = Field(None, alias="withdrawWithheldAuthority")

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.TRANSFER_FEE


class PermanentDelegateParams(ExtensionParams):
    """Authority permanently allowed to move or burn any holder's tokens."""
    delegate: Address

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.PERMANENT_DELEGATE


class TransferHookParams(ExtensionParams):
    """External program invoked on every transfer."""
    program_id: Address = Field(..., alias="programId")
    authority: Optional[Address] = None

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.TRANSFER_HOOK


class NonTransferableParams(ExtensionParams):
    """Non-transferable mints carry no parameters."""

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.NON_TRANSFERABLE


class InterestBearingParams(ExtensionParams):
    """Continuously compounding interest, rate in basis points per year."""
    rate_basis_points: int = Field(..., alias="rate", ge=-(2 ** 15), le=2 ** 15 - 1)
    rate_authority: Optional[Address] = Field(None, alias="rateAuthority")

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.INTEREST_BEARING


class DefaultAccountStateParams(ExtensionParams):
    """State every new token account of the mint starts in."""
    state: AccountState = AccountState.INITIALIZED

    @field_validator("state")
    @classmethod
    def _initialized_or_frozen(cls, v: AccountState) -> AccountState:
        if v == AccountState.UNINITIALIZED:
            raise ValueError("default account state must be initialized or frozen")
        return v

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.DEFAULT_ACCOUNT_STATE


class MintCloseAuthorityParams(ExtensionParams):
    """Authority allowed to close the mint once supply is zero."""
    close_authority: Address = Field(..., alias="closeAuthority")

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.MINT_CLOSE_AUTHORITY


class MetadataPointerParams(ExtensionParams):
    """
    Pointer from the mint to the account holding its metadata.

    ``metadata_address`` left unset points the mint at itself.
    """
    authority: Optional[Address] = None
    metadata_address: Optional[Address] = Field(None, alias="metadataAddress")

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.METADATA_POINTER


class ConfidentialBalancesParams(ExtensionParams):
    """Confidential balance configuration (not supported for composition)."""
    authority: Optional[Address] = None
    auto_approve_new_accounts: bool = Field(False, alias="autoApproveNewAccounts")

    @classmethod
    def kind(cls) -> ExtensionKind:
        return ExtensionKind.CONFIDENTIAL_BALANCES


PARAMS_BY_KIND = {
    ExtensionKind.TRANSFER_FEE: TransferFeeParams,
    ExtensionKind.PERMANENT_DELEGATE: PermanentDelegateParams,
    ExtensionKind.TRANSFER_HOOK: TransferHookParams,
    ExtensionKind.NON_TRANSFERABLE: NonTransferableParams,
    ExtensionKind.INTEREST_BEARING: InterestBearingParams,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: DefaultAccountStateParams,
    ExtensionKind.MINT_CLOSE_AUTHORITY: MintCloseAuthorityParams,
    ExtensionKind.METADATA_POINTER: MetadataPointerParams,
    ExtensionKind.CONFIDENTIAL_BALANCES: ConfidentialBalancesParams,
}


# =============================================================================
# Descriptive metadata
# =============================================================================

def _check_bytes(field: str, value: str, limit: int) -> str:
    size = len(value.encode("utf-8"))
    if size > limit:
        raise ValueError(f"{field} is {size} bytes encoded, limit is {limit}")
    return value


class DescriptiveMetadata(BaseModel):
    """Name, symbol, uri and ordered additional fields stored on the mint."""
    name: str
    symbol: str
    uri: str
    additional: List[Tuple[str, str]] = Field(default_factory=list, alias="additionalMetadata")
    update_authority: Optional[Address] = Field(None, alias="updateAuthority")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("name")
    @classmethod
    def _name_limit(cls, v: str) -> str:
        return _check_bytes("name", v, MAX_NAME_BYTES)

    @field_validator("symbol")
    @classmethod
    def _symbol_limit(cls, v: str) -> str:
        return _check_bytes("symbol", v, MAX_SYMBOL_BYTES)

    @field_validator("uri")
    @classmethod
    def _uri_limit(cls, v: str) -> str:
        return _check_bytes("uri", v, MAX_URI_BYTES)

    @field_validator("additional", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, v: Any) -> Any:
        # Mappings keep their insertion order
        if isinstance(v, dict):
            return list(v.items())
        return v

    @model_validator(mode="after")
    def _unique_keys(self) -> "DescriptiveMetadata":
        seen = set()
        for key, _ in self.additional:
            if not key:
                raise ValueError("additional metadata keys cannot be empty")
            if key in seen:
                raise ValueError(f"duplicate additional metadata key '{key}'")
            seen.add(key)
        return self

    def with_field(self, key: str, value: str) -> "DescriptiveMetadata":
        """Return a copy with one more additional field appended."""
        return DescriptiveMetadata(
            name=self.name,
            symbol=self.symbol,
            uri=self.uri,
            additional=[*self.additional, (key, value)],
            update_authority=self.update_authority,
        )


__all__ = [
    "U64_MAX",
    "MAX_FEE_BASIS_POINTS",
    "MAX_NAME_BYTES",
    "MAX_SYMBOL_BYTES",
    "MAX_URI_BYTES",
    "BaseMintParams",
    "ExtensionParams",
    "TransferFeeParams",
    "PermanentDelegateParams",
    "TransferHookParams",
    "NonTransferableParams",
    "InterestBearingParams",
    "DefaultAccountStateParams",
    "MintCloseAuthorityParams",
    "MetadataPointerParams",
    "ConfidentialBalancesParams",
    "PARAMS_BY_KIND",
    "DescriptiveMetadata",
]
