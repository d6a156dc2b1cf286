"""
Account layout calculation.

Computes the byte size of a mint carrying a set of extensions and,
optionally, embedded descriptive metadata, then asks a funding source for
the balance that keeps an account of that size alive.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional, Protocol

from ..codec.account import ACCOUNT_SIZE, ACCOUNT_TYPE_SIZE, LENGTH_SIZE, MINT_SIZE, TYPE_SIZE
from ..codec.metadata import MetadataCodec, default_codec
from ..enums import ExtensionKind
from ..ledger.rent import RentSchedule
from ..models import DescriptiveMetadata
from ..runtime.errors import LayoutError

logger = logging.getLogger(__name__)

MULTISIG_SIZE = 355
TLV_HEADER_SIZE = TYPE_SIZE + LENGTH_SIZE

# Largest account the ledger will hold
MAX_ACCOUNT_SIZE = 10 * 1024 * 1024
# Largest in-place growth of an account within one instruction
MAX_METADATA_SIZE = 10 * 1024

# Fixed value length of every composable extension
EXTENSION_PAYLOAD_SIZES: Dict[ExtensionKind, int] = {
    ExtensionKind.TRANSFER_FEE: 108,
    ExtensionKind.MINT_CLOSE_AUTHORITY: 32,
    ExtensionKind.CONFIDENTIAL_BALANCES: 65,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: 1,
    ExtensionKind.NON_TRANSFERABLE: 0,
    ExtensionKind.INTEREST_BEARING: 52,
    ExtensionKind.PERMANENT_DELEGATE: 32,
    ExtensionKind.TRANSFER_HOOK: 64,
    ExtensionKind.METADATA_POINTER: 64,
}


class FundingSource(Protocol):
    def minimum_funding(self, byte_size: int) -> int: ...


@dataclass(frozen=True)
class AccountLayout:
    """
    Byte layout and funding of a composed mint.

    ``allocation_size`` is what the allocation step reserves; metadata is
    written later by growing the account in place, so ``total_size`` adds
    ``metadata_size`` on top and ``required_funding`` covers the total.
    """
    base_size: int
    extension_sizes: Dict[ExtensionKind, int] = field(default_factory=dict, hash=False)
    padding: int = 0
    metadata_size: int = 0
    required_funding: int = 0

    @property
    def extensions_size(self) -> int:
        return sum(self.extension_sizes.values())

    @property
    def allocation_size(self) -> int:
        return self.base_size + self.extensions_size + self.padding

    @property
    def total_size(self) -> int:
        return self.allocation_size + self.metadata_size

    def with_funding(self, amount: int) -> "AccountLayout":
        return replace(self, required_funding=amount)

    def to_dict(self) -> dict:
        return {
            "baseSize": self.base_size,
            "extensionSizes": {kind.label: size for kind, size in self.extension_sizes.items()},
            "padding": self.padding,
            "metadataSize": self.metadata_size,
            "allocationSize": self.allocation_size,
            "totalSize": self.total_size,
            "requiredFunding": self.required_funding,
        }


def extension_size(kind: ExtensionKind) -> int:
    """TLV header plus fixed payload of one extension."""
    return TLV_HEADER_SIZE + EXTENSION_PAYLOAD_SIZES[kind]


def metadata_size(metadata: DescriptiveMetadata, codec: MetadataCodec = default_codec) -> int:
    """TLV header plus encoded length of the metadata block."""
    return TLV_HEADER_SIZE + codec.encoded_length(metadata)


def measure(
    requested: Iterable[ExtensionKind],
    metadata: Optional[DescriptiveMetadata] = None,
    codec: MetadataCodec = default_codec,
) -> AccountLayout:
    """
    Compute the layout without funding and without ceiling checks.
    """
    kinds = sorted(set(requested))
    if not kinds and metadata is None:
        return AccountLayout(base_size=MINT_SIZE)

    sizes = {kind: extension_size(kind) for kind in kinds}
    base = ACCOUNT_SIZE + ACCOUNT_TYPE_SIZE
    span = base + sum(sizes.values())
    # Spans landing on the multisig size get one extra type field
    padding = TYPE_SIZE if span == MULTISIG_SIZE else 0
    meta = metadata_size(metadata, codec) if metadata is not None else 0
    return AccountLayout(base_size=base, extension_sizes=sizes, padding=padding, metadata_size=meta)


def check_ceilings(layout: AccountLayout) -> None:
    """
    Raises:
        LayoutError: If the metadata block or the whole account is too large
    """
    if layout.metadata_size > MAX_METADATA_SIZE:
        raise LayoutError(
            f"Metadata block of {layout.metadata_size} bytes exceeds {MAX_METADATA_SIZE} bytes",
            size=layout.metadata_size,
            limit=MAX_METADATA_SIZE,
        )
    if layout.total_size > MAX_ACCOUNT_SIZE:
        raise LayoutError(
            f"Account of {layout.total_size} bytes exceeds {MAX_ACCOUNT_SIZE} bytes",
            size=layout.total_size,
            limit=MAX_ACCOUNT_SIZE,
        )


def compute_layout(
    requested: Iterable[ExtensionKind],
    metadata: Optional[DescriptiveMetadata] = None,
    funding: Optional[FundingSource] = None,
    codec: MetadataCodec = default_codec,
) -> AccountLayout:
    """
    Compute the full layout of a mint, including its required funding.

    Args:
        requested: Extension kinds carried by the mint
        metadata: Embedded descriptive metadata, if any
        funding: Source of minimum-balance quotes; the offline rent schedule
            when omitted
        codec: Metadata codec used for sizing

    Raises:
        LayoutError: If a size ceiling is exceeded; raised before funding is queried
    """
    layout = measure(requested, metadata, codec)
    check_ceilings(layout)

    if funding is None:
        funding = RentSchedule()
    amount = funding.minimum_funding(layout.total_size)
    logger.debug(
        f"Layout: allocation={layout.allocation_size} metadata={layout.metadata_size} "
        f"total={layout.total_size} funding={amount}"
    )
    return layout.with_funding(amount)


__all__ = [
    "AccountLayout",
    "FundingSource",
    "EXTENSION_PAYLOAD_SIZES",
    "MAX_ACCOUNT_SIZE",
    "MAX_METADATA_SIZE",
    "MULTISIG_SIZE",
    "TLV_HEADER_SIZE",
    "extension_size",
    "metadata_size",
    "measure",
    "check_ceilings",
    "compute_layout",
]
