"""
Confidential balances.

Confidential transfers require zero-knowledge proofs, which this SDK does
not build. The wrapper exists so callers fail loudly instead of receiving
instructions backed by placeholder proofs.
"""

from __future__ import annotations

from ..enums import ExtensionKind
from ..runtime.errors import UnsupportedExtensionError
from .base import Feature
from .mint import Mint


class ConfidentialBalancesFeature(Feature):
    kind = ExtensionKind.CONFIDENTIAL_BALANCES

    def __init__(self, mint: Mint):
        raise UnsupportedExtensionError(
            "Confidential balances are not supported: proof generation is not implemented",
            extension=self.kind.label,
        )


__all__ = ["ConfidentialBalancesFeature"]
