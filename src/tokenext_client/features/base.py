"""
Shared capability interface of the feature wrappers.
"""

from __future__ import annotations
from typing import ClassVar, Optional

from ..enums import ExtensionKind
from ..runtime.errors import ConfigurationError
from .mint import Mint


class Feature:
    """
    A post-creation operation set bound to one mint.

    Subclasses name the extension kind they operate on.
    """

    kind: ClassVar[ExtensionKind]

    def __init__(self, mint: Mint):
        self.mint = mint

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.mint.address})"

    def require_extension(self) -> None:
        """
        Raises:
            ConfigurationError: If the mint does not carry this feature's extension
        """
        if not self.mint.has_extension(self.kind):
            raise ConfigurationError(f"Mint {self.mint.address} has no {self.kind.label} extension")

    def _value(self) -> bytes:
        value: Optional[bytes] = self.mint.extension_data(self.kind.extension_type)
        if value is None:
            raise ConfigurationError(f"Mint {self.mint.address} has no {self.kind.label} extension")
        return value


__all__ = ["Feature"]
