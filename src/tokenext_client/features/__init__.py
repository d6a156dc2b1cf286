"""
Post-creation feature wrappers.

Each wrapper binds to a :class:`Mint` handle and builds the instructions of
one extension; :func:`submit` sends them atomically.
"""

from .mint import Mint, submit
from .base import Feature
from .transfer_fee import TransferFeeFeature
from .permanent_delegate import PermanentDelegateFeature
from .token_metadata import TokenMetadataFeature
from .interest_bearing import InterestBearingFeature, amount_to_ui_amount
from .default_account_state import DefaultAccountStateFeature
from .mint_close import MintCloseFeature
from .transfer_hook import TransferHookFeature
from .confidential import ConfidentialBalancesFeature

__all__ = [
    "Mint",
    "submit",
    "Feature",
    "TransferFeeFeature",
    "PermanentDelegateFeature",
    "TokenMetadataFeature",
    "InterestBearingFeature",
    "amount_to_ui_amount",
    "DefaultAccountStateFeature",
    "MintCloseFeature",
    "TransferHookFeature",
    "ConfidentialBalancesFeature",
]
