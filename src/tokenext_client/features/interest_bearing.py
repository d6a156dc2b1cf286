"""
Interest-bearing feature.

Interest compounds continuously: the displayed amount is the raw amount
scaled by exp(rate * elapsed / year) for each rate period, with rates in
basis points.
"""

from __future__ import annotations
import math
import time
from typing import Optional

from ..codec.account import InterestBearingConfigState, decode_interest_bearing_config
from ..codec.transaction import Instruction
from ..enums import ExtensionKind
from ..instructions import token as token_ix
from ..runtime.address import Address
from .base import Feature

SECONDS_PER_YEAR = 60 * 60 * 24 * 365.24
ONE_IN_BASIS_POINTS = 10_000


def _growth(rate: int, seconds: int) -> float:
    return math.exp(rate * seconds / SECONDS_PER_YEAR / ONE_IN_BASIS_POINTS)


def amount_to_ui_amount(
    amount: int,
    decimals: int,
    config: InterestBearingConfigState,
    timestamp: int,
) -> float:
    """Display amount of ``amount`` base units at unix time ``timestamp``."""
    pre_update = _growth(
        config.pre_update_average_rate,
        config.last_update_timestamp - config.initialization_timestamp,
    )
    post_update = _growth(config.current_rate, timestamp - config.last_update_timestamp)
    return amount * pre_update * post_update / 10 ** decimals


class InterestBearingFeature(Feature):
    kind = ExtensionKind.INTEREST_BEARING

    def config(self) -> InterestBearingConfigState:
        return decode_interest_bearing_config(self._value())

    def update_rate(self, rate_authority: Address, rate: int) -> Instruction:
        if not -(2 ** 15) <= rate < 2 ** 15:
            raise ValueError(f"rate must fit in i16, got {rate}")
        return token_ix.update_interest_rate(self.mint.address, rate_authority, rate)

    def amount_to_ui_amount(self, amount: int, timestamp: Optional[int] = None) -> float:
        state = self.mint.read_state()
        config = decode_interest_bearing_config(self._value())
        return amount_to_ui_amount(amount, state.decimals, config, int(time.time()) if timestamp is None else timestamp)


__all__ = ["InterestBearingFeature", "amount_to_ui_amount", "SECONDS_PER_YEAR"]
