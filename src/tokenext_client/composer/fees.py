"""
Transfer fee arithmetic.

Fees are charged in basis points of the transferred amount, rounded down
and capped at the configured maximum.
"""

from __future__ import annotations

from ..models import MAX_FEE_BASIS_POINTS


def calculate_fee(amount: int, fee_basis_points: int, max_fee: int) -> int:
    """
    Fee withheld on a transfer of ``amount`` base units.

    Args:
        amount: Transferred amount in base units
        fee_basis_points: Fee rate out of 10,000
        max_fee: Upper bound on the fee

    Returns:
        ``min(floor(amount * bps / 10000), max_fee)``
    """
    if amount < 0 or max_fee < 0:
        raise ValueError("amount and max_fee must be non-negative")
    if not 0 <= fee_basis_points <= MAX_FEE_BASIS_POINTS:
        raise ValueError(f"fee_basis_points must be within 0..{MAX_FEE_BASIS_POINTS}")
    return min(amount * fee_basis_points // MAX_FEE_BASIS_POINTS, max_fee)


def calculate_inverse_fee(post_fee_amount: int, fee_basis_points: int, max_fee: int) -> int:
    """Fee to add so that ``post_fee_amount`` arrives after withholding."""
    if fee_basis_points == 0:
        return 0
    if fee_basis_points == MAX_FEE_BASIS_POINTS:
        return max_fee
    numerator = post_fee_amount * MAX_FEE_BASIS_POINTS
    pre_fee = -(-numerator // (MAX_FEE_BASIS_POINTS - fee_basis_points))
    return min(pre_fee - post_fee_amount, max_fee)


__all__ = ["calculate_fee", "calculate_inverse_fee"]
