"""
Transfer fee arithmetic.
"""

import pytest

from tokenext_client.composer.fees import calculate_fee, calculate_inverse_fee


@pytest.mark.unit
class TestCalculateFee:

    def test_percentage_below_cap(self):
        assert calculate_fee(10_000_000_000, 100, 1_000_000_000) == 100_000_000

    def test_capped_at_max_fee(self):
        assert calculate_fee(1_000_000_000_000, 100, 1_000_000_000) == 1_000_000_000

    def test_rounds_down(self):
        assert calculate_fee(199, 50, 1_000) == 0
        assert calculate_fee(201, 50, 1_000) == 1

    @pytest.mark.parametrize("amount,bps,cap,expected", [
        (0, 100, 10, 0),
        (1_000, 0, 10, 0),
        (1_000, 10_000, 5_000, 1_000),
        (1_000, 10_000, 10, 10),
        (2 ** 64 - 1, 10_000, 2 ** 64 - 1, 2 ** 64 - 1),
    ])
    def test_bounds(self, amount, bps, cap, expected):
        assert calculate_fee(amount, bps, cap) == expected

    @pytest.mark.parametrize("amount,bps,cap", [(-1, 1, 1), (1, -1, 1), (1, 10_001, 1), (1, 1, -1)])
    def test_invalid_arguments(self, amount, bps, cap):
        with pytest.raises(ValueError):
            calculate_fee(amount, bps, cap)


@pytest.mark.unit
class TestInverseFee:

    def test_inverse_delivers_post_fee_amount(self):
        fee = calculate_inverse_fee(9_900, 100, 10 ** 9)
        assert fee == 100
        assert calculate_fee(9_900 + fee, 100, 10 ** 9) == fee

    def test_zero_and_full_rate(self):
        assert calculate_inverse_fee(1_000, 0, 50) == 0
        assert calculate_inverse_fee(1_000, 10_000, 50) == 50

    def test_inverse_respects_cap(self):
        assert calculate_inverse_fee(10 ** 12, 100, 1_000) == 1_000
