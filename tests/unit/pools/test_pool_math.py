"""Tests for constant product pricing and LP share math."""

import pytest

from settlement.pools.math import (
    amounts_for_shares,
    fee_multiplier,
    get_amount_in,
    get_amount_out,
    protocol_fee_amount,
    shares_for_deposit,
    shares_for_first_deposit,
)
from settlement.safe_int import DivisionByZero, Underflow


class TestFeeMultiplier:
    def test_default_fee(self):
        assert fee_multiplier(30) == 9970

    def test_bounds(self):
        assert fee_multiplier(0) == 10_000
        assert fee_multiplier(500) == 9500


class TestGetAmountOut:
    """Tests for exact-input pricing."""

    def test_reference_swap(self):
        """10_000 into (1_000_000, 2_000_000) at 30 bps."""
        assert get_amount_out(10_000, 1_000_000, 2_000_000, 30) == 19_743

    def test_zero_fee(self):
        """Without a fee the product is preserved up to rounding."""
        out = get_amount_out(1_000, 1_000_000, 1_000_000, 0)
        assert out == 999
        assert (1_000_000 + 1_000) * (1_000_000 - out) >= 1_000_000 * 1_000_000

    def test_tiny_input_rounds_to_zero(self):
        assert get_amount_out(1, 2_000_000, 1_000_000, 30) == 0

    def test_output_never_reaches_reserve(self):
        """Any finite input into a non-empty input reserve leaves output behind."""
        assert get_amount_out(10**30, 1_000, 1_000, 30) < 1_000

    def test_empty_pool_raises(self):
        with pytest.raises(DivisionByZero):
            get_amount_out(0, 0, 1_000, 30)


class TestGetAmountIn:
    """Tests for exact-output pricing."""

    def test_inverse_covers_output(self):
        """The required input always buys at least the requested output."""
        amount_in = get_amount_in(19_743, 1_000_000, 2_000_000, 30)
        assert get_amount_out(amount_in, 1_000_000, 2_000_000, 30) >= 19_743
        assert get_amount_out(amount_in - 2, 1_000_000, 2_000_000, 30) < 19_743

    def test_output_equal_to_reserve_raises(self):
        with pytest.raises(DivisionByZero):
            get_amount_in(2_000_000, 1_000_000, 2_000_000, 30)

    def test_output_above_reserve_raises(self):
        with pytest.raises(Underflow):
            get_amount_in(2_000_001, 1_000_000, 2_000_000, 30)


class TestShares:
    """Tests for LP share minting and redemption."""

    def test_first_deposit_is_geometric_mean(self):
        assert shares_for_first_deposit(1_000_000, 2_000_000) == 1_414_213
        assert shares_for_first_deposit(4, 9) == 6

    def test_proportional_deposit(self):
        shares = shares_for_deposit(500_000, 1_000_000, 1_000_000, 2_000_000, 1_414_213)
        assert shares == 707_106

    def test_unbalanced_deposit_takes_scarcer_side(self):
        """Surplus of one asset mints nothing extra."""
        balanced = shares_for_deposit(500_000, 1_000_000, 1_000_000, 2_000_000, 1_414_213)
        surplus = shares_for_deposit(900_000, 1_000_000, 1_000_000, 2_000_000, 1_414_213)
        assert surplus == balanced

    def test_dust_deposit_mints_zero(self):
        assert shares_for_deposit(1, 1, 1_000_000, 2_000_000, 1_414_213) == 0

    def test_redemption_rounds_down(self):
        assert amounts_for_shares(707_106, 1_000_000, 2_000_000, 1_414_213) == (
            499_999,
            999_999,
        )

    def test_full_redemption(self):
        assert amounts_for_shares(1_414_213, 1_000_000, 2_000_000, 1_414_213) == (
            1_000_000,
            2_000_000,
        )


class TestProtocolFee:
    def test_full_portion_equals_fee(self):
        assert protocol_fee_amount(10_000, 30, 10_000) == 30

    def test_half_portion(self):
        assert protocol_fee_amount(10_000, 30, 5_000) == 15

    def test_zero_portion(self):
        assert protocol_fee_amount(10_000, 30, 0) == 0

    def test_rounds_down(self):
        assert protocol_fee_amount(100, 30, 10_000) == 0
