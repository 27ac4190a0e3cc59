"""Constant product pricing and LP share math.

All functions are pure and work on integers through SafeInt, so every
division floors toward zero and any overflow or underflow raises instead of
wrapping. Rounding always favours the pool: depositors receive the smaller of
the two proportional share counts, redemptions and swap outputs round down,
and required swap inputs round up.

Formula: amount_out = (in * (10000 - fee) * res_out) / (res_in * 10000 + in * (10000 - fee))
"""

from settlement.constants import BPS_DENOMINATOR
from settlement.safe_int import S, floor_sqrt


def fee_multiplier(fee_bps: int) -> int:
    """Fee multiplier for AMM math (10000 - fee_bps).

    For 30 bps (0.3%), this returns 9970.
    """
    return (S(BPS_DENOMINATOR) - S(fee_bps)).value


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """Output amount for an exact input, with the fee retained in the pool.

    Args:
        amount_in: Input asset amount
        reserve_in: Input reserve before the input was received
        reserve_out: Output reserve
        fee_bps: Swap fee in basis points

    Returns:
        Output asset amount (floor)

    Raises:
        DivisionByZero: If both reserve_in and amount_in are zero
    """
    amount_in_with_fee = S(amount_in) * S(fee_multiplier(fee_bps))
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(BPS_DENOMINATOR) + amount_in_with_fee
    return (numerator // denominator).value


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """Input amount required to receive at least amount_out.

    Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * (10000 - fee)) + 1

    Raises:
        Underflow: If amount_out exceeds reserve_out
        DivisionByZero: If amount_out equals reserve_out or the fee is 100%
    """
    numerator = S(reserve_in) * S(amount_out) * S(BPS_DENOMINATOR)
    denominator = (S(reserve_out) - S(amount_out)) * S(fee_multiplier(fee_bps))
    return ((numerator // denominator) + S(1)).value


def shares_for_first_deposit(amount_a: int, amount_b: int) -> int:
    """Shares backing the first deposit into an empty pool: floor(sqrt(a * b))."""
    return floor_sqrt(S(amount_a) * S(amount_b))


def shares_for_deposit(
    amount_a: int, amount_b: int, reserve_a: int, reserve_b: int, total_shares: int
) -> int:
    """Shares for a deposit into a pool that already has shares outstanding.

    Takes the smaller of the two proportional claims so an unbalanced deposit
    never mints more than its scarcer side is worth. Both divisions floor, so
    the depositor may receive slightly fewer shares than the exact ratio.
    """
    shares_a = S(amount_a) * S(total_shares) // S(reserve_a)
    shares_b = S(amount_b) * S(total_shares) // S(reserve_b)
    return shares_a.min(shares_b).value


def amounts_for_shares(
    shares: int, reserve_a: int, reserve_b: int, total_shares: int
) -> tuple[int, int]:
    """Asset amounts redeemed by burning shares (each rounded down)."""
    amount_a = S(shares) * S(reserve_a) // S(total_shares)
    amount_b = S(shares) * S(reserve_b) // S(total_shares)
    return amount_a.value, amount_b.value


def protocol_fee_amount(amount_in: int, fee_bps: int, protocol_fee_portion_bps: int) -> int:
    """Part of the swap fee skimmed to the fee recipient.

    protocol_fee = floor(amount_in * fee_bps * portion_bps / 10000^2), which is
    never more than the fee itself, so the LP share of the fee stays in the pool.
    """
    numerator = S(amount_in) * S(fee_bps) * S(protocol_fee_portion_bps)
    return (numerator // (S(BPS_DENOMINATOR) * S(BPS_DENOMINATOR))).value
