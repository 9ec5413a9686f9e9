"""Token amounts and next-price solving on a constant-liquidity curve segment.

Rounding always favours the pool: amounts the trader owes round up, amounts the
trader receives round down, and next prices round in the direction that keeps
the pool solvent.
"""

from __future__ import annotations

from clmm_quoter.core.constants import MAX_UINT160, MAX_UINT256, Q96, RESOLUTION
from clmm_quoter.core.errors import ArithmeticOverflow
from clmm_quoter.core.utils.fixed_point import (
    div_rounding_up,
    mul_div,
    mul_div_rounding_up,
    require_uint,
    to_uint160,
)


def get_amount0_delta(
    sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """liquidity * (1/sqrt(lower) - 1/sqrt(upper)) in token0 units."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise ArithmeticOverflow(
            "sqrt price must be positive", sqrt_price_x96=sqrt_ratio_a_x96
        )

    numerator1 = require_uint(liquidity, 128, "liquidity") << RESOLUTION
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """liquidity * (sqrt(upper) - sqrt(lower)) in token1 units."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    require_uint(liquidity, 128, "liquidity")

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def _next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    if amount == 0:
        return sqrt_price_x96
    numerator1 = liquidity << RESOLUTION
    product = amount * sqrt_price_x96

    if add:
        # Exact form whenever the 256-bit intermediates do not overflow
        if product <= MAX_UINT256:
            denominator = numerator1 + product
            if denominator <= MAX_UINT256:
                return to_uint160(
                    mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
                )
        return to_uint160(
            div_rounding_up(numerator1, numerator1 // sqrt_price_x96 + amount)
        )

    if product > MAX_UINT256 or numerator1 <= product:
        raise ArithmeticOverflow(
            f"output of {amount} token0 exceeds the reserves of liquidity {liquidity}",
            sqrt_price_x96=sqrt_price_x96,
        )
    denominator = numerator1 - product
    return to_uint160(mul_div_rounding_up(numerator1, sqrt_price_x96, denominator))


def _next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    if add:
        if amount <= MAX_UINT160:
            quotient = (amount << RESOLUTION) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        return to_uint160(sqrt_price_x96 + quotient)

    if amount <= MAX_UINT160:
        quotient = div_rounding_up(amount << RESOLUTION, liquidity)
    else:
        quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise ArithmeticOverflow(
            f"output of {amount} token1 exceeds the reserves of liquidity {liquidity}",
            sqrt_price_x96=sqrt_price_x96,
        )
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int, liquidity: int, amount_in: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0:
        raise ArithmeticOverflow("sqrt price must be positive", sqrt_price_x96=sqrt_price_x96)
    if liquidity <= 0:
        raise ArithmeticOverflow(
            "cannot move the price without liquidity", sqrt_price_x96=sqrt_price_x96
        )
    if zero_for_one:
        return _next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return _next_sqrt_price_from_amount1_rounding_down(
        sqrt_price_x96, liquidity, amount_in, True
    )


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int, liquidity: int, amount_out: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0:
        raise ArithmeticOverflow("sqrt price must be positive", sqrt_price_x96=sqrt_price_x96)
    if liquidity <= 0:
        raise ArithmeticOverflow(
            "cannot move the price without liquidity", sqrt_price_x96=sqrt_price_x96
        )
    if zero_for_one:
        return _next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return _next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, False
    )
