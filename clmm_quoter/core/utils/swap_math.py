from __future__ import annotations

from clmm_quoter.core.constants import FEE_PIPS_DENOMINATOR
from clmm_quoter.core.errors import InvalidSwapRequest
from clmm_quoter.core.utils.fixed_point import mul_div, mul_div_rounding_up
from clmm_quoter.core.utils.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> tuple[int, int, int, int]:
    """Swap within one constant-liquidity segment.

    ``amount_remaining`` is signed: negative is input still to spend (exact
    input), non-negative is output still to produce (exact output). The price
    moves toward ``sqrt_price_target_x96`` and stops there, or earlier if the
    remaining amount runs out first.

    Returns ``(sqrt_price_next_x96, amount_in, amount_out, fee_amount)`` where
    ``amount_in`` excludes the fee.
    """
    if fee_pips < 0 or fee_pips > FEE_PIPS_DENOMINATOR:
        raise InvalidSwapRequest(f"fee {fee_pips} pips out of range")

    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining < 0

    if exact_in:
        budget = -amount_remaining
        budget_less_fee = mul_div(
            budget, FEE_PIPS_DENOMINATOR - fee_pips, FEE_PIPS_DENOMINATOR
        )
        if zero_for_one:
            amount_in = get_amount0_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True
            )
        else:
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True
            )

        if budget_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
            if fee_pips == FEE_PIPS_DENOMINATOR:
                fee_amount = amount_in
            else:
                fee_amount = mul_div_rounding_up(
                    amount_in, fee_pips, FEE_PIPS_DENOMINATOR - fee_pips
                )
        else:
            amount_in = budget_less_fee
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_in, zero_for_one
            )
            # the fee absorbs whatever input the price move did not use
            fee_amount = budget - amount_in

        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False
            )
        return sqrt_price_next_x96, amount_in, amount_out, fee_amount

    if fee_pips == FEE_PIPS_DENOMINATOR:
        raise InvalidSwapRequest("exact output is impossible on a 100% fee pool")

    if zero_for_one:
        amount_out = get_amount1_delta(
            sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False
        )
    else:
        amount_out = get_amount0_delta(
            sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False
        )

    if amount_remaining >= amount_out:
        sqrt_price_next_x96 = sqrt_price_target_x96
    else:
        amount_out = amount_remaining
        sqrt_price_next_x96 = get_next_sqrt_price_from_output(
            sqrt_price_current_x96, liquidity, amount_out, zero_for_one
        )

    if zero_for_one:
        amount_in = get_amount0_delta(
            sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True
        )
    else:
        amount_in = get_amount1_delta(
            sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True
        )
    fee_amount = mul_div_rounding_up(
        amount_in, fee_pips, FEE_PIPS_DENOMINATOR - fee_pips
    )
    return sqrt_price_next_x96, amount_in, amount_out, fee_amount
