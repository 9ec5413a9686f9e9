import pytest

from clmm_quoter.core.errors import InvalidSwapRequest
from clmm_quoter.core.utils.fixed_point import mul_div_rounding_up
from clmm_quoter.core.utils.sqrt_price_math import get_amount0_delta, get_amount1_delta
from clmm_quoter.core.utils.swap_math import compute_swap_step
from clmm_quoter.core.utils.uniswap_v3_math import sqrt_price_x96_from_tick

Q96 = 1 << 96
ONE = 10**18


def test_exact_input_capped_at_target():
    target = sqrt_price_x96_from_tick(100)
    liquidity = 2 * ONE
    next_price, amount_in, amount_out, fee = compute_swap_step(
        Q96, target, liquidity, -ONE, 600
    )
    assert next_price == target
    assert amount_in == get_amount1_delta(Q96, target, liquidity, True)
    assert amount_out == get_amount0_delta(Q96, target, liquidity, False)
    assert fee == mul_div_rounding_up(amount_in, 600, 1_000_000 - 600)
    assert amount_in + fee < ONE


def test_exact_input_fully_spent_before_target():
    target = sqrt_price_x96_from_tick(-10_000)
    next_price, amount_in, amount_out, fee = compute_swap_step(
        Q96, target, ONE, -(10**15), 3000
    )
    assert target < next_price < Q96
    assert amount_in == 997 * 10**12
    assert amount_in + fee == 10**15
    assert amount_out == get_amount1_delta(next_price, Q96, ONE, False)


def test_exact_output_capped_at_target():
    target = sqrt_price_x96_from_tick(-100)
    next_price, amount_in, amount_out, fee = compute_swap_step(
        Q96, target, ONE, ONE, 3000
    )
    assert next_price == target
    assert amount_out == get_amount1_delta(target, Q96, ONE, False)
    assert amount_in == get_amount0_delta(target, Q96, ONE, True)
    assert fee == mul_div_rounding_up(amount_in, 3000, 997_000)


def test_exact_output_filled_before_target():
    target = sqrt_price_x96_from_tick(10_000)
    next_price, amount_in, amount_out, fee = compute_swap_step(
        Q96, target, ONE, 10**15, 500
    )
    assert Q96 < next_price < target
    assert amount_out == 10**15
    assert amount_in > 10**15
    assert fee > 0


def test_dust_input_is_consumed_without_moving_price():
    current = 2413
    target = 79887613182836312
    liquidity = 1985041575832132834610021537970
    next_price, amount_in, amount_out, fee = compute_swap_step(
        current, target, liquidity, -10, 1872
    )
    assert next_price == current
    assert amount_out == 0
    assert amount_in + fee == 10


def test_zero_fee_takes_no_fee():
    target = sqrt_price_x96_from_tick(-10_000)
    _, amount_in, _, fee = compute_swap_step(Q96, target, ONE, -(10**15), 0)
    assert fee == 0
    assert amount_in == 10**15


def test_full_fee_pool():
    target = sqrt_price_x96_from_tick(-10_000)
    next_price, amount_in, amount_out, fee = compute_swap_step(
        Q96, target, ONE, -(10**15), 1_000_000
    )
    assert (next_price, amount_in, amount_out, fee) == (Q96, 0, 0, 10**15)
    with pytest.raises(InvalidSwapRequest):
        compute_swap_step(Q96, target, ONE, 10**15, 1_000_000)
    with pytest.raises(InvalidSwapRequest):
        compute_swap_step(Q96, target, ONE, -1, 1_000_001)
