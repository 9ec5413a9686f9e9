import random

import pytest

from clmm_quoter.core.constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK
from clmm_quoter.core.errors import OutOfTickRange
from clmm_quoter.core.utils.uniswap_v3_math import (
    clamp_tick,
    price_to_sqrt_price_x96,
    sqrt_price_x96_from_tick,
    sqrt_price_x96_to_price,
    tick_from_sqrt_price_x96,
)

Q96 = 1 << 96


def test_sqrt_price_at_known_ticks():
    assert sqrt_price_x96_from_tick(0) == Q96
    assert sqrt_price_x96_from_tick(MIN_TICK) == MIN_SQRT_RATIO
    assert sqrt_price_x96_from_tick(MAX_TICK) == MAX_SQRT_RATIO


def test_sqrt_price_is_strictly_increasing_near_zero():
    prices = [sqrt_price_x96_from_tick(t) for t in range(-50, 51)]
    assert prices == sorted(prices)
    assert len(set(prices)) == len(prices)


def test_sqrt_price_rejects_out_of_range_ticks():
    with pytest.raises(OutOfTickRange):
        sqrt_price_x96_from_tick(MIN_TICK - 1)
    with pytest.raises(OutOfTickRange):
        sqrt_price_x96_from_tick(MAX_TICK + 1)


def test_tick_at_boundaries():
    assert tick_from_sqrt_price_x96(MIN_SQRT_RATIO) == MIN_TICK
    assert tick_from_sqrt_price_x96(MAX_SQRT_RATIO - 1) == MAX_TICK - 1
    assert tick_from_sqrt_price_x96(Q96) == 0
    assert tick_from_sqrt_price_x96(Q96 - 1) == -1
    with pytest.raises(OutOfTickRange):
        tick_from_sqrt_price_x96(MIN_SQRT_RATIO - 1)
    with pytest.raises(OutOfTickRange):
        tick_from_sqrt_price_x96(MAX_SQRT_RATIO)


def test_tick_price_round_trip_sampled():
    rng = random.Random(1337)
    ticks = [MIN_TICK, MIN_TICK + 1, -1, 0, 1, MAX_TICK - 1]
    ticks += [rng.randint(MIN_TICK, MAX_TICK - 1) for _ in range(500)]
    for tick in ticks:
        sqrt_price = sqrt_price_x96_from_tick(tick)
        assert tick_from_sqrt_price_x96(sqrt_price) == tick
        # one unit below the tick's price belongs to the tick below
        if tick > MIN_TICK:
            assert tick_from_sqrt_price_x96(sqrt_price - 1) == tick - 1


def test_clamp_tick():
    assert clamp_tick(MIN_TICK - 100) == MIN_TICK
    assert clamp_tick(MAX_TICK + 100) == MAX_TICK
    assert clamp_tick(5) == 5


def test_float_price_helpers():
    assert sqrt_price_x96_to_price(Q96, 18, 18) == pytest.approx(1.0)
    # 1 WETH (18 dp) = 2000 USDC (6 dp)
    sqrt_price = price_to_sqrt_price_x96(2000.0, 18, 6)
    assert sqrt_price_x96_to_price(sqrt_price, 18, 6) == pytest.approx(2000.0, rel=1e-9)
    with pytest.raises(ValueError):
        price_to_sqrt_price_x96(0, 18, 18)
