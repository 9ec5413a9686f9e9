import pytest

from clmm_quoter.core.errors import OutOfTickRange
from clmm_quoter.core.snapshot import PoolLedger, PoolSnapshot, PoolStateReader
from clmm_quoter.core.types import PoolDescriptor

Q96 = 1 << 96
ONE = 10**18

POOL = PoolDescriptor(
    token0="0x1111111111111111111111111111111111111111",
    token1="0x3333333333333333333333333333333333333333",
    fee=3000,
    tick_spacing=60,
)


def test_build_derives_tick_and_bitmap():
    snapshot = PoolSnapshot.build(POOL, Q96, liquidity=ONE, ticks={-60: ONE, 60: -ONE})
    assert snapshot.tick == 0
    assert snapshot.initialized_ticks() == [-60, 60]
    assert isinstance(snapshot, PoolStateReader)
    assert snapshot.get_tick_liquidity_net(POOL, 60) == -ONE
    assert snapshot.get_tick_liquidity_net(POOL, 120) == 0


def test_build_rejects_bad_ticks():
    with pytest.raises(ValueError):
        PoolSnapshot.build(POOL, Q96, ticks={61: 1})
    with pytest.raises(OutOfTickRange):
        PoolSnapshot.build(POOL, Q96, ticks={900_000: 1})


def test_with_position_adds_and_removes_range():
    empty = PoolSnapshot.at_tick(POOL, 0)
    minted = empty.with_position(-60, 60, ONE)
    assert minted.liquidity == ONE
    assert dict(minted.liquidity_net) == {-60: ONE, 60: -ONE}
    assert minted.initialized_ticks() == [-60, 60]
    # the original snapshot is untouched
    assert empty.liquidity == 0
    assert empty.initialized_ticks() == []

    burned = minted.with_position(-60, 60, -ONE)
    assert burned.liquidity == 0
    assert dict(burned.liquidity_net) == {}
    assert burned.initialized_ticks() == []


def test_with_position_out_of_range_leaves_active_liquidity():
    snapshot = PoolSnapshot.at_tick(POOL, 0).with_position(60, 180, ONE)
    assert snapshot.liquidity == 0
    stacked = snapshot.with_position(120, 240, ONE)
    assert dict(stacked.liquidity_net) == {60: ONE, 120: ONE, 180: -ONE, 240: -ONE}


def test_with_position_shared_boundary_keeps_tick_initialized():
    snapshot = PoolSnapshot.at_tick(POOL, 0).with_position(-60, 60, ONE)
    snapshot = snapshot.with_position(60, 120, ONE)
    assert dict(snapshot.liquidity_net)[60] == 0
    assert 60 in snapshot.initialized_ticks()


def test_with_position_on_partial_gross_keeps_ticks_initialized():
    snapshot = PoolSnapshot.build(
        POOL,
        Q96,
        liquidity=ONE,
        ticks={-60: ONE, 60: -ONE},
        liquidity_gross={-60: ONE},
    )
    minted = snapshot.with_position(60, 180, 10)
    assert dict(minted.liquidity_net)[60] == -ONE + 10
    assert minted.initialized_ticks() == [-60, 60, 180]
    assert minted.liquidity_gross[60] == ONE + 10
    assert minted.liquidity_gross[-60] == ONE


def test_with_position_validates_range():
    snapshot = PoolSnapshot.at_tick(POOL, 0)
    with pytest.raises(ValueError):
        snapshot.with_position(60, -60, ONE)
    with pytest.raises(ValueError):
        snapshot.with_position(-59, 60, ONE)


def test_reader_rejects_other_pool():
    snapshot = PoolSnapshot.at_tick(POOL, 0)
    other = PoolDescriptor(POOL.token0, POOL.token1, 500, 10)
    with pytest.raises(ValueError):
        snapshot.get_active_liquidity(other)


def test_word_bounds_limit_navigation():
    snapshot = PoolSnapshot.at_tick(POOL, 0, word_bounds=(0, 0))
    assert snapshot.next_initialized_tick_within_one_word(POOL, 60, 0, True) == (0, False)
    assert snapshot.next_initialized_tick_within_one_word(POOL, 60, 15299, False) == (
        15300,
        False,
    )
    with pytest.raises(OutOfTickRange):
        snapshot.next_initialized_tick_within_one_word(POOL, 60, -1, True)
    with pytest.raises(OutOfTickRange):
        snapshot.next_initialized_tick_within_one_word(POOL, 60, 15300, False)


def test_ledger_serves_registered_pools():
    snapshot = PoolSnapshot.at_tick(POOL, 0, liquidity=ONE)
    ledger = PoolLedger([snapshot])
    assert POOL in ledger
    assert ledger.get_active_liquidity(POOL) == ONE
    assert ledger.get_current_price(POOL).sqrt_price_x96 == Q96

    other = PoolDescriptor(POOL.token0, POOL.token1, 500, 10)
    with pytest.raises(ValueError, match="Unknown pool"):
        ledger.get_current_price(other)
