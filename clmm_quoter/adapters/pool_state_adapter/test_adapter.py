from __future__ import annotations

import pytest

import clmm_quoter.adapters.pool_state_adapter.adapter as pool_state_adapter_module
from clmm_quoter.adapters.pool_state_adapter.adapter import (
    PoolStateAdapter,
    ticks_in_word,
    word_range,
)
from clmm_quoter.core.constants import MAX_TICK, MIN_TICK
from clmm_quoter.core.errors import OutOfTickRange
from clmm_quoter.core.quoter import quote
from clmm_quoter.core.snapshot import PoolSnapshot
from clmm_quoter.core.types import SwapRequest

Q96 = 1 << 96
ONE = 10**18
POOL_ADDRESS = "0x2222222222222222222222222222222222222222"
TOKEN0 = "0x1111111111111111111111111111111111111111"
TOKEN1 = "0x3333333333333333333333333333333333333333"
BLOCK = 21_000_000


class _DummyAsyncContext:
    def __init__(self, obj):
        self._obj = obj

    async def __aenter__(self):
        return self._obj

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeCall:
    def __init__(self, return_value, calls: list, name: str):
        self._return_value = return_value
        self._calls = calls
        self._name = name

    async def call(self, block_identifier="latest"):
        self._calls.append((self._name, block_identifier))
        return self._return_value


class _FakePoolFunctions:
    def __init__(self, words: dict[int, int], ticks: dict[int, tuple[int, int]]):
        self._words = words
        self._ticks = ticks
        self.calls: list[tuple[str, object]] = []

    def _call(self, name, value):
        return _FakeCall(value, self.calls, name)

    def slot0(self):
        return self._call("slot0", (Q96, 0, 0, 1, 1, 0, True))

    def liquidity(self):
        return self._call("liquidity", ONE)

    def tickSpacing(self):  # noqa: N802 - matches ABI
        return self._call("tickSpacing", 60)

    def fee(self):
        return self._call("fee", 3000)

    def token0(self):
        return self._call("token0", TOKEN0)

    def token1(self):
        return self._call("token1", TOKEN1)

    def tickBitmap(self, word_pos):  # noqa: N802 - matches ABI
        return self._call(f"tickBitmap({word_pos})", self._words.get(word_pos, 0))

    def ticks(self, tick):
        gross, net = self._ticks[tick]
        return self._call(f"ticks({tick})", (gross, net, 0, 0, 0, 0, 0, True))


class _FakePoolContract:
    def __init__(self, words, ticks):
        self.functions = _FakePoolFunctions(words, ticks)


class _FakeEth:
    def __init__(self, contract):
        self._contract = contract

    @property
    def block_number(self):
        async def _block():
            return BLOCK

        return _block()

    def contract(self, address=None, abi=None):  # noqa: ARG002 - unused in fake
        return self._contract


class _FakeWeb3:
    def __init__(self, contract):
        self.eth = _FakeEth(contract)


def _fake_pool():
    # ticks -60 (word -1, bit 255) and 60 (word 0, bit 1) bound a single position
    words = {-1: 1 << 255, 0: 1 << 1}
    ticks = {-60: (ONE, ONE), 60: (ONE, -ONE)}
    return _FakePoolContract(words, ticks)


@pytest.fixture
def fake_pool(monkeypatch):
    contract = _fake_pool()
    fake_web3 = _FakeWeb3(contract)
    monkeypatch.setattr(
        pool_state_adapter_module,
        "web3_from_chain_id",
        lambda _cid: _DummyAsyncContext(fake_web3),
    )
    return contract


def test_word_range_clips_to_tick_range():
    assert word_range(0, 60, 2) == (-2, 2)
    assert word_range(-1, 60, 0) == (-1, -1)
    low, high = word_range(MIN_TICK, 1, 5)
    assert low == MIN_TICK >> 8
    assert word_range(MAX_TICK, 1, 5)[1] == MAX_TICK >> 8
    assert low <= high


def test_ticks_in_word():
    assert ticks_in_word(0, 0b110, 60) == [60, 120]
    assert ticks_in_word(-1, 1 << 255, 60) == [-60]
    assert ticks_in_word(3, 0, 60) == []


def test_init_validates_radius():
    with pytest.raises(ValueError):
        PoolStateAdapter({"bitmap_word_radius": -1})
    adapter = PoolStateAdapter({"chain_id": "base", "bitmap_word_radius": 1})
    assert adapter.chain_id == 8453
    assert adapter.bitmap_word_radius == 1


@pytest.mark.asyncio
async def test_fetch_snapshot_pins_block_and_reads_ticks(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 1})
    snapshot = await adapter.fetch_snapshot(POOL_ADDRESS)

    assert isinstance(snapshot, PoolSnapshot)
    assert snapshot.block_number == BLOCK
    assert snapshot.word_bounds == (-1, 1)
    assert snapshot.pool.fee == 3000
    assert snapshot.pool.tick_spacing == 60
    assert snapshot.pool.token0 == TOKEN0
    assert snapshot.liquidity == ONE
    assert snapshot.initialized_ticks() == [-60, 60]
    assert dict(snapshot.liquidity_net) == {-60: ONE, 60: -ONE}

    calls = fake_pool.functions.calls
    assert {block for _, block in calls} == {BLOCK}
    assert {name for name, _ in calls} >= {
        "tickBitmap(-1)",
        "tickBitmap(0)",
        "tickBitmap(1)",
        "ticks(-60)",
        "ticks(60)",
    }


@pytest.mark.asyncio
async def test_fetch_snapshot_uses_explicit_block(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 0})
    snapshot = await adapter.fetch_snapshot(POOL_ADDRESS, block_identifier=123)
    assert snapshot.block_number == 123
    assert snapshot.word_bounds == (0, 0)
    assert snapshot.initialized_ticks() == [60]
    assert {block for _, block in fake_pool.functions.calls} == {123}


@pytest.mark.asyncio
async def test_snapshot_quotes_within_fetched_words(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 1})
    snapshot = await adapter.fetch_snapshot(POOL_ADDRESS)
    request = SwapRequest.exact_input("one_for_zero", 10**15)
    assert quote(snapshot.pool, request, snapshot) > 0

    # crossing tick 60 empties the range, so the walk runs off the fetched words
    with pytest.raises(OutOfTickRange):
        quote(snapshot.pool, SwapRequest.exact_input("one_for_zero", ONE), snapshot)


@pytest.mark.asyncio
async def test_quote_exact_input_status_tuple(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 1})
    ok, result = await adapter.quote_exact_input(POOL_ADDRESS, "zero_for_one", 10**15)
    assert ok is True
    assert result.amount_calculated > 0
    assert result.fully_filled


@pytest.mark.asyncio
async def test_quote_exact_output_status_tuple(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 1})
    ok, result = await adapter.quote_exact_output(POOL_ADDRESS, "one-for-zero", 10**15)
    assert ok is True
    assert result.amount_calculated < 0
    assert result.amount_out == 10**15


@pytest.mark.asyncio
async def test_quote_errors_become_status_tuple(fake_pool):
    adapter = PoolStateAdapter({"bitmap_word_radius": 1})
    ok, error = await adapter.quote_exact_input(
        POOL_ADDRESS, "zero_for_one", 10**15, price_limit_x96=Q96 + 1
    )
    assert ok is False
    assert error.startswith("invalid_price_limit:")


@pytest.mark.asyncio
async def test_rpc_errors_become_status_tuple(monkeypatch):
    def _boom(_cid):
        raise ValueError("No RPCs configured for chain ID 1")

    monkeypatch.setattr(pool_state_adapter_module, "web3_from_chain_id", _boom)
    adapter = PoolStateAdapter({})
    ok, error = await adapter.get_snapshot(POOL_ADDRESS)
    assert ok is False
    assert "No RPCs configured" in error
