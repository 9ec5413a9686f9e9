from __future__ import annotations

import asyncio
from typing import Any

from eth_utils import to_checksum_address

from clmm_quoter.core.adapters.BaseAdapter import BaseAdapter
from clmm_quoter.core.adapters.decorators import status_tuple
from clmm_quoter.core.config import get_bitmap_word_radius
from clmm_quoter.core.constants import MAX_TICK, MIN_TICK
from clmm_quoter.core.constants.uniswap_v3_pool_abi import UNISWAP_V3_POOL_ABI
from clmm_quoter.core.quoter import quote_swap
from clmm_quoter.core.snapshot import PoolSnapshot
from clmm_quoter.core.types import PoolDescriptor, QuoteResult, SwapRequest
from clmm_quoter.core.utils.tick_bitmap import compress, position
from clmm_quoter.core.utils.web3 import web3_from_chain_id


def word_range(tick: int, tick_spacing: int, radius: int) -> tuple[int, int]:
    """Bitmap words within ``radius`` of the word holding ``tick``, clipped to the tick range."""
    center, _ = position(compress(tick, tick_spacing))
    lowest, _ = position(compress(MIN_TICK, tick_spacing))
    highest, _ = position(compress(MAX_TICK, tick_spacing))
    return max(center - radius, lowest), min(center + radius, highest)


def ticks_in_word(word_pos: int, word: int, tick_spacing: int) -> list[int]:
    ticks = []
    while word:
        bit = (word & -word).bit_length() - 1
        ticks.append(((word_pos << 8) + bit) * tick_spacing)
        word &= word - 1
    return ticks


class PoolStateAdapter(BaseAdapter):
    """Reads Uniswap v3 style pool state over RPC and quotes swaps against it.

    Every read for one snapshot is pinned to a single block, so the snapshot is
    consistent even while the pool keeps trading. Only the bitmap words within
    ``bitmap_word_radius`` of the current price are fetched; quotes that walk
    further fail with ``OutOfTickRange`` instead of silently missing liquidity.
    """

    adapter_type = "POOL_STATE"

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        super().__init__("pool_state_adapter", config)
        radius = self.config.get("bitmap_word_radius")
        self.bitmap_word_radius: int = (
            get_bitmap_word_radius() if radius is None else int(radius)
        )
        if self.bitmap_word_radius < 0:
            raise ValueError("bitmap_word_radius must be >= 0")

    async def fetch_snapshot(
        self, pool_address: str, *, block_identifier: int | str | None = None
    ) -> PoolSnapshot:
        address = to_checksum_address(pool_address)
        async with web3_from_chain_id(self.chain_id) as web3:
            block = block_identifier
            if block is None or block == "latest":
                block = int(await web3.eth.block_number)
            pool = web3.eth.contract(address=address, abi=UNISWAP_V3_POOL_ABI)
            slot0, liquidity, tick_spacing, fee, token0, token1 = await asyncio.gather(
                pool.functions.slot0().call(block_identifier=block),
                pool.functions.liquidity().call(block_identifier=block),
                pool.functions.tickSpacing().call(block_identifier=block),
                pool.functions.fee().call(block_identifier=block),
                pool.functions.token0().call(block_identifier=block),
                pool.functions.token1().call(block_identifier=block),
            )
            sqrt_price_x96, tick = int(slot0[0]), int(slot0[1])
            tick_spacing = int(tick_spacing)

            low, high = word_range(tick, tick_spacing, self.bitmap_word_radius)
            nets, gross = await self._tick_liquidity(
                pool, low, high, tick_spacing, block
            )

        descriptor = PoolDescriptor(
            token0=to_checksum_address(token0),
            token1=to_checksum_address(token1),
            fee=int(fee),
            tick_spacing=tick_spacing,
        )
        self.logger.info(
            f"Snapshot of {address} at block {block}: tick={tick} "
            f"liquidity={int(liquidity)} initialized_ticks={len(nets)} words=[{low}, {high}]"
        )
        return PoolSnapshot.build(
            descriptor,
            sqrt_price_x96,
            liquidity=int(liquidity),
            tick=tick,
            ticks=nets,
            liquidity_gross=gross,
            block_number=block if isinstance(block, int) else None,
            word_bounds=(low, high),
        )

    async def _tick_liquidity(
        self,
        pool: Any,
        low: int,
        high: int,
        tick_spacing: int,
        block: int | str,
    ) -> tuple[dict[int, int], dict[int, int]]:
        word_positions = list(range(low, high + 1))
        words = await asyncio.gather(
            *(
                pool.functions.tickBitmap(w).call(block_identifier=block)
                for w in word_positions
            )
        )
        initialized = [
            t
            for w, word in zip(word_positions, words, strict=True)
            for t in ticks_in_word(w, int(word), tick_spacing)
        ]
        infos = await asyncio.gather(
            *(pool.functions.ticks(t).call(block_identifier=block) for t in initialized)
        )
        nets: dict[int, int] = {}
        gross: dict[int, int] = {}
        for t, info in zip(initialized, infos, strict=True):
            gross[t] = int(info[0])
            nets[t] = int(info[1])
        return nets, gross

    async def _quote(
        self,
        pool_address: str,
        request: SwapRequest,
        block_identifier: int | str | None,
    ) -> QuoteResult:
        snapshot = await self.fetch_snapshot(
            pool_address, block_identifier=block_identifier
        )
        return quote_swap(snapshot.pool, request, snapshot)

    @status_tuple
    async def get_snapshot(
        self, pool_address: str, block_identifier: int | str | None = None
    ) -> PoolSnapshot:
        return await self.fetch_snapshot(pool_address, block_identifier=block_identifier)

    @status_tuple
    async def quote_exact_input(
        self,
        pool_address: str,
        direction: str,
        amount_in: int,
        price_limit_x96: int | None = None,
        block_identifier: int | str | None = None,
    ) -> QuoteResult:
        request = SwapRequest.exact_input(direction, int(amount_in), price_limit_x96)
        return await self._quote(pool_address, request, block_identifier)

    @status_tuple
    async def quote_exact_output(
        self,
        pool_address: str,
        direction: str,
        amount_out: int,
        price_limit_x96: int | None = None,
        block_identifier: int | str | None = None,
    ) -> QuoteResult:
        request = SwapRequest.exact_output(direction, int(amount_out), price_limit_x96)
        return await self._quote(pool_address, request, block_identifier)
