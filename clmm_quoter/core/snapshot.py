"""Pool state readers.

The quote loop only ever reads pool state through ``PoolStateReader``. The
in-memory ``PoolSnapshot`` is immutable, so a quote against it is always a
consistent read; ``PoolLedger`` serves several pools by descriptor.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable

from clmm_quoter.core.constants import MAX_TICK, MIN_TICK
from clmm_quoter.core.errors import OutOfTickRange
from clmm_quoter.core.types import PoolDescriptor, PriceState, validate_price_state
from clmm_quoter.core.utils.fixed_point import add_delta, require_int, require_uint
from clmm_quoter.core.utils.tick_bitmap import TickBitmap, compress, position
from clmm_quoter.core.utils.uniswap_v3_math import (
    sqrt_price_x96_from_tick,
    tick_from_sqrt_price_x96,
)


@runtime_checkable
class PoolStateReader(Protocol):
    def get_current_price(self, pool: PoolDescriptor) -> PriceState: ...

    def get_active_liquidity(self, pool: PoolDescriptor) -> int: ...

    def get_tick_liquidity_net(self, pool: PoolDescriptor, tick: int) -> int: ...

    def next_initialized_tick_within_one_word(
        self, pool: PoolDescriptor, tick_spacing: int, tick: int, lte: bool
    ) -> tuple[int, bool]: ...


def _check_tick(tick: int, tick_spacing: int) -> None:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OutOfTickRange("tick out of range", tick=tick)
    if tick % tick_spacing:
        raise ValueError(f"tick {tick} is not a multiple of spacing {tick_spacing}")


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable pool state at one point in time.

    ``word_bounds`` is the inclusive range of bitmap words the snapshot actually
    holds; ``None`` means the bitmap is complete. Snapshots read from a chain
    only hold the words near the current price, and a walk that leaves them
    fails with ``OutOfTickRange`` rather than treating unknown words as empty.
    """

    pool: PoolDescriptor
    sqrt_price_x96: int
    tick: int
    liquidity: int
    liquidity_net: Mapping[int, int] = field(default_factory=dict)
    liquidity_gross: Mapping[int, int] = field(default_factory=dict)
    bitmap: TickBitmap = field(default_factory=TickBitmap)
    block_number: int | None = None
    word_bounds: tuple[int, int] | None = None

    def __post_init__(self) -> None:
        validate_price_state(PriceState(self.sqrt_price_x96, self.tick))
        require_uint(self.liquidity, 128, "liquidity")
        for tick, net in self.liquidity_net.items():
            _check_tick(tick, self.pool.tick_spacing)
            require_int(net, 128, f"liquidity_net[{tick}]")
        if self.word_bounds is not None and self.word_bounds[0] > self.word_bounds[1]:
            raise ValueError(f"empty word bounds {self.word_bounds}")

    @classmethod
    def build(
        cls,
        pool: PoolDescriptor,
        sqrt_price_x96: int,
        *,
        liquidity: int = 0,
        tick: int | None = None,
        ticks: Mapping[int, int] | None = None,
        liquidity_gross: Mapping[int, int] | None = None,
        block_number: int | None = None,
        word_bounds: tuple[int, int] | None = None,
    ) -> PoolSnapshot:
        """Snapshot from raw state; every key of ``ticks`` is an initialized tick."""
        if tick is None:
            tick = tick_from_sqrt_price_x96(sqrt_price_x96)
        nets = {int(t): int(n) for t, n in (ticks or {}).items()}
        bitmap = TickBitmap()
        for t in nets:
            _check_tick(t, pool.tick_spacing)
            bitmap.flip_tick(t, pool.tick_spacing)
        return cls(
            pool=pool,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            liquidity=liquidity,
            liquidity_net=nets,
            liquidity_gross={int(t): int(g) for t, g in (liquidity_gross or {}).items()},
            bitmap=bitmap,
            block_number=block_number,
            word_bounds=word_bounds,
        )

    @classmethod
    def at_tick(cls, pool: PoolDescriptor, tick: int, **kwargs) -> PoolSnapshot:
        return cls.build(pool, sqrt_price_x96_from_tick(tick), tick=tick, **kwargs)

    def with_position(
        self, tick_lower: int, tick_upper: int, liquidity_delta: int
    ) -> PoolSnapshot:
        """Copy of the snapshot with a position range's liquidity changed.

        Mirrors the pool's tick bookkeeping: the lower tick gains
        ``+liquidity_delta`` of net, the upper tick ``-liquidity_delta``, ticks
        are flipped in the bitmap when their gross liquidity leaves or returns to
        zero, and in-range deltas apply to the active liquidity.
        """
        spacing = self.pool.tick_spacing
        if tick_lower >= tick_upper:
            raise ValueError(f"tick_lower {tick_lower} must be below tick_upper {tick_upper}")
        _check_tick(tick_lower, spacing)
        _check_tick(tick_upper, spacing)

        nets = dict(self.liquidity_net)
        gross = dict(self._gross())
        bitmap = self.bitmap.copy()

        for tick, net_delta in ((tick_lower, liquidity_delta), (tick_upper, -liquidity_delta)):
            gross_before = gross.get(tick, 0)
            gross_after = add_delta(gross_before, liquidity_delta)
            if (gross_before == 0) != (gross_after == 0):
                bitmap.flip_tick(tick, spacing)
            if gross_after == 0:
                gross.pop(tick, None)
                nets.pop(tick, None)
            else:
                gross[tick] = gross_after
                nets[tick] = require_int(nets.get(tick, 0) + net_delta, 128, "liquidity_net")

        liquidity = self.liquidity
        if tick_lower <= self.tick < tick_upper:
            liquidity = add_delta(liquidity, liquidity_delta)

        return replace(
            self,
            liquidity=liquidity,
            liquidity_net=nets,
            liquidity_gross=gross,
            bitmap=bitmap,
        )

    def _gross(self) -> Mapping[int, int]:
        # ticks without a gross value still count as initialized; |net| stands in
        return {
            t: self.liquidity_gross.get(t) or max(abs(n), 1)
            for t, n in self.liquidity_net.items()
        }

    def initialized_ticks(self) -> list[int]:
        return list(self.bitmap.initialized_ticks(self.pool.tick_spacing))

    def _check_pool(self, pool: PoolDescriptor) -> None:
        if pool != self.pool:
            raise ValueError(f"snapshot holds {self.pool}, not {pool}")

    def _check_word(self, tick: int, tick_spacing: int, lte: bool) -> None:
        if self.word_bounds is None:
            return
        compressed = compress(tick, tick_spacing)
        word_pos, _ = position(compressed if lte else compressed + 1)
        low, high = self.word_bounds
        if not low <= word_pos <= high:
            raise OutOfTickRange(
                f"bitmap word {word_pos} is outside the snapshot's words [{low}, {high}]",
                tick=tick,
            )

    def get_current_price(self, pool: PoolDescriptor) -> PriceState:
        self._check_pool(pool)
        return PriceState(self.sqrt_price_x96, self.tick)

    def get_active_liquidity(self, pool: PoolDescriptor) -> int:
        self._check_pool(pool)
        return self.liquidity

    def get_tick_liquidity_net(self, pool: PoolDescriptor, tick: int) -> int:
        self._check_pool(pool)
        return self.liquidity_net.get(tick, 0)

    def next_initialized_tick_within_one_word(
        self, pool: PoolDescriptor, tick_spacing: int, tick: int, lte: bool
    ) -> tuple[int, bool]:
        self._check_pool(pool)
        self._check_word(tick, tick_spacing, lte)
        return self.bitmap.next_initialized_tick_within_one_word(tick, tick_spacing, lte)


class PoolLedger:
    """In-memory ledger of pool snapshots keyed by descriptor."""

    def __init__(self, snapshots: list[PoolSnapshot] | None = None) -> None:
        self._snapshots: dict[PoolDescriptor, PoolSnapshot] = {}
        for snapshot in snapshots or []:
            self.register(snapshot)

    def __contains__(self, pool: object) -> bool:
        return pool in self._snapshots

    def register(self, snapshot: PoolSnapshot) -> None:
        self._snapshots[snapshot.pool] = snapshot

    def snapshot(self, pool: PoolDescriptor) -> PoolSnapshot:
        try:
            return self._snapshots[pool]
        except KeyError:
            raise ValueError(f"Unknown pool {pool}") from None

    def get_current_price(self, pool: PoolDescriptor) -> PriceState:
        return self.snapshot(pool).get_current_price(pool)

    def get_active_liquidity(self, pool: PoolDescriptor) -> int:
        return self.snapshot(pool).get_active_liquidity(pool)

    def get_tick_liquidity_net(self, pool: PoolDescriptor, tick: int) -> int:
        return self.snapshot(pool).get_tick_liquidity_net(pool, tick)

    def next_initialized_tick_within_one_word(
        self, pool: PoolDescriptor, tick_spacing: int, tick: int, lte: bool
    ) -> tuple[int, bool]:
        return self.snapshot(pool).next_initialized_tick_within_one_word(
            pool, tick_spacing, tick, lte
        )
