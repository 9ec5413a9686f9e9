"""Tick <-> sqrt price conversions.

Both directions are bit-exact with the pool contracts' TickMath library and are
exact inverses on ``[MIN_TICK, MAX_TICK]``. Float helpers at the bottom exist for
human-readable reporting only and must never feed the quote loop.
"""

from __future__ import annotations

import math

from clmm_quoter.core.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MAX_UINT256,
    MIN_SQRT_RATIO,
    MIN_TICK,
)
from clmm_quoter.core.errors import OutOfTickRange

Q32 = 1 << 32

# log_sqrt(1.0001)(2) as a 128.128 fixed point number, and the error bounds of
# the log2 approximation below
_LOG_SQRT10001_FACTOR = 255738958999603826347141
_TICK_LOW_ERROR = 3402992956809132418596140100660247210
_TICK_HIGH_ERROR = 291339464771989622907027621153398088495


def sqrt_price_x96_from_tick(tick: int) -> int:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OutOfTickRange(f"tick out of range [{MIN_TICK}, {MAX_TICK}]", tick=tick)

    abs_tick = tick if tick >= 0 else -tick
    ratio = 0x100000000000000000000000000000000

    if abs_tick & 0x1:
        ratio = (ratio * 0xFFFCB933BD6FAD37AA2D162D1A594001) >> 128
    if abs_tick & 0x2:
        ratio = (ratio * 0xFFF97272373D413259A46990580E213A) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xFFF2E50F5F656932EF12357CF3C7FDCC) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xFFE5CACA7E10E4E61C3624EAA0941CD0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xFFCB9843D60F6159C9DB58835C926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xFF973B41FA98C081472E6896DFB254C0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xFF2EA16466C96A3843EC78B326B52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xFE5DEE046A99A2A811C461F1969C3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xFCBE86C7900A88AEDCFFC83B479AA3A4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xF987A7253AC413176F2B074CF7815E54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xF3392B0822B70005940C7A398E4B70F3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xE7159475A2C29B7443B29C7FA6E889D9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xD097F3BDFD2022B8845AD8F792AA5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xA9F746462D870FDF8A65DC1F90E061E5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70D869A156D2A1B890BB3DF62BAF32F7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31BE135F97D08FD981231505542FCFA6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9AA508B5B7A84E1C677DE54F3E99BC9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5D6AF8DEDB81196699C329225EE604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216E584F5FA1EA926041BEDFE98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48A170391F7DC42444E8FA2) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up so the result is never below the true price
    sqrt_price_x96 = ratio >> 32
    if ratio & (Q32 - 1):
        sqrt_price_x96 += 1
    return sqrt_price_x96


def tick_from_sqrt_price_x96(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt price is <= ``sqrt_price_x96``."""
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise OutOfTickRange(
            f"sqrt price out of range [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO})",
            sqrt_price_x96=sqrt_price_x96,
        )

    ratio = sqrt_price_x96 << 32
    msb = ratio.bit_length() - 1
    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64
    for shift in range(63, 49, -1):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << shift
        r >>= f

    log_sqrt10001 = log_2 * _LOG_SQRT10001_FACTOR

    tick_low = (log_sqrt10001 - _TICK_LOW_ERROR) >> 128
    tick_high = (log_sqrt10001 + _TICK_HIGH_ERROR) >> 128

    if tick_low == tick_high:
        return tick_low
    if sqrt_price_x96_from_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def clamp_tick(tick: int) -> int:
    if tick < MIN_TICK:
        return MIN_TICK
    if tick > MAX_TICK:
        return MAX_TICK
    return tick


def sqrt_price_x96_to_price(sqrtpx96: int, decimals0: int, decimals1: int) -> float:
    if sqrtpx96 <= 0:
        return 0.0
    p = (sqrtpx96 / (1 << 96)) ** 2
    scale = 10 ** (decimals1 - decimals0)
    return p / scale


def price_to_sqrt_price_x96(price: float, decimals0: int, decimals1: int) -> int:
    if price <= 0:
        raise ValueError("price must be positive")
    scale = 10 ** (decimals1 - decimals0)
    return int(math.sqrt(price * scale) * (1 << 96))
