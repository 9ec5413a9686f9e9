"""Bounds-checked fixed-width integer arithmetic.

Python integers never overflow, so every helper here re-imposes the bit widths
of the pool contracts and raises ``ArithmeticOverflow`` where the contracts
would revert. Results are identical to the 512-bit ``mulDiv`` family because
Python computes the full product exactly.
"""

from __future__ import annotations

from clmm_quoter.core.constants import (
    MAX_INT128,
    MAX_UINT128,
    MAX_UINT160,
    MAX_UINT256,
    MIN_INT128,
)
from clmm_quoter.core.errors import ArithmeticOverflow, LiquidityUnderflow


def require_uint(value: int, bits: int, name: str = "value") -> int:
    if value < 0 or value >> bits:
        raise ArithmeticOverflow(f"{name}={value} does not fit in uint{bits}")
    return value


def require_int(value: int, bits: int, name: str = "value") -> int:
    bound = 1 << (bits - 1)
    if value < -bound or value >= bound:
        raise ArithmeticOverflow(f"{name}={value} does not fit in int{bits}")
    return value


def to_uint160(value: int) -> int:
    if value < 0 or value > MAX_UINT160:
        raise ArithmeticOverflow(f"{value} does not fit in uint160")
    return value


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator), reverting like FullMath.mulDiv."""
    require_uint(a, 256, "a")
    require_uint(b, 256, "b")
    if denominator <= 0:
        raise ArithmeticOverflow(f"mul_div denominator must be positive, got {denominator}")
    result = (a * b) // denominator
    if result > MAX_UINT256:
        raise ArithmeticOverflow(f"mul_div result {result} overflows uint256")
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator), reverting like FullMath.mulDivRoundingUp."""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator:
        if result == MAX_UINT256:
            raise ArithmeticOverflow("mul_div_rounding_up result overflows uint256")
        result += 1
    return result


def div_rounding_up(x: int, y: int) -> int:
    if y <= 0:
        raise ArithmeticOverflow(f"division by non-positive denominator {y}")
    return -(-x // y)


def add_delta(liquidity: int, delta: int) -> int:
    """Apply a signed int128 liquidity delta to a uint128 liquidity value."""
    require_uint(liquidity, 128, "liquidity")
    if delta < MIN_INT128 or delta > MAX_INT128:
        raise ArithmeticOverflow(f"liquidity delta {delta} does not fit in int128")
    result = liquidity + delta
    if result < 0:
        raise LiquidityUnderflow(
            f"liquidity {liquidity} cannot absorb delta {delta}"
        )
    if result > MAX_UINT128:
        raise ArithmeticOverflow(f"liquidity {result} overflows uint128")
    return result
