from clmm_quoter.core.constants.base import (
    FEE_PIPS_DENOMINATOR,
    MAX_INT128,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MAX_UINT128,
    MAX_UINT160,
    MAX_UINT256,
    MIN_INT128,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    RESOLUTION,
)

__all__ = [
    "FEE_PIPS_DENOMINATOR",
    "MAX_INT128",
    "MAX_SQRT_RATIO",
    "MAX_TICK",
    "MAX_UINT128",
    "MAX_UINT160",
    "MAX_UINT256",
    "MIN_INT128",
    "MIN_SQRT_RATIO",
    "MIN_TICK",
    "Q96",
    "RESOLUTION",
]
