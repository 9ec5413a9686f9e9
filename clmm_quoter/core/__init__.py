from clmm_quoter.core.adapters.BaseAdapter import BaseAdapter
from clmm_quoter.core.errors import (
    ArithmeticOverflow,
    InvalidPriceLimit,
    InvalidSwapRequest,
    LiquidityUnderflow,
    OutOfTickRange,
    QuoteBudgetExceeded,
    QuoteError,
)
from clmm_quoter.core.quoter import quote, quote_swap
from clmm_quoter.core.snapshot import PoolLedger, PoolSnapshot, PoolStateReader
from clmm_quoter.core.types import (
    ExactInput,
    ExactOutput,
    PoolDescriptor,
    PriceState,
    QuoteResult,
    SwapDirection,
    SwapRequest,
    SwapStep,
)

__all__ = [
    "BaseAdapter",
    "ArithmeticOverflow",
    "InvalidPriceLimit",
    "InvalidSwapRequest",
    "LiquidityUnderflow",
    "OutOfTickRange",
    "QuoteBudgetExceeded",
    "QuoteError",
    "quote",
    "quote_swap",
    "PoolLedger",
    "PoolSnapshot",
    "PoolStateReader",
    "ExactInput",
    "ExactOutput",
    "PoolDescriptor",
    "PriceState",
    "QuoteResult",
    "SwapDirection",
    "SwapRequest",
    "SwapStep",
]
