__version__ = "0.1.0"

from clmm_quoter.core import (
    ArithmeticOverflow,
    BaseAdapter,
    ExactInput,
    ExactOutput,
    InvalidPriceLimit,
    InvalidSwapRequest,
    LiquidityUnderflow,
    OutOfTickRange,
    PoolDescriptor,
    PoolLedger,
    PoolSnapshot,
    PoolStateReader,
    PriceState,
    QuoteBudgetExceeded,
    QuoteError,
    QuoteResult,
    SwapDirection,
    SwapRequest,
    SwapStep,
    quote,
    quote_swap,
)

__all__ = [
    "__version__",
    "ArithmeticOverflow",
    "BaseAdapter",
    "ExactInput",
    "ExactOutput",
    "InvalidPriceLimit",
    "InvalidSwapRequest",
    "LiquidityUnderflow",
    "OutOfTickRange",
    "PoolDescriptor",
    "PoolLedger",
    "PoolSnapshot",
    "PoolStateReader",
    "PriceState",
    "QuoteBudgetExceeded",
    "QuoteError",
    "QuoteResult",
    "SwapDirection",
    "SwapRequest",
    "SwapStep",
    "quote",
    "quote_swap",
]
