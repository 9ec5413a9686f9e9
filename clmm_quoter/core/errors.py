from __future__ import annotations


class QuoteError(Exception):
    """Base class for every failure raised while producing a quote.

    ``tick`` and ``sqrt_price_x96`` carry the walk position at the time of the
    failure (when known) so a caller can diagnose without re-running.
    """

    kind = "quote_error"

    def __init__(
        self,
        message: str,
        *,
        tick: int | None = None,
        sqrt_price_x96: int | None = None,
    ) -> None:
        self.tick = tick
        self.sqrt_price_x96 = sqrt_price_x96
        context = []
        if tick is not None:
            context.append(f"tick={tick}")
        if sqrt_price_x96 is not None:
            context.append(f"sqrt_price_x96={sqrt_price_x96}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class InvalidPriceLimit(QuoteError, ValueError):
    kind = "invalid_price_limit"


class InvalidSwapRequest(QuoteError, ValueError):
    kind = "invalid_swap_request"


class LiquidityUnderflow(QuoteError):
    kind = "liquidity_underflow"


class ArithmeticOverflow(QuoteError, OverflowError):
    kind = "arithmetic_overflow"


class OutOfTickRange(QuoteError, ValueError):
    kind = "out_of_tick_range"


class QuoteBudgetExceeded(QuoteError):
    kind = "quote_budget_exceeded"
