"""Read-only swap quoting against a pool state snapshot.

The walk is the pool's own swap loop with every write removed: find the next
initialized tick in the current bitmap word, swap up to that tick's price (or
the caller's limit, whichever comes first), cross the tick if it was reached,
and repeat until the specified amount is used up or the limit is hit.
"""

from __future__ import annotations

from loguru import logger

from clmm_quoter.core.config import get_max_steps
from clmm_quoter.core.constants import (
    FEE_PIPS_DENOMINATOR,
    MAX_SQRT_RATIO,
    MIN_SQRT_RATIO,
)
from clmm_quoter.core.errors import (
    InvalidPriceLimit,
    InvalidSwapRequest,
    LiquidityUnderflow,
    OutOfTickRange,
    QuoteBudgetExceeded,
)
from clmm_quoter.core.snapshot import PoolStateReader
from clmm_quoter.core.types import (
    ExactInput,
    ExactOutput,
    PoolDescriptor,
    PriceState,
    QuoteResult,
    SwapRequest,
    SwapStep,
    validate_price_state,
)
from clmm_quoter.core.utils.fixed_point import add_delta, require_int, require_uint
from clmm_quoter.core.utils.swap_math import compute_swap_step
from clmm_quoter.core.utils.uniswap_v3_math import (
    clamp_tick,
    sqrt_price_x96_from_tick,
    tick_from_sqrt_price_x96,
)


def validate_price_limit(
    price_limit_x96: int, price: PriceState, zero_for_one: bool
) -> None:
    """Reject limits on the wrong side of the current price or past the curve ends.

    A limit equal to the current price is accepted and yields an empty walk.
    """
    current = price.sqrt_price_x96
    if zero_for_one:
        ok = MIN_SQRT_RATIO < price_limit_x96 <= current
        bound = f"({MIN_SQRT_RATIO}, {current}]"
    else:
        ok = current <= price_limit_x96 < MAX_SQRT_RATIO
        bound = f"[{current}, {MAX_SQRT_RATIO})"
    if not ok:
        raise InvalidPriceLimit(
            f"price limit {price_limit_x96} outside {bound} for a "
            f"{'zero_for_one' if zero_for_one else 'one_for_zero'} swap",
            tick=price.tick,
            sqrt_price_x96=current,
        )


def quote_swap(
    pool: PoolDescriptor,
    request: SwapRequest,
    reader: PoolStateReader,
    *,
    max_steps: int | None = None,
) -> QuoteResult:
    quote_logger = logger.bind(quoter="clmm")

    price = validate_price_state(reader.get_current_price(pool))
    liquidity = require_uint(reader.get_active_liquidity(pool), 128, "liquidity")
    zero_for_one = request.direction.zero_for_one
    price_limit = request.effective_price_limit_x96
    validate_price_limit(price_limit, price, zero_for_one)

    mode = request.mode
    exact_input = isinstance(mode, ExactInput)
    if isinstance(mode, ExactOutput) and pool.fee == FEE_PIPS_DENOMINATOR and mode.amount:
        raise InvalidSwapRequest(
            "exact output is impossible on a 100% fee pool",
            tick=price.tick,
            sqrt_price_x96=price.sqrt_price_x96,
        )

    amount_specified_remaining = require_int(
        request.amount_specified, 256, "amount_specified"
    )
    amount_calculated = 0
    sqrt_price_x96 = price.sqrt_price_x96
    tick = price.tick
    budget = max_steps if max_steps is not None else get_max_steps()

    steps: list[SwapStep] = []
    crossed_ticks: list[tuple[int, int]] = []

    while amount_specified_remaining != 0 and sqrt_price_x96 != price_limit:
        if len(steps) >= budget:
            raise QuoteBudgetExceeded(
                f"walk did not finish within {budget} steps",
                tick=tick,
                sqrt_price_x96=sqrt_price_x96,
            )

        sqrt_price_start_x96 = sqrt_price_x96
        tick_next, initialized = reader.next_initialized_tick_within_one_word(
            pool, pool.tick_spacing, tick, zero_for_one
        )
        # the bitmap knows nothing about the global tick bounds
        tick_next = clamp_tick(tick_next)
        sqrt_price_next_x96 = sqrt_price_x96_from_tick(tick_next)

        if zero_for_one:
            target = max(sqrt_price_next_x96, price_limit)
        else:
            target = min(sqrt_price_next_x96, price_limit)

        sqrt_price_x96, amount_in, amount_out, fee_amount = compute_swap_step(
            sqrt_price_x96,
            target,
            liquidity,
            amount_specified_remaining,
            pool.fee,
        )

        if exact_input:
            amount_specified_remaining += amount_in + fee_amount
            amount_calculated += amount_out
        else:
            amount_specified_remaining -= amount_out
            amount_calculated -= amount_in + fee_amount

        steps.append(
            SwapStep(
                sqrt_price_start_x96=sqrt_price_start_x96,
                tick_next=tick_next,
                initialized=initialized,
                sqrt_price_target_x96=target,
                sqrt_price_next_x96=sqrt_price_x96,
                amount_in=amount_in,
                amount_out=amount_out,
                fee_amount=fee_amount,
            )
        )
        quote_logger.debug(
            f"step {len(steps)}: tick_next={tick_next} initialized={initialized} "
            f"in={amount_in} out={amount_out} fee={fee_amount} "
            f"remaining={amount_specified_remaining}"
        )

        if sqrt_price_x96 == sqrt_price_next_x96:
            if initialized:
                liquidity_net = reader.get_tick_liquidity_net(pool, tick_next)
                if zero_for_one:
                    liquidity_net = -liquidity_net
                try:
                    liquidity = add_delta(liquidity, liquidity_net)
                except LiquidityUnderflow as exc:
                    raise LiquidityUnderflow(
                        f"crossing drives liquidity {liquidity} negative by net "
                        f"{liquidity_net}",
                        tick=tick_next,
                        sqrt_price_x96=sqrt_price_x96,
                    ) from exc
                crossed_ticks.append((tick_next, liquidity_net))
                quote_logger.debug(
                    f"crossed tick {tick_next}: net={liquidity_net} liquidity={liquidity}"
                )
            tick = tick_next - 1 if zero_for_one else tick_next
        elif sqrt_price_x96 != sqrt_price_start_x96:
            # stopped inside the range; resync the tick to the new price
            tick = tick_from_sqrt_price_x96(sqrt_price_x96)
        else:
            break

    if (
        amount_specified_remaining != 0
        and request.price_limit_x96 is None
        and sqrt_price_x96 == price_limit
    ):
        # only a caller-supplied limit may leave the request partially filled
        raise OutOfTickRange(
            f"walk reached the end of the tick range with "
            f"{amount_specified_remaining} of {request.amount_specified} unfilled",
            tick=tick,
            sqrt_price_x96=sqrt_price_x96,
        )

    result = QuoteResult(
        request=request,
        amount_calculated=require_int(amount_calculated, 256, "amount_calculated"),
        amount_specified_remaining=amount_specified_remaining,
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        liquidity=liquidity,
        steps=steps,
        crossed_ticks=crossed_ticks,
    )
    if not result.fully_filled:
        quote_logger.warning(
            f"Quote stopped at sqrt price {sqrt_price_x96} with "
            f"{amount_specified_remaining} of {request.amount_specified} unfilled"
        )
    return result


def quote(
    pool: PoolDescriptor,
    request: SwapRequest,
    reader: PoolStateReader,
    *,
    max_steps: int | None = None,
) -> int:
    """Signed counter-amount of a hypothetical swap.

    Exact-input requests quote the (positive) output received; exact-output
    requests quote the (negative) input owed, fees included.
    """
    return quote_swap(pool, request, reader, max_steps=max_steps).amount_calculated
