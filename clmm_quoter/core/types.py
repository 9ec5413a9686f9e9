from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from clmm_quoter.core.constants import (
    FEE_PIPS_DENOMINATOR,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
)
from clmm_quoter.core.errors import OutOfTickRange


class SwapDirection(str, Enum):
    ZERO_FOR_ONE = "zero_for_one"
    ONE_FOR_ZERO = "one_for_zero"

    @property
    def zero_for_one(self) -> bool:
        return self is SwapDirection.ZERO_FOR_ONE

    @classmethod
    def parse(cls, value: str | SwapDirection) -> SwapDirection:
        if isinstance(value, SwapDirection):
            return value
        return cls(str(value).strip().lower().replace("-", "_"))


@dataclass(frozen=True)
class PoolDescriptor:
    token0: str
    token1: str
    fee: int
    tick_spacing: int

    def __post_init__(self) -> None:
        if not 0 <= self.fee <= FEE_PIPS_DENOMINATOR:
            raise ValueError(
                f"fee must be within [0, {FEE_PIPS_DENOMINATOR}] pips, got {self.fee}"
            )
        if self.tick_spacing <= 0:
            raise ValueError(f"tick_spacing must be positive, got {self.tick_spacing}")


@dataclass(frozen=True)
class PriceState:
    sqrt_price_x96: int
    tick: int


@dataclass(frozen=True)
class ExactInput:
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("exact input amount must be non-negative")

    def to_signed(self) -> int:
        return -self.amount


@dataclass(frozen=True)
class ExactOutput:
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("exact output amount must be non-negative")

    def to_signed(self) -> int:
        return self.amount


SwapMode = ExactInput | ExactOutput


def default_price_limit(direction: SwapDirection) -> int:
    """The loosest limit the pool accepts, i.e. no binding limit."""
    if direction.zero_for_one:
        return MIN_SQRT_RATIO + 1
    return MAX_SQRT_RATIO - 1


@dataclass(frozen=True)
class SwapRequest:
    """A hypothetical swap.

    ``amount_specified`` keeps the pool's signed convention: negative values are
    an exact-input magnitude, positive values an exact-output magnitude.
    """

    direction: SwapDirection
    amount_specified: int
    price_limit_x96: int | None = None

    @classmethod
    def exact_input(
        cls,
        direction: SwapDirection | str,
        amount: int,
        price_limit_x96: int | None = None,
    ) -> SwapRequest:
        return cls.from_mode(SwapDirection.parse(direction), ExactInput(amount), price_limit_x96)

    @classmethod
    def exact_output(
        cls,
        direction: SwapDirection | str,
        amount: int,
        price_limit_x96: int | None = None,
    ) -> SwapRequest:
        return cls.from_mode(SwapDirection.parse(direction), ExactOutput(amount), price_limit_x96)

    @classmethod
    def from_mode(
        cls,
        direction: SwapDirection,
        mode: SwapMode,
        price_limit_x96: int | None = None,
    ) -> SwapRequest:
        return cls(direction, mode.to_signed(), price_limit_x96)

    @property
    def mode(self) -> SwapMode:
        if self.amount_specified < 0:
            return ExactInput(-self.amount_specified)
        return ExactOutput(self.amount_specified)

    @property
    def effective_price_limit_x96(self) -> int:
        if self.price_limit_x96 is None:
            return default_price_limit(self.direction)
        return self.price_limit_x96


@dataclass(frozen=True)
class SwapStep:
    sqrt_price_start_x96: int
    tick_next: int
    initialized: bool
    sqrt_price_target_x96: int
    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


@dataclass
class QuoteResult:
    """Final state of one walk. ``amount_calculated`` is the quote itself."""

    request: SwapRequest
    amount_calculated: int
    amount_specified_remaining: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    steps: list[SwapStep] = field(default_factory=list)
    crossed_ticks: list[tuple[int, int]] = field(default_factory=list)

    @property
    def fully_filled(self) -> bool:
        return self.amount_specified_remaining == 0

    @property
    def amount_in(self) -> int:
        """Total the trader pays, fees included."""
        return sum(s.amount_in + s.fee_amount for s in self.steps)

    @property
    def amount_out(self) -> int:
        return sum(s.amount_out for s in self.steps)

    @property
    def fee_amount(self) -> int:
        return sum(s.fee_amount for s in self.steps)

    def to_dict(self, *, include_steps: bool = False) -> dict:
        out = {
            "direction": self.request.direction.value,
            "amount_specified": str(self.request.amount_specified),
            "amount_calculated": str(self.amount_calculated),
            "amount_in": str(self.amount_in),
            "amount_out": str(self.amount_out),
            "fee_amount": str(self.fee_amount),
            "amount_specified_remaining": str(self.amount_specified_remaining),
            "fully_filled": self.fully_filled,
            "sqrt_price_x96_after": str(self.sqrt_price_x96),
            "tick_after": self.tick,
            "liquidity_after": str(self.liquidity),
            "ticks_crossed": len(self.crossed_ticks),
        }
        if include_steps:
            out["steps"] = [
                {
                    "tick_next": s.tick_next,
                    "initialized": s.initialized,
                    "sqrt_price_start_x96": str(s.sqrt_price_start_x96),
                    "sqrt_price_next_x96": str(s.sqrt_price_next_x96),
                    "amount_in": str(s.amount_in),
                    "amount_out": str(s.amount_out),
                    "fee_amount": str(s.fee_amount),
                }
                for s in self.steps
            ]
        return out


def validate_price_state(state: PriceState) -> PriceState:
    if not MIN_TICK <= state.tick <= MAX_TICK:
        raise OutOfTickRange(
            "snapshot tick out of range",
            tick=state.tick,
            sqrt_price_x96=state.sqrt_price_x96,
        )
    if not MIN_SQRT_RATIO <= state.sqrt_price_x96 < MAX_SQRT_RATIO:
        raise OutOfTickRange(
            "snapshot sqrt price out of range",
            tick=state.tick,
            sqrt_price_x96=state.sqrt_price_x96,
        )
    return state
