"""JSON shapes for pool snapshots and quote requests.

Large integers may be written either as JSON numbers or as decimal/hex strings,
since sqrt prices and liquidity values exceed what many JSON tools preserve.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from clmm_quoter.core.snapshot import PoolSnapshot
from clmm_quoter.core.types import PoolDescriptor, SwapDirection, SwapRequest


def _coerce_int(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip().replace("_", "")
        return int(text, 0)
    return value


BigInt = Annotated[int, BeforeValidator(_coerce_int)]


class PoolModel(BaseModel):
    token0: str
    token1: str
    fee: int = Field(..., description="Fee in hundredths of a bip (3000 = 0.30%)")
    tick_spacing: int

    def to_descriptor(self) -> PoolDescriptor:
        return PoolDescriptor(
            token0=self.token0,
            token1=self.token1,
            fee=self.fee,
            tick_spacing=self.tick_spacing,
        )

    @classmethod
    def from_descriptor(cls, pool: PoolDescriptor) -> PoolModel:
        return cls(
            token0=pool.token0,
            token1=pool.token1,
            fee=pool.fee,
            tick_spacing=pool.tick_spacing,
        )


class TickModel(BaseModel):
    tick: int
    liquidity_net: BigInt
    liquidity_gross: BigInt | None = None


class PoolSnapshotModel(BaseModel):
    pool: PoolModel
    sqrt_price_x96: BigInt
    tick: int | None = Field(
        default=None, description="Derived from sqrt_price_x96 when omitted"
    )
    liquidity: BigInt = 0
    ticks: list[TickModel] = Field(default_factory=list)
    block_number: int | None = None
    word_bounds: tuple[int, int] | None = Field(
        default=None,
        description="Inclusive range of bitmap words covered; omit for a complete tick list",
    )

    @model_validator(mode="after")
    def _validate_ticks(self) -> PoolSnapshotModel:
        seen: set[int] = set()
        for entry in self.ticks:
            if entry.tick in seen:
                raise ValueError(f"duplicate tick {entry.tick}")
            seen.add(entry.tick)
        return self

    def to_snapshot(self) -> PoolSnapshot:
        return PoolSnapshot.build(
            self.pool.to_descriptor(),
            self.sqrt_price_x96,
            liquidity=self.liquidity,
            tick=self.tick,
            ticks={t.tick: t.liquidity_net for t in self.ticks},
            liquidity_gross={
                t.tick: t.liquidity_gross
                for t in self.ticks
                if t.liquidity_gross is not None
            },
            block_number=self.block_number,
            word_bounds=self.word_bounds,
        )

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> PoolSnapshotModel:
        return cls(
            pool=PoolModel.from_descriptor(snapshot.pool),
            sqrt_price_x96=snapshot.sqrt_price_x96,
            tick=snapshot.tick,
            liquidity=snapshot.liquidity,
            ticks=[
                TickModel(
                    tick=t,
                    liquidity_net=snapshot.liquidity_net.get(t, 0),
                    liquidity_gross=snapshot.liquidity_gross.get(t),
                )
                for t in snapshot.initialized_ticks()
            ],
            block_number=snapshot.block_number,
            word_bounds=snapshot.word_bounds,
        )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with big integers as strings."""
        data = self.model_dump()
        for key in ("sqrt_price_x96", "liquidity"):
            data[key] = str(data[key])
        for entry in data["ticks"]:
            entry["liquidity_net"] = str(entry["liquidity_net"])
            if entry["liquidity_gross"] is not None:
                entry["liquidity_gross"] = str(entry["liquidity_gross"])
        return data


class QuoteRequestModel(BaseModel):
    direction: SwapDirection
    exact_input: BigInt | None = None
    exact_output: BigInt | None = None
    price_limit_x96: BigInt | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_direction(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("direction"), str):
            data = {**data, "direction": SwapDirection.parse(data["direction"])}
        return data

    @model_validator(mode="after")
    def _validate_amount(self) -> QuoteRequestModel:
        if (self.exact_input is None) == (self.exact_output is None):
            raise ValueError("exactly one of exact_input / exact_output is required")
        amount = self.exact_input if self.exact_input is not None else self.exact_output
        if amount < 0:
            raise ValueError("amount must be non-negative")
        return self

    def to_request(self) -> SwapRequest:
        if self.exact_input is not None:
            return SwapRequest.exact_input(
                self.direction, self.exact_input, self.price_limit_x96
            )
        return SwapRequest.exact_output(
            self.direction, self.exact_output, self.price_limit_x96
        )
