from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
from loguru import logger

from clmm_quoter.adapters.pool_state_adapter.adapter import PoolStateAdapter
from clmm_quoter.core.config import load_config
from clmm_quoter.core.errors import QuoteError
from clmm_quoter.core.models import PoolSnapshotModel
from clmm_quoter.core.quoter import quote_swap
from clmm_quoter.core.snapshot import PoolSnapshot
from clmm_quoter.core.types import QuoteResult, SwapDirection, SwapRequest
from clmm_quoter.core.utils.units import from_erc20_raw, parse_raw_amount, to_erc20_raw
from clmm_quoter.core.utils.uniswap_v3_math import (
    price_to_sqrt_price_x96,
    sqrt_price_x96_to_price,
)

_DIRECTIONS = ["zero-for-one", "one-for-zero"]


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _fail(error: str, details: Any) -> None:
    _echo_json({"ok": False, "error": error, "details": details})
    sys.exit(1)


def _quote_error_details(exc: QuoteError) -> dict[str, Any]:
    return {
        "message": str(exc),
        "tick": exc.tick,
        "sqrt_price_x96": None if exc.sqrt_price_x96 is None else str(exc.sqrt_price_x96),
    }


def _amount(value: str, decimals: int | None) -> int:
    if decimals is None:
        return parse_raw_amount(value)
    return to_erc20_raw(value, decimals)


def _build_request(
    direction: str,
    exact_input: str | None,
    exact_output: str | None,
    price_limit: str | None,
    price_limit_price: str | None,
    decimals: int | None,
    token_decimals: tuple[int, int] | None,
) -> SwapRequest:
    if (exact_input is None) == (exact_output is None):
        raise click.UsageError("Pass exactly one of --exact-input / --exact-output")
    if price_limit is not None and price_limit_price is not None:
        raise click.UsageError("Pass at most one of --price-limit / --price-limit-price")
    limit = None if price_limit is None else parse_raw_amount(price_limit)
    if price_limit_price is not None:
        if token_decimals is None:
            raise click.UsageError("--price-limit-price needs --token-decimals")
        d0, d1 = token_decimals
        limit = price_to_sqrt_price_x96(float(price_limit_price), d0, d1)
    swap_direction = SwapDirection.parse(direction)
    if exact_input is not None:
        return SwapRequest.exact_input(
            swap_direction, _amount(exact_input, decimals), limit
        )
    return SwapRequest.exact_output(
        swap_direction, _amount(exact_output, decimals), limit
    )


def _payload(
    snapshot: PoolSnapshot,
    result: QuoteResult,
    *,
    trace: bool,
    token_decimals: tuple[int, int] | None,
) -> dict[str, Any]:
    out: dict[str, Any] = {
        "pool": {
            "token0": snapshot.pool.token0,
            "token1": snapshot.pool.token1,
            "fee": snapshot.pool.fee,
            "tick_spacing": snapshot.pool.tick_spacing,
        },
        "block_number": snapshot.block_number,
        "sqrt_price_x96_before": str(snapshot.sqrt_price_x96),
        "tick_before": snapshot.tick,
        **result.to_dict(include_steps=trace),
    }
    if token_decimals is not None:
        d0, d1 = token_decimals
        out["price_before"] = sqrt_price_x96_to_price(snapshot.sqrt_price_x96, d0, d1)
        out["price_after"] = sqrt_price_x96_to_price(result.sqrt_price_x96, d0, d1)
        d_in, d_out = (d0, d1) if result.request.direction.zero_for_one else (d1, d0)
        out["amount_in_tokens"] = str(from_erc20_raw(result.amount_in, d_in))
        out["amount_out_tokens"] = str(from_erc20_raw(result.amount_out, d_out))
    return out


def _run_quote(
    snapshot: PoolSnapshot,
    request: SwapRequest,
    *,
    max_steps: int | None,
    trace: bool,
    token_decimals: tuple[int, int] | None,
) -> None:
    try:
        result = quote_swap(snapshot.pool, request, snapshot, max_steps=max_steps)
    except QuoteError as exc:
        _fail(exc.kind, _quote_error_details(exc))
        return
    _echo_json(
        {
            "ok": True,
            "result": _payload(
                snapshot, result, trace=trace, token_decimals=token_decimals
            ),
        }
    )


def _amount_options(fn):
    options = [
        click.option(
            "--direction",
            type=click.Choice(_DIRECTIONS, case_sensitive=False),
            required=True,
            help="zero-for-one sells token0 for token1; one-for-zero the reverse.",
        ),
        click.option("--exact-input", default=None, help="Amount of the input token to sell."),
        click.option("--exact-output", default=None, help="Amount of the output token to buy."),
        click.option(
            "--price-limit",
            default=None,
            help="Q64.96 sqrt price the walk must not pass (default: no limit).",
        ),
        click.option(
            "--price-limit-price",
            default=None,
            help="Limit as a token1-per-token0 price; needs --token-decimals.",
        ),
        click.option(
            "--decimals",
            type=int,
            default=None,
            help="Read the amount in token units with this many decimals.",
        ),
        click.option(
            "--token-decimals",
            type=(int, int),
            default=None,
            help="token0/token1 decimals; adds human-readable prices to the output.",
        ),
        click.option("--max-steps", type=int, default=None, help="Override quoter.max_steps."),
        click.option("--trace/--no-trace", default=False, help="Include every swap step."),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


@click.group(name="clmm-quoter", help="Read-only swap quotes for concentrated-liquidity pools.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config JSON (default: config.json at the project root).",
)
def cli(log_level: str, config_path: Path | None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())
    if config_path is not None:
        load_config(config_path, require_exists=True)


@cli.command(name="quote", help="Quote a swap against a snapshot JSON file.")
@click.argument(
    "snapshot_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@_amount_options
def quote_cmd(
    snapshot_path: Path,
    direction: str,
    exact_input: str | None,
    exact_output: str | None,
    price_limit: str | None,
    price_limit_price: str | None,
    decimals: int | None,
    token_decimals: tuple[int, int] | None,
    max_steps: int | None,
    trace: bool,
) -> None:
    try:
        snapshot = PoolSnapshotModel.model_validate_json(
            snapshot_path.read_text()
        ).to_snapshot()
        request = _build_request(
            direction,
            exact_input,
            exact_output,
            price_limit,
            price_limit_price,
            decimals,
            token_decimals,
        )
    except QuoteError as exc:
        _fail(exc.kind, _quote_error_details(exc))
        return
    except ValueError as exc:
        _fail("invalid_input", str(exc))
        return

    _run_quote(
        snapshot,
        request,
        max_steps=max_steps,
        trace=trace,
        token_decimals=token_decimals,
    )


@cli.command(name="onchain", help="Snapshot a live pool over RPC and quote a swap against it.")
@click.option("--chain-id", required=True, help="Chain id or code (e.g. 1, base).")
@click.option("--pool", "pool_address", required=True, help="Pool contract address.")
@click.option("--block", type=int, default=None, help="Block number (default: latest).")
@click.option("--bitmap-word-radius", type=int, default=None)
@_amount_options
def onchain_cmd(
    chain_id: str,
    pool_address: str,
    block: int | None,
    bitmap_word_radius: int | None,
    direction: str,
    exact_input: str | None,
    exact_output: str | None,
    price_limit: str | None,
    price_limit_price: str | None,
    decimals: int | None,
    token_decimals: tuple[int, int] | None,
    max_steps: int | None,
    trace: bool,
) -> None:
    config: dict[str, Any] = {"chain_id": chain_id}
    if bitmap_word_radius is not None:
        config["bitmap_word_radius"] = bitmap_word_radius
    try:
        request = _build_request(
            direction,
            exact_input,
            exact_output,
            price_limit,
            price_limit_price,
            decimals,
            token_decimals,
        )
        adapter = PoolStateAdapter(config)
    except ValueError as exc:
        _fail("invalid_input", str(exc))
        return

    try:
        snapshot = asyncio.run(
            adapter.fetch_snapshot(pool_address, block_identifier=block)
        )
    except QuoteError as exc:
        _fail(exc.kind, _quote_error_details(exc))
        return
    except Exception as exc:  # RPC and decoding failures surface as a payload
        _fail("snapshot_failed", str(exc))
        return

    _run_quote(
        snapshot,
        request,
        max_steps=max_steps,
        trace=trace,
        token_decimals=token_decimals,
    )


@cli.command(name="snapshot", help="Write a live pool's state to a snapshot JSON file.")
@click.option("--chain-id", required=True, help="Chain id or code (e.g. 1, base).")
@click.option("--pool", "pool_address", required=True, help="Pool contract address.")
@click.option("--block", type=int, default=None, help="Block number (default: latest).")
@click.option("--bitmap-word-radius", type=int, default=None)
@click.option(
    "--out",
    "out_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write here instead of stdout.",
)
def snapshot_cmd(
    chain_id: str,
    pool_address: str,
    block: int | None,
    bitmap_word_radius: int | None,
    out_path: Path | None,
) -> None:
    config: dict[str, Any] = {"chain_id": chain_id}
    if bitmap_word_radius is not None:
        config["bitmap_word_radius"] = bitmap_word_radius
    try:
        adapter = PoolStateAdapter(config)
    except ValueError as exc:
        _fail("invalid_input", str(exc))
        return

    ok, result = asyncio.run(
        adapter.get_snapshot(pool_address, block_identifier=block)
    )
    if not ok:
        _fail("snapshot_failed", result)
        return

    data = PoolSnapshotModel.from_snapshot(result).to_json_dict()
    if out_path is None:
        _echo_json(data)
        return
    out_path.write_text(json.dumps(data, indent=2))
    _echo_json({"ok": True, "result": {"path": str(out_path), "block_number": result.block_number}})


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
