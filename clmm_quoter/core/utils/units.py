from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return Decimal(str(value).strip())


def to_erc20_raw(amount_tokens: str | int | float | Decimal, decimals: int) -> int:
    try:
        amt = _to_decimal(amount_tokens)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid token amount: {amount_tokens}") from exc
    if amt < 0:
        raise ValueError("Amount must be non-negative")
    scale = Decimal(10) ** int(decimals)
    return int((amt * scale).to_integral_value(rounding=ROUND_DOWN))


def from_erc20_raw(amount_raw: int, decimals: int) -> Decimal:
    return Decimal(int(amount_raw)) / (Decimal(10) ** int(decimals))


def parse_raw_amount(value: str | int) -> int:
    """Integer amount in base units; accepts ``1_000``, ``1e18`` and ``0x`` forms."""
    if isinstance(value, int) and not isinstance(value, bool):
        amount = value
    else:
        text = str(value).strip().replace("_", "")
        try:
            amount = int(text, 0)
        except ValueError:
            try:
                parsed = Decimal(text)
            except InvalidOperation as exc:
                raise ValueError(f"Invalid raw amount: {value}") from exc
            if parsed != parsed.to_integral_value():
                raise ValueError(f"Raw amount must be an integer: {value}")
            amount = int(parsed)
    if amount < 0:
        raise ValueError("Amount must be non-negative")
    return amount
