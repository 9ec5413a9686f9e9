from decimal import Decimal

import pytest

from clmm_quoter.core.utils.units import from_erc20_raw, parse_raw_amount, to_erc20_raw


def test_to_erc20_raw_rounds_down():
    assert to_erc20_raw("1.5", 6) == 1_500_000
    assert to_erc20_raw("0.0000001", 6) == 0
    assert to_erc20_raw(2, 18) == 2 * 10**18
    with pytest.raises(ValueError):
        to_erc20_raw("-1", 6)
    with pytest.raises(ValueError):
        to_erc20_raw("abc", 6)


def test_from_erc20_raw():
    assert from_erc20_raw(1_500_000, 6) == Decimal("1.5")


def test_parse_raw_amount_forms():
    assert parse_raw_amount("1_000") == 1000
    assert parse_raw_amount("0x10") == 16
    assert parse_raw_amount("1e18") == 10**18
    assert parse_raw_amount(7) == 7
    with pytest.raises(ValueError):
        parse_raw_amount("1.5")
    with pytest.raises(ValueError):
        parse_raw_amount("-5")
