"""
Unit Tests: Stake amounts

Test cases:
- Text parsing (flat, percent, all in, malformed)
- Coercion of plain Python values
- Resolution against a balance
"""

from decimal import Decimal

import pytest

from coinbets.amount import (
    FlatAmount,
    FractionAmount,
    parse_amount,
    resolve_amount,
    to_amount,
)
from coinbets.exceptions import InsufficientFundsError, StakeParseError


def test_parse_flat_amount():
    assert parse_amount("25") == FlatAmount(value=25)
    assert parse_amount("  7 ") == FlatAmount(value=7)


def test_parse_percent_amount():
    amount = parse_amount(" 50% ")
    assert isinstance(amount, FractionAmount)
    assert amount.fraction == Decimal("0.5")
    assert str(amount) == "50%"


def test_parse_all_in():
    amount = parse_amount("100%")
    assert amount.is_all_in
    assert str(amount) == "All in"


def test_fractional_percent_renders_without_trailing_zeros():
    assert str(parse_amount("12.5%")) == "12.5%"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "abc",
        "5.5",
        "-3",
        "150%",
        "-1%",
        "%",
        "x%",
        "1_000",
        "5_0%",
        "٣",
        "٥٠%",
        "1e2",
        "NaN%",
        "Infinity%",
    ],
)
def test_parse_rejects_malformed_text(text):
    with pytest.raises(StakeParseError):
        parse_amount(text)


def test_to_amount_coerces_python_values():
    assert to_amount(30) == FlatAmount(value=30)
    assert to_amount(0.25) == FractionAmount(fraction=Decimal("0.25"))
    assert to_amount("10%") == FractionAmount(fraction=Decimal("0.1"))

    amount = FlatAmount(value=3)
    assert to_amount(amount) is amount


def test_to_amount_rejects_out_of_range_fraction():
    with pytest.raises(StakeParseError):
        to_amount(1.5)


def test_to_amount_rejects_booleans():
    with pytest.raises(TypeError):
        to_amount(True)


def test_resolve_flat_amount_within_balance():
    assert resolve_amount(100, FlatAmount(value=100)) == 100
    assert resolve_amount(100, FlatAmount(value=40)) == 40


def test_resolve_flat_amount_above_balance_is_rejected():
    with pytest.raises(InsufficientFundsError):
        resolve_amount(100, FlatAmount(value=101))


def test_resolve_all_in_stakes_whole_balance():
    assert resolve_amount(137, parse_amount("100%")) == 137


def test_resolve_fraction_rounds_up():
    assert resolve_amount(100, parse_amount("50%")) == 50
    assert resolve_amount(10, parse_amount("33%")) == 4
    assert resolve_amount(1, parse_amount("1%")) == 1


def test_resolve_fraction_is_exact_in_decimal():
    # 100 * 0.07 is 7.000000000000001 in binary floating point
    assert resolve_amount(100, parse_amount("7%")) == 7
    assert resolve_amount(100, to_amount(0.07)) == 7


def test_resolve_fraction_rounding_to_zero_is_rejected():
    with pytest.raises(InsufficientFundsError):
        resolve_amount(100, parse_amount("0%"))
    with pytest.raises(InsufficientFundsError):
        resolve_amount(0, parse_amount("50%"))
