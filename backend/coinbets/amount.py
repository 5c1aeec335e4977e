"""Stake amounts: a flat number of coins or a fraction of the current balance.

Text forms:
- "25"   -> FlatAmount(25)
- "50%"  -> FractionAmount(0.5)
- "100%" -> FractionAmount(1), rendered as "All in"
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from coinbets.exceptions import InsufficientFundsError, StakeParseError


class FlatAmount(BaseModel):
    """Absolute number of coins."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(ge=0)

    def __str__(self) -> str:
        return str(self.value)


class FractionAmount(BaseModel):
    """Share of the staking account's balance."""

    model_config = ConfigDict(frozen=True)

    fraction: Decimal = Field(ge=0, le=1)

    @property
    def is_all_in(self) -> bool:
        return self.fraction == 1

    def __str__(self) -> str:
        if self.is_all_in:
            return "All in"
        return f"{(self.fraction * 100).normalize():f}%"


Amount = Union[FlatAmount, FractionAmount]

# ASCII digits only: int() and Decimal() also take "1_000" and non-Latin digits
FLAT_PATTERN = re.compile(r"[0-9]+")
PERCENT_PATTERN = re.compile(r"[0-9]*\.?[0-9]+")


def parse_amount(text: str) -> Amount:
    """Parse user text; a trailing '%' selects a fraction of the balance."""
    cleaned = text.strip()
    try:
        if cleaned.endswith("%"):
            number = cleaned[:-1].strip()
            if not PERCENT_PATTERN.fullmatch(number):
                raise ValueError(f"Not a percentage: {number!r}")
            return FractionAmount(fraction=Decimal(number) / 100)
        if not FLAT_PATTERN.fullmatch(cleaned):
            raise ValueError(f"Not a coin amount: {cleaned!r}")
        return FlatAmount(value=int(cleaned))
    except (InvalidOperation, ValueError) as e:
        # pydantic's ValidationError is a ValueError: range failures land here too
        raise StakeParseError(f"Invalid stake amount: {text!r}") from e


def to_amount(value: Amount | str | int | float | Decimal) -> Amount:
    """Coerce caller input into an Amount.

    Integers are flat coin amounts, floats and Decimals are fractions in [0, 1]
    and strings go through parse_amount().
    """
    if isinstance(value, (FlatAmount, FractionAmount)):
        return value
    if isinstance(value, str):
        return parse_amount(value)
    if isinstance(value, bool):
        raise TypeError("Stake amount cannot be a boolean")

    try:
        if isinstance(value, int):
            return FlatAmount(value=value)
        return FractionAmount(fraction=Decimal(str(value)))
    except (InvalidOperation, ValidationError) as e:
        raise StakeParseError(f"Invalid stake amount: {value!r}") from e


def resolve_amount(balance: int, amount: Amount) -> int:
    """Turn a stake specification into the number of coins to escrow."""
    if isinstance(amount, FlatAmount):
        if amount.value > balance:
            raise InsufficientFundsError(
                f"Cannot stake {amount.value} coins with a balance of {balance}"
            )
        return amount.value

    # Decimal keeps ceil() exact, e.g. 100 * 0.07 must give 7, not 8
    value = math.ceil(balance * amount.fraction)
    if value == 0:
        raise InsufficientFundsError(
            f"{amount} of a balance of {balance} rounds to nothing"
        )
    return value
