"""Database models module."""

from coinbets.models.account import Account
from coinbets.models.bet import Bet, BetTombstone, Outcome, Wager

__all__ = [
    "Account",
    "Bet",
    "BetTombstone",
    "Outcome",
    "Wager",
]
