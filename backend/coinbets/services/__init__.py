"""
Ledger services.

- AccountService: account creation, balance deltas, reset and income
- BetEngine: bet lifecycle, staking and settlement
"""

from coinbets.services.account_service import AccountService
from coinbets.services.bet_engine import BetEngine

__all__ = ["AccountService", "BetEngine"]
