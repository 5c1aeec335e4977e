"""Wires the store and services of one ledger together."""

import logging
from dataclasses import dataclass

from coinbets.config import Settings, get_settings
from coinbets.database.store import LedgerStore
from coinbets.services import AccountService, BetEngine

logger = logging.getLogger(__name__)


@dataclass
class Ledger:
    store: LedgerStore
    accounts: AccountService
    bets: BetEngine

    def close(self) -> None:
        self.store.dispose()


def open_ledger(settings: Settings | None = None) -> Ledger:
    """
    Open the configured ledger database.

    Creates missing tables, then starts the bet engine, which sweeps bets
    tombstoned during the previous run before any operation is accepted.
    """
    settings = settings or get_settings()
    store = LedgerStore.from_settings(settings)
    store.create_schema()

    accounts = AccountService(store)
    bets = BetEngine(store, accounts)

    logger.info(f"Opened ledger at {store.engine.url!r}")
    return Ledger(store=store, accounts=accounts, bets=bets)
