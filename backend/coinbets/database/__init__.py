"""
Database module initialization.
Exports the ledger store and the declarative base.
"""

from coinbets.database.base import Base
from coinbets.database.store import LedgerStore, create_ledger_engine

__all__ = [
    "Base",
    "LedgerStore",
    "create_ledger_engine",
]
