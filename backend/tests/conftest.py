"""Shared fixtures: a fresh SQLite ledger per test."""

import pytest

from coinbets.config import get_settings
from coinbets.database import LedgerStore
from coinbets.services import AccountService, BetEngine


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def store(database_url):
    """Create a ledger store with its schema in a temporary database."""
    store = LedgerStore(database_url)
    store.create_schema()
    yield store
    store.dispose()


@pytest.fixture
def accounts(store):
    return AccountService(store)


@pytest.fixture
def engine(store, accounts):
    return BetEngine(store, accounts)


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Point the settings singleton at a temporary data directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("COINBETS_DATA_DIR", str(data_dir))
    get_settings.cache_clear()
    yield data_dir
    get_settings.cache_clear()
