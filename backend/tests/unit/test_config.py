"""Unit Tests: Settings loading from environment and config.yaml."""

import logging

import pytest
from pydantic import ValidationError

from coinbets.config import Settings
from coinbets.observability import initialize_logfire


def test_defaults(tmp_path):
    settings = Settings(data_dir=tmp_path)

    assert settings.data_dir == tmp_path.resolve()
    assert settings.ledger.starting_balance == 100
    assert settings.ledger.income_amount == 10
    assert settings.resolved_database_url == f"sqlite:///{tmp_path.resolve() / 'coinbets.db'}"


def test_explicit_database_url_wins(tmp_path):
    settings = Settings(data_dir=tmp_path, database_url="sqlite:///other.db")
    assert settings.resolved_database_url == "sqlite:///other.db"


def test_nested_environment_variables(tmp_path, monkeypatch):
    monkeypatch.setenv("COINBETS_LEDGER__INCOME_AMOUNT", "25")
    settings = Settings(data_dir=tmp_path)
    assert settings.ledger.income_amount == 25


def test_yaml_config_merges_sections(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "ledger:\n  starting_balance: 250\nstore:\n  echo_sql: true\n",
        encoding="utf-8",
    )
    settings = Settings(data_dir=tmp_path)
    settings.load_yaml_config()

    assert settings.ledger.starting_balance == 250
    assert settings.ledger.income_amount == 10
    assert settings.store.echo_sql is True


def test_missing_yaml_config_keeps_defaults(tmp_path):
    settings = Settings(data_dir=tmp_path)
    settings.load_yaml_config()
    assert settings.ledger.starting_balance == 100


def test_log_level_is_validated(tmp_path):
    assert Settings(data_dir=tmp_path, log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(data_dir=tmp_path, log_level="chatty")


def test_logfire_disabled_without_token(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="coinbets.observability"):
        initialize_logfire(Settings(data_dir=tmp_path, logfire_token=""))
    assert "observability disabled" in caplog.text
