"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class LedgerConfig(BaseModel):
    """Coin amounts used by administrative operations."""

    starting_balance: int = Field(default=100, ge=0)
    income_amount: int = Field(default=10, ge=0)


class StoreConfig(BaseModel):
    """Ledger store connection parameters."""

    busy_timeout_seconds: float = 30.0
    echo_sql: bool = False


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")
    database_url: str = ""  # Empty: SQLite file inside data_dir

    # Logging
    log_level: str = "INFO"
    logfire_token: str = ""

    # Nested configuration sections
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    model_config = SettingsConfigDict(
        env_prefix="COINBETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def resolved_database_url(self) -> str:
        """Database URL, defaulting to data_dir/coinbets.db."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'coinbets.db'}"

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in ["ledger", "store"]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)

                    section_dict = section.model_dump()
                    section_dict.update(yaml_config[section_name])

                    setattr(self, section_name, section.__class__(**section_dict))

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
