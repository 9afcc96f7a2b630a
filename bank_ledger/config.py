"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Saving account defaults, stamped on every saving account at opening
    saving_account_daily_interest: Decimal = Field(default=Decimal("0.0001"), ge=0)
    saving_account_debit_lock: timedelta = timedelta(days=1)

    # Per-account recent transaction window
    history_capacity: int = Field(default=10, ge=1)

    # Logging configuration
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
