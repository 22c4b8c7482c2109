"""
Configuration Management for finledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Everything the engine needs from its environment (where the store lives,
which key the snapshot is kept under, how hard to retry a write) can be
seen in one place and is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Main ledger settings.

    Loads configuration from FINLEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level (includes not-found no-ops)"
    )

    # Persistence
    storage_path: Path = Field(
        default=Path.home() / ".finledger" / "store.json",
        description="Path of the JSON key-value store file"
    )
    storage_key: str = Field(
        default="finance_app_data_v2",
        min_length=1,
        description="Namespace the ledger snapshot is stored under"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed file write is attempted"
    )

    # Bootstrap
    default_account_name: str = Field(
        default="Cash / Wallet",
        min_length=1,
        description="Name of the account created on first-ever start"
    )

    # Audit trail
    audit_history_size: int = Field(
        default=500,
        ge=0,
        description="How many audit events are kept in memory"
    )

    @field_validator('storage_path')
    @classmethod
    def expand_storage_path(cls, v: Path) -> Path:
        """Expand ~ so the same value works from .env and the shell."""
        return v.expanduser()


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
