"""
Configuration Management for Eden Wallet

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The remote tier is optional, so its settings are optional too. Whether the
remote is actually usable is decided by resolve_remote_config(), not by
whether the environment variables happen to be set.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_OWNER_ID = "00000000-0000-0000-0000-000000000000"


class SupabaseSettings(BaseSettings):
    """Supabase (remote tier) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (must be https)"
    )
    anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anon/public API key"
    )

    # Table names within the project
    transactions_table: str = Field(
        default="transactions",
        description="Table holding one row per transaction"
    )
    settings_table: str = Field(
        default="workspace_settings",
        description="Table holding one settings document per (owner, ledger)"
    )
    categories_table: str = Field(
        default="categories",
        description="Normalized categories table"
    )
    labels_table: str = Field(
        default="account_labels",
        description="Normalized account labels table"
    )
    settings_layout: str = Field(
        default="document",
        pattern="^(document|normalized)$",
        description="How workspace settings are stored remotely"
    )

    @field_validator("url", "anon_key")
    @classmethod
    def strip_blank(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class StoreSettings(BaseSettings):
    """Local store and facade configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    owner_id: str = Field(
        default=DEFAULT_OWNER_ID,
        min_length=1,
        description="Shared owner id that scopes every remote row"
    )
    local_namespace: str = Field(
        default="eden_wallet_data",
        min_length=1,
        description="Prefix for every local cache key"
    )
    data_dir: Path = Field(
        default=Path.home() / ".eden_wallet",
        description="Directory for the local JSON cache file"
    )
    cache_filename: str = Field(
        default="cache.json",
        description="Name of the local JSON cache file"
    )
    remote_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per remote call before falling back"
    )
    recent_events_limit: int = Field(
        default=200,
        ge=1,
        description="How many storage events to keep in memory"
    )

    @property
    def cache_path(self) -> Path:
        return self.data_dir / self.cache_filename


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings groups load.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for every group that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("supabase", "store", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
