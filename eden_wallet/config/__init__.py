"""Configuration package."""

from eden_wallet.config.settings import (
    DEFAULT_OWNER_ID,
    AppSettings,
    Settings,
    StoreSettings,
    SupabaseSettings,
    get_settings,
    validate_all_settings,
)
from eden_wallet.config.remote import (
    ConfigSource,
    RemoteConfig,
    UserRemoteConfig,
    get_debug_config,
    is_placeholder,
    is_valid_key,
    is_valid_url,
    resolve_remote_config,
)

__all__ = [
    "DEFAULT_OWNER_ID",
    "AppSettings",
    "Settings",
    "StoreSettings",
    "SupabaseSettings",
    "get_settings",
    "validate_all_settings",
    # Remote resolution
    "ConfigSource",
    "RemoteConfig",
    "UserRemoteConfig",
    "get_debug_config",
    "is_placeholder",
    "is_valid_key",
    "is_valid_url",
    "resolve_remote_config",
]
