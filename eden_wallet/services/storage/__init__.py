"""
Storage Services Package

Two tiers behind small interfaces: a Supabase remote store and a local
key-value cache, coordinated by the TwoTierCache strategy.
"""

from eden_wallet.services.storage.interface import (
    KeyValueStore,
    LocalStoreError,
    RemoteNotConfiguredError,
    RemoteStoreError,
    RemoteStoreInterface,
    SettingsValidationError,
    StorageError,
)
from eden_wallet.services.storage.local import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    LocalCache,
)
from eden_wallet.services.storage.supabase_store import (
    SCHEMA_SQL,
    SupabaseClient,
    SupabaseRemoteStore,
)
from eden_wallet.services.storage.tiered import TwoTierCache

__all__ = [
    # Interfaces
    "KeyValueStore",
    "RemoteStoreInterface",
    # Exceptions
    "LocalStoreError",
    "RemoteNotConfiguredError",
    "RemoteStoreError",
    "SettingsValidationError",
    "StorageError",
    # Local tier
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "LocalCache",
    # Remote tier
    "SCHEMA_SQL",
    "SupabaseClient",
    "SupabaseRemoteStore",
    # Strategy
    "TwoTierCache",
]
