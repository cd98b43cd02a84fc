"""Services package."""

from eden_wallet.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalCache,
    RemoteStoreError,
    RemoteStoreInterface,
    StorageError,
    SupabaseClient,
    SupabaseRemoteStore,
    TwoTierCache,
)

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalCache",
    "RemoteStoreError",
    "RemoteStoreInterface",
    "StorageError",
    "SupabaseClient",
    "SupabaseRemoteStore",
    "TwoTierCache",
]
