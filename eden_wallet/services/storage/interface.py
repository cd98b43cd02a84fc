"""
Abstract Storage Interfaces

DESIGN DECISION: Both tiers sit behind small interfaces.
This allows us to:
1. Run fully offline with no remote at all
2. Swap Supabase for another backend without touching the facade
3. Use in-memory fakes for testing
4. Keep fallback policy in one place (TwoTierCache), not in every backend

Remote implementations RAISE on failure. Deciding to fall back is the
caller's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from eden_wallet.models import (
    Ledger,
    SettingsValidationError,
    Transaction,
    TransactionDraft,
    WorkspaceSettings,
)


class RemoteStoreInterface(ABC):
    """
    Abstract interface for the remote (cloud) tier.

    Every row is scoped by the owner id the implementation was built with
    and by ledger.
    """

    @abstractmethod
    async def list_transactions(self, ledger: Ledger) -> list[Transaction]:
        """
        List a ledger's transactions, newest date first.

        Raises:
            RemoteStoreError: If the query fails
        """
        pass

    @abstractmethod
    async def insert_transaction(
        self,
        draft: TransactionDraft,
        ledger: Ledger,
        transaction_id: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Insert one transaction.

        Args:
            draft: Confirmed transaction data
            ledger: Ledger to tag the row with
            transaction_id: Id to keep (used when pushing rows created
                offline); None lets the server assign one

        Returns:
            The stored row if the backend echoes it, else None

        Raises:
            RemoteStoreError: If the insert fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str, ledger: Ledger) -> bool:
        """
        Delete a transaction by id.

        Returns:
            True if a row was deleted

        Raises:
            RemoteStoreError: If the delete fails
        """
        pass

    @abstractmethod
    async def fetch_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        """
        Fetch a ledger's settings.

        Returns:
            The settings, or None if no row exists

        Raises:
            RemoteStoreError: If the query fails or the stored document is invalid
        """
        pass

    @abstractmethod
    async def upsert_settings(self, settings: WorkspaceSettings, ledger: Ledger) -> None:
        """
        Insert or replace a ledger's settings.

        Raises:
            RemoteStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def ping(self) -> None:
        """
        Run the cheapest possible query to prove the backend answers.

        Raises:
            RemoteStoreError: If it does not
        """
        pass


class KeyValueStore(ABC):
    """
    Abstract string key-value store for the local tier.

    Values are serialized JSON text. Implementations are synchronous:
    local reads and writes are expected to be effectively instant.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store text under a key.

        Raises:
            LocalStoreError: If the value could not be persisted
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        pass

    @abstractmethod
    def keys(self) -> Iterable[str]:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RemoteStoreError(StorageError):
    """The remote backend failed or returned something unusable."""
    pass


class RemoteNotConfiguredError(StorageError):
    """A remote operation was requested but no remote is configured."""
    pass


class LocalStoreError(StorageError):
    """The local key-value store could not be written."""
    pass


__all__ = [
    "KeyValueStore",
    "LocalStoreError",
    "RemoteNotConfiguredError",
    "RemoteStoreError",
    "RemoteStoreInterface",
    "SettingsValidationError",
    "StorageError",
]
