"""
Shared fixtures for Eden Wallet tests.

No test talks to a real Supabase project: the remote tier is replaced by
InMemoryRemote (a working backend) or by flipping its `fail` switch.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from eden_wallet.audit import StorageAuditLog
from eden_wallet.models import (
    AccountLabel,
    Ledger,
    Transaction,
    TransactionDraft,
    WorkspaceSettings,
)
from eden_wallet.services.storage import (
    InMemoryKeyValueStore,
    LocalCache,
    RemoteStoreError,
    RemoteStoreInterface,
)
from eden_wallet.store import DataStorage


class InMemoryRemote(RemoteStoreInterface):
    """Remote tier kept in dicts; set `fail = True` to simulate an outage."""

    def __init__(self):
        self.rows: dict[Ledger, list[Transaction]] = {ledger: [] for ledger in Ledger}
        self.settings: dict[Ledger, WorkspaceSettings] = {}
        self.fail = False
        self.calls: list[str] = []
        self._next_id = 1

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail:
            raise RemoteStoreError(f"{operation}: connection refused")

    async def list_transactions(self, ledger: Ledger) -> list[Transaction]:
        self._check("list_transactions")
        return sorted(self.rows[ledger], key=lambda t: t.date, reverse=True)

    async def insert_transaction(
        self,
        draft: TransactionDraft,
        ledger: Ledger,
        transaction_id: Optional[str] = None,
    ) -> Optional[Transaction]:
        self._check("insert_transaction")
        if transaction_id is None:
            transaction_id = f"remote-{self._next_id}"
            self._next_id += 1
        self.rows[ledger] = [t for t in self.rows[ledger] if t.id != transaction_id]
        stored = draft.with_id(transaction_id, ledger)
        self.rows[ledger].append(stored)
        return stored

    async def delete_transaction(self, transaction_id: str, ledger: Ledger) -> bool:
        self._check("delete_transaction")
        before = len(self.rows[ledger])
        self.rows[ledger] = [t for t in self.rows[ledger] if t.id != transaction_id]
        return len(self.rows[ledger]) < before

    async def fetch_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        self._check("fetch_settings")
        return self.settings.get(ledger)

    async def upsert_settings(self, settings: WorkspaceSettings, ledger: Ledger) -> None:
        self._check("upsert_settings")
        self.settings[ledger] = settings

    async def ping(self) -> None:
        self._check("ping")


@pytest.fixture(autouse=True)
def no_remote_env(monkeypatch):
    """Keep a developer's real Supabase credentials out of the tests."""
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SETTINGS_LAYOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit():
    return StorageAuditLog()


@pytest.fixture
def local_cache(kv_store, audit):
    return LocalCache(kv_store, namespace="test", audit=audit)


@pytest.fixture
def remote():
    return InMemoryRemote()


@pytest.fixture
def storage(local_cache, remote, audit):
    """Facade with a working remote."""
    return DataStorage(local_cache, remote=remote, audit=audit)


@pytest.fixture
def offline_storage(local_cache, audit):
    """Facade with no remote configured."""
    return DataStorage(local_cache, audit=audit)


@pytest.fixture
def lunch_draft():
    return TransactionDraft(
        date=date(2024, 1, 5),
        amount=Decimal("15.50"),
        spending_category="Food",
        sub_category="Hawker",
        account_type="OWN_EXPENSE",
        remarks="lunch",
    )


@pytest.fixture
def single_label_settings():
    return WorkspaceSettings(
        categories={"Food": ["Hawker"]},
        account_configs={"A": AccountLabel(label="A", color="blue", description="")},
        default_account_type="A",
    )


def make_draft(day: int = 1, amount: str = "10.00", **overrides) -> TransactionDraft:
    fields = {
        "date": date(2024, 1, day),
        "amount": Decimal(amount),
        "spending_category": "Food",
        "sub_category": "",
        "account_type": "OWN_EXPENSE",
        "remarks": "",
    }
    fields.update(overrides)
    return TransactionDraft(**fields)


@pytest.fixture
def draft_factory():
    return make_draft
