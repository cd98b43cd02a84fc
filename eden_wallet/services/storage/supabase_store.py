"""
Supabase Remote Storage Implementation

DESIGN DECISION: Supabase (PostgREST over HTTPS) is the remote tier because:
1. Both users can reach the same data from any device
2. Row-level security can pin all rows to the shared owner id
3. The anon key is safe to ship in a client

TRADEOFFS:
- No per-user auth: every row carries the same owner id
- No cross-table transactions (the normalized layout replaces rows with
  delete-then-insert)
- Network latency is whatever the HTTP client enforces

The supabase client is synchronous, so calls run in a worker thread to keep
the event loop responsive. Reads and idempotent writes are retried with
tenacity; inserts without an explicit id are not, since a retry after a lost
response would duplicate the row.
"""

import asyncio
from typing import Any, Callable, Optional

import structlog
from supabase import Client, create_client
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eden_wallet.config import DEFAULT_OWNER_ID, RemoteConfig, SupabaseSettings, get_settings
from eden_wallet.models import (
    AccountLabel,
    Ledger,
    SettingsValidationError,
    Transaction,
    TransactionDraft,
    WorkspaceSettings,
)
from eden_wallet.services.storage.interface import (
    RemoteNotConfiguredError,
    RemoteStoreError,
    RemoteStoreInterface,
)


logger = structlog.get_logger(__name__)


# Columns written for a transaction row (user_id added per request)
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "amount",
    "spending_category",
    "sub_category",
    "account_type",
    "remarks",
    "ledger",
]

SCHEMA_SQL = """-- TRANSACTIONS
CREATE TABLE transactions (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  date DATE NOT NULL,
  amount NUMERIC(14, 2) NOT NULL,
  spending_category TEXT NOT NULL,
  sub_category TEXT NOT NULL DEFAULT '',
  account_type TEXT NOT NULL,
  remarks TEXT NOT NULL DEFAULT '',
  ledger TEXT NOT NULL,
  user_id UUID NOT NULL,
  created_at TIMESTAMPTZ DEFAULT now()
);

-- ONE SETTINGS DOCUMENT PER (OWNER, LEDGER)
CREATE TABLE workspace_settings (
  user_id UUID NOT NULL,
  ledger TEXT NOT NULL,
  settings JSONB NOT NULL,
  UNIQUE (user_id, ledger)
);

-- NORMALIZED LAYOUT (optional, SUPABASE_SETTINGS_LAYOUT=normalized)
CREATE TABLE categories (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  ledger TEXT NOT NULL,
  name TEXT NOT NULL,
  sub_categories TEXT[] NOT NULL,
  position INTEGER NOT NULL DEFAULT 0,
  user_id UUID NOT NULL
);

CREATE TABLE account_labels (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  ledger TEXT NOT NULL,
  key TEXT NOT NULL,
  label TEXT NOT NULL,
  color TEXT NOT NULL,
  description TEXT NOT NULL DEFAULT '',
  is_default BOOLEAN NOT NULL DEFAULT false,
  position INTEGER NOT NULL DEFAULT 0,
  user_id UUID NOT NULL
);
"""


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Creates the underlying client lazily so an app can start offline.
    """

    def __init__(
        self,
        config: RemoteConfig,
        client_factory: Callable[[str, str], Client] = create_client,
    ):
        self._config = config
        self._client_factory = client_factory
        self._client: Optional[Client] = None

    @property
    def config(self) -> RemoteConfig:
        return self._config

    def connect(self) -> Client:
        """Create the supabase client on first use."""
        if not self._config.is_configured:
            raise RemoteNotConfiguredError("Supabase URL and key are not configured")
        if self._client is None:
            try:
                self._client = self._client_factory(self._config.url, self._config.key)
            except Exception as e:
                raise RemoteStoreError(f"Failed to create Supabase client: {e}")
        return self._client

    def table(self, name: str) -> Any:
        return self.connect().table(name)


class SupabaseRemoteStore(RemoteStoreInterface):
    """
    Supabase implementation of the remote tier.

    Settings are stored either as one JSON document per (owner, ledger)
    ("document" layout) or spread over the categories and account_labels
    tables ("normalized" layout).
    """

    def __init__(
        self,
        client: SupabaseClient,
        owner_id: str = DEFAULT_OWNER_ID,
        table_settings: Optional[SupabaseSettings] = None,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
    ):
        self._client = client
        self._owner_id = owner_id
        self._tables = table_settings or get_settings().supabase
        self._retry_attempts = retry_attempts
        self._retry_backoff = retry_backoff

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def settings_layout(self) -> str:
        return self._tables.settings_layout

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    async def _execute(self, operation: str, build: Callable[[], Any]) -> Any:
        """
        Build and execute one PostgREST request off the event loop.

        Returns the response object; any failure becomes RemoteStoreError.
        """
        def run() -> Any:
            return build().execute()

        try:
            return await asyncio.to_thread(run)
        except (RemoteStoreError, RemoteNotConfiguredError):
            raise
        except Exception as e:
            raise RemoteStoreError(f"Supabase {operation} failed: {e}") from e

    async def _execute_with_retry(self, operation: str, build: Callable[[], Any]) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_backoff, min=0, max=10),
            retry=retry_if_exception_type(RemoteStoreError),
            reraise=True,
        ):
            with attempt:
                return await self._execute(operation, build)

    def _scoped(self, query: Any, ledger: Ledger) -> Any:
        return query.eq("user_id", self._owner_id).eq("ledger", ledger.value)

    @staticmethod
    def _rows(response: Any) -> list[dict]:
        data = getattr(response, "data", None) if response is not None else None
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    def _transaction_row(
        self,
        draft: TransactionDraft,
        ledger: Ledger,
        transaction_id: Optional[str],
    ) -> dict:
        row = draft.model_dump(mode="json")
        row["ledger"] = ledger.value
        row["user_id"] = self._owner_id
        if transaction_id is not None:
            row["id"] = transaction_id
        return row

    def _row_to_transaction(self, row: dict, ledger: Ledger) -> Transaction:
        data = {k: row.get(k) for k in TRANSACTION_COLUMNS}
        data["ledger"] = ledger
        return Transaction.model_validate(data)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self, ledger: Ledger) -> list[Transaction]:
        """List a ledger's transactions, newest date first."""
        table = self._tables.transactions_table
        response = await self._execute_with_retry(
            "list transactions",
            lambda: self._scoped(self._client.table(table).select("*"), ledger)
            .order("date", desc=True),
        )

        transactions = []
        for row in self._rows(response):
            try:
                transactions.append(self._row_to_transaction(row, ledger))
            except Exception as e:
                # Skip malformed rows rather than losing the whole list
                logger.warning("remote_row_skipped", ledger=ledger.value, id=row.get("id"), error=str(e))
        return transactions

    async def insert_transaction(
        self,
        draft: TransactionDraft,
        ledger: Ledger,
        transaction_id: Optional[str] = None,
    ) -> Optional[Transaction]:
        """Insert one transaction; only fixed-id inserts are retried."""
        table = self._tables.transactions_table
        row = self._transaction_row(draft, ledger, transaction_id)

        if transaction_id is None:
            response = await self._execute(
                "insert transaction",
                lambda: self._client.table(table).insert([row]),
            )
        else:
            # Fixed id: upsert so a re-push after a lost response is harmless
            response = await self._execute_with_retry(
                "insert transaction",
                lambda: self._client.table(table).upsert([row], on_conflict="id"),
            )

        rows = self._rows(response)
        if not rows:
            return None
        try:
            return self._row_to_transaction(rows[0], ledger)
        except Exception:
            # Row is stored; only the echoed copy is lost
            return None

    async def delete_transaction(self, transaction_id: str, ledger: Ledger) -> bool:
        """Delete one of the owner's transactions by id."""
        table = self._tables.transactions_table
        response = await self._execute_with_retry(
            "delete transaction",
            lambda: self._client.table(table)
            .delete()
            .eq("id", transaction_id)
            .eq("user_id", self._owner_id),
        )
        return bool(self._rows(response))

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def fetch_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        """Fetch a ledger's settings in the configured layout."""
        if self.settings_layout == "normalized":
            return await self._fetch_normalized_settings(ledger)

        table = self._tables.settings_table
        response = await self._execute_with_retry(
            "fetch settings",
            lambda: self._scoped(self._client.table(table).select("settings"), ledger)
            .limit(1),
        )
        rows = self._rows(response)
        if not rows or rows[0].get("settings") is None:
            return None
        try:
            return WorkspaceSettings.from_document(rows[0]["settings"])
        except SettingsValidationError as e:
            raise RemoteStoreError(f"Remote settings for {ledger.value} are invalid: {e}") from e

    async def upsert_settings(self, settings: WorkspaceSettings, ledger: Ledger) -> None:
        """Insert or replace a ledger's settings in the configured layout."""
        if self.settings_layout == "normalized":
            await self._replace_normalized_settings(settings, ledger)
            return

        table = self._tables.settings_table
        row = {
            "user_id": self._owner_id,
            "ledger": ledger.value,
            "settings": settings.to_document(),
        }
        await self._execute_with_retry(
            "upsert settings",
            lambda: self._client.table(table).upsert(row, on_conflict="user_id,ledger"),
        )

    async def _fetch_normalized_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        categories_table = self._tables.categories_table
        labels_table = self._tables.labels_table

        category_rows = self._rows(await self._execute_with_retry(
            "fetch categories",
            lambda: self._scoped(
                self._client.table(categories_table).select("name, sub_categories"),
                ledger,
            ).order("position"),
        ))
        label_rows = self._rows(await self._execute_with_retry(
            "fetch account labels",
            lambda: self._scoped(
                self._client.table(labels_table).select("*"),
                ledger,
            ).order("position"),
        ))

        if not label_rows:
            # Settings cannot exist without at least one label
            return None

        try:
            labels = {
                row["key"]: AccountLabel(
                    label=row["label"],
                    color=row.get("color") or "slate",
                    description=row.get("description") or "",
                )
                for row in label_rows
            }
            default = next(
                (row["key"] for row in label_rows if row.get("is_default")),
                next(iter(labels)),
            )
            return WorkspaceSettings(
                categories={
                    row["name"]: list(row.get("sub_categories") or [])
                    for row in category_rows
                },
                account_configs=labels,
                default_account_type=default,
            )
        except Exception as e:
            raise RemoteStoreError(f"Remote settings rows for {ledger.value} are invalid: {e}") from e

    async def _replace_normalized_settings(self, settings: WorkspaceSettings, ledger: Ledger) -> None:
        categories_table = self._tables.categories_table
        labels_table = self._tables.labels_table

        category_rows = [
            {
                "user_id": self._owner_id,
                "ledger": ledger.value,
                "name": name,
                "sub_categories": subs,
                "position": position,
            }
            for position, (name, subs) in enumerate(settings.categories.items())
        ]
        label_rows = [
            {
                "user_id": self._owner_id,
                "ledger": ledger.value,
                "key": key,
                "label": label.label,
                "color": label.color,
                "description": label.description,
                "is_default": key == settings.default_account_type,
                "position": position,
            }
            for position, (key, label) in enumerate(settings.account_configs.items())
        ]

        await self._execute_with_retry(
            "clear categories",
            lambda: self._scoped(self._client.table(categories_table).delete(), ledger),
        )
        if category_rows:
            await self._execute_with_retry(
                "insert categories",
                lambda: self._client.table(categories_table).insert(category_rows),
            )
        await self._execute_with_retry(
            "clear account labels",
            lambda: self._scoped(self._client.table(labels_table).delete(), ledger),
        )
        await self._execute_with_retry(
            "insert account labels",
            lambda: self._client.table(labels_table).insert(label_rows),
        )

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def ping(self) -> None:
        """Cheapest query that proves the transactions table is reachable."""
        table = self._tables.transactions_table
        await self._execute(
            "connection test",
            lambda: self._client.table(table).select("id").limit(1),
        )
