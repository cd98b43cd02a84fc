"""
Persistence Facade for Eden Wallet

The one object the UI talks to for transactions and workspace settings.

DESIGN DECISION: Local-first, remote-best-effort.
- The local cache is the durable source of truth for the session
- The remote tier (Supabase) is an optional sync layer
- No public read/write operation raises because a tier failed; callers
  get data (possibly stale) or a success flag, and `status` reports
  whether the store is running degraded

Policy decisions live in TwoTierCache; this module only says what each
operation reads and writes.

CONCURRENCY: every read-modify-write of a ledger's cache entries runs under
that ledger's asyncio.Lock, so concurrent callers cannot lose updates.
"""

import asyncio
from typing import Callable, Optional

import structlog

from eden_wallet.audit import StorageAuditLog, configure_logging
from eden_wallet.config import (
    ConfigSource,
    RemoteConfig,
    UserRemoteConfig,
    get_settings,
    is_valid_key,
    is_valid_url,
    resolve_remote_config,
)
from eden_wallet.models import (
    ConnectionCheck,
    Ledger,
    StorageEvent,
    StorageEventBuilder,
    StoreStatus,
    SyncReport,
    Tier,
    Transaction,
    TransactionDraft,
    WorkspaceSettings,
    default_workspace_settings,
)
from eden_wallet.services.storage import (
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalCache,
    RemoteStoreInterface,
    SupabaseClient,
    SupabaseRemoteStore,
    TwoTierCache,
)


logger = structlog.get_logger(__name__)

RemoteFactory = Callable[[RemoteConfig], RemoteStoreInterface]


class DataStorage:
    """
    Uniform async interface over transactions and workspace settings.

    Args:
        local: Typed local cache (always present)
        remote: A ready remote store; None runs local-only
        audit: Storage event log shared with the cache
        remote_factory: Builds a remote store from resolved configuration.
            When given, refresh_configuration() can enable, disable or
            swap the remote at runtime.
        runtime_url / runtime_key: Explicit credentials that take
            precedence over the environment and user-entered values
    """

    def __init__(
        self,
        local: LocalCache,
        remote: Optional[RemoteStoreInterface] = None,
        audit: Optional[StorageAuditLog] = None,
        remote_factory: Optional[RemoteFactory] = None,
        runtime_url: Optional[str] = None,
        runtime_key: Optional[str] = None,
    ):
        self._audit = audit or StorageAuditLog()
        self._local = local
        self._cache = TwoTierCache(remote, local, self._audit)
        self._remote_factory = remote_factory
        self._runtime_url = runtime_url
        self._runtime_key = runtime_key
        self._config = RemoteConfig(
            source=ConfigSource.RUNTIME if remote is not None else ConfigSource.NONE
        )
        self._locks: dict[Ledger, asyncio.Lock] = {}

    def _lock(self, ledger: Ledger) -> asyncio.Lock:
        if ledger not in self._locks:
            self._locks[ledger] = asyncio.Lock()
        return self._locks[ledger]

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def remote_configured(self) -> bool:
        return self._cache.remote_enabled

    def refresh_configuration(self) -> RemoteConfig:
        """
        Re-resolve remote credentials and rebuild the remote tier.

        Without a remote_factory the remote passed at construction is kept.
        """
        if self._remote_factory is None:
            return self._config

        config = resolve_remote_config(
            url=self._runtime_url,
            key=self._runtime_key,
            user_config=self._local.get_remote_config(),
        )
        remote = self._remote_factory(config) if config.is_configured else None
        self._cache.set_remote(remote)
        self._config = config
        self._audit.log(StorageEventBuilder.config_resolved(
            config.source.value, config.is_configured
        ))
        return config

    def save_user_remote_config(self, url: str, key: str) -> bool:
        """
        Persist credentials entered by the user and re-resolve.

        Returns:
            True if the pair is valid and was saved. Environment
            configuration still wins if present.
        """
        if not (is_valid_url(url) and is_valid_key(key)):
            return False
        self._local.put_remote_config(UserRemoteConfig(url=url.strip(), key=key.strip()))
        self.refresh_configuration()
        return True

    def clear_user_remote_config(self) -> None:
        self._local.clear_remote_config()
        self.refresh_configuration()

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    async def list_transactions(self, ledger: Ledger) -> list[Transaction]:
        """
        List a ledger's transactions, most recent first.

        With a reachable remote: push any offline outbox, fetch, and
        overwrite the local cache with the result (unpushed outbox entries
        stay on top). Otherwise: whatever the local cache holds.
        """
        async with self._lock(ledger):
            if self._cache.remote_enabled and self._local.get_outbox(ledger):
                await self._cache.reconcile(ledger)

            async def fetch(remote: RemoteStoreInterface) -> list[Transaction]:
                fetched = await remote.list_transactions(ledger)
                remote_ids = {t.id for t in fetched}
                pending = [
                    t for t in self._local.get_outbox(ledger) if t.id not in remote_ids
                ]
                self._audit.log(StorageEventBuilder.cache_refreshed(
                    ledger.value, len(fetched), len(pending)
                ))
                return pending + fetched

            transactions, tier = await self._cache.read(
                "transactions",
                ledger,
                remote_read=fetch,
                local_read=lambda: self._local.get_transactions(ledger),
                mirror=lambda txs: self._local.put_transactions(ledger, txs),
            )

        if tier == Tier.LOCAL:
            self._audit.log(StorageEventBuilder.served_from_cache(
                "transactions", ledger.value, len(transactions)
            ))
        return transactions

    async def create_transaction(
        self,
        draft: TransactionDraft,
        ledger: Ledger,
    ) -> bool:
        """
        Store a confirmed transaction.

        Remote insert when possible; otherwise a locally generated id, the
        record prepended to the ledger's cache and queued in the outbox.

        Returns:
            True. If both tiers fail the loss is logged, not surfaced.
        """
        if isinstance(draft, Transaction):
            draft = draft.to_draft()
        if not isinstance(draft, TransactionDraft):
            raise TypeError(f"Expected TransactionDraft, got {type(draft).__name__}")

        async with self._lock(ledger):
            created: list[Transaction] = []

            def store_locally() -> None:
                transaction = Transaction.new_local(draft, ledger)
                self._local.put_transactions(
                    ledger, [transaction] + self._local.get_transactions(ledger)
                )
                created.append(transaction)
                self._local.put_outbox(ledger, self._local.get_outbox(ledger) + [transaction])

            async def insert(remote: RemoteStoreInterface) -> None:
                stored = await remote.insert_transaction(draft, ledger)
                if stored is not None:
                    created.append(stored)

            tier = await self._cache.write(
                "transactions",
                ledger,
                remote_write=insert,
                local_write=store_locally,
                local_first=False,
            )

        if tier is None:
            logger.error(
                "transaction_not_stored",
                ledger=ledger.value,
                date=draft.date.isoformat(),
                amount=str(draft.amount),
            )
        else:
            self._audit.log(StorageEventBuilder.transaction_created(
                created[0].id if created else None, ledger.value, tier.value
            ))
        return True

    async def delete_transaction(self, transaction_id: str, ledger: Ledger) -> bool:
        """
        Delete a transaction from both tiers.

        The local copy (and any queued upload) is removed whatever the
        remote says, so the UI never shows a row the user deleted.
        """
        async with self._lock(ledger):
            def remove_locally() -> None:
                self._local.put_transactions(ledger, [
                    t for t in self._local.get_transactions(ledger) if t.id != transaction_id
                ])
                self._local.put_outbox(ledger, [
                    t for t in self._local.get_outbox(ledger) if t.id != transaction_id
                ])

            tier = await self._cache.write(
                "transactions",
                ledger,
                remote_write=lambda remote: remote.delete_transaction(transaction_id, ledger),
                local_write=remove_locally,
                local_first=True,
            )

        self._audit.log(StorageEventBuilder.transaction_deleted(
            transaction_id, ledger.value, tier == Tier.REMOTE
        ))
        return True

    async def replace_transaction(
        self,
        transaction_id: str,
        draft: TransactionDraft,
        ledger: Ledger,
    ) -> bool:
        """Edit a transaction: there is no in-place update, so delete then add."""
        await self.delete_transaction(transaction_id, ledger)
        return await self.create_transaction(draft, ledger)

    # =========================================================================
    # SETTINGS
    # =========================================================================

    async def get_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        """
        Fetch a ledger's workspace settings.

        A remote row is mirrored into the local cache. No row, an error or
        no remote at all falls back to the cache; None if nothing is cached.
        """
        async with self._lock(ledger):
            settings, tier = await self._cache.read(
                "settings",
                ledger,
                remote_read=lambda remote: remote.fetch_settings(ledger),
                local_read=lambda: self._local.get_settings(ledger),
                mirror=lambda s: self._local.put_settings(ledger, s),
                none_is_miss=True,
            )
        if tier == Tier.REMOTE:
            self._audit.log(StorageEventBuilder.settings_mirrored(ledger.value))
        return settings

    async def save_settings(self, settings: WorkspaceSettings, ledger: Ledger) -> None:
        """
        Save settings locally, then upsert remotely if configured.

        A remote failure is logged and does not roll back the local write.
        """
        if not isinstance(settings, WorkspaceSettings):
            raise TypeError(f"Expected WorkspaceSettings, got {type(settings).__name__}")

        async with self._lock(ledger):
            tier = await self._cache.write(
                "settings",
                ledger,
                remote_write=lambda remote: remote.upsert_settings(settings, ledger),
                local_write=lambda: self._local.put_settings(ledger, settings),
                local_first=True,
            )
        self._audit.log(StorageEventBuilder.settings_saved(
            ledger.value, tier.value if tier else "none"
        ))

    async def load_workspace(self, ledger: Ledger) -> WorkspaceSettings:
        """
        Settings for a ledger, seeding defaults on first use.

        This is the start-up path: a ledger with no settings anywhere gets
        the default categories and labels, saved to both tiers.
        """
        settings = await self.get_settings(ledger)
        if settings is not None:
            return settings

        settings = default_workspace_settings()
        logger.info("seeding_default_settings", ledger=ledger.value)
        await self.save_settings(settings, ledger)
        return settings

    # =========================================================================
    # SYNC AND HEALTH
    # =========================================================================

    async def reconcile(self, ledger: Ledger) -> SyncReport:
        """Push offline-created transactions and missing settings to the remote."""
        async with self._lock(ledger):
            return await self._cache.reconcile(ledger)

    async def test_connection(self) -> ConnectionCheck:
        """Probe the remote backend for a settings screen."""
        if not self._cache.remote_enabled:
            return ConnectionCheck(
                success=False,
                message="Remote not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.",
            )
        ok, _ = await self._cache.call_remote(lambda remote: remote.ping())
        if ok:
            return ConnectionCheck(success=True, message="Connected to the remote database.")
        return ConnectionCheck(
            success=False,
            message=self._cache.last_error or "Remote did not answer.",
        )

    @property
    def status(self) -> StoreStatus:
        return StoreStatus(
            remote_configured=self._cache.remote_enabled,
            config_source=self._config.source.value,
            degraded=self._cache.degraded,
            last_remote_error=self._cache.last_error,
            last_synced_at=self._cache.last_synced_at,
            pending_uploads={
                ledger.value: len(self._local.get_outbox(ledger)) for ledger in Ledger
            },
        )

    def recent_events(self, limit: Optional[int] = 50) -> list[StorageEvent]:
        return self._audit.recent(limit)


def create_data_storage(
    url: Optional[str] = None,
    key: Optional[str] = None,
    kv_store: Optional[KeyValueStore] = None,
    client_factory: Optional[Callable] = None,
) -> DataStorage:
    """
    Build a DataStorage from settings.

    Args:
        url / key: Explicit remote credentials (override the environment)
        kv_store: Local key-value store; defaults to the JSON file in
            EDEN_DATA_DIR
        client_factory: Replacement for supabase.create_client
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    store_settings = settings.store
    audit = StorageAuditLog(limit=store_settings.recent_events_limit)
    local = LocalCache(
        kv_store or JsonFileKeyValueStore(store_settings.cache_path),
        namespace=store_settings.local_namespace,
        audit=audit,
    )

    def build_remote(config: RemoteConfig) -> RemoteStoreInterface:
        client = (
            SupabaseClient(config, client_factory) if client_factory
            else SupabaseClient(config)
        )
        return SupabaseRemoteStore(
            client,
            owner_id=store_settings.owner_id,
            retry_attempts=store_settings.remote_retry_attempts,
        )

    storage = DataStorage(
        local,
        audit=audit,
        remote_factory=build_remote,
        runtime_url=url,
        runtime_key=key,
    )
    storage.refresh_configuration()
    return storage

