"""
Local Fallback Storage

The local tier is a plain string key-value store (the same role browser
localStorage plays in a web client) plus a typed cache on top of it.

Key layout, per ledger:
    "<namespace>_<ledger>"           transactions, newest first
    "<namespace>_settings_<ledger>"  workspace settings document
    "<namespace>_outbox_<ledger>"    transactions created offline, not yet pushed
and once per install:
    "<namespace>_remote_config"      remote credentials entered by the user

A cache entry that cannot be parsed is treated as empty and reported, never
raised. Losing a stale cache is better than a UI that cannot start.
"""

import json
import threading
from pathlib import Path
from typing import Any, Iterable, Optional

import structlog
from pydantic import ValidationError

from eden_wallet.audit import StorageAuditLog
from eden_wallet.config import UserRemoteConfig
from eden_wallet.models import (
    Ledger,
    SettingsValidationError,
    StorageEventBuilder,
    Transaction,
    WorkspaceSettings,
)
from eden_wallet.services.storage.interface import KeyValueStore, LocalStoreError


logger = structlog.get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as a single JSON object on disk.

    Every set/delete rewrites the file atomically (temp file + rename).
    An unreadable file is moved aside and the store starts empty.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._load()
        logger.info("json_store_initialized", path=str(self.path), keys=len(self._data))

    def _load(self) -> None:
        if not self.path.exists():
            self._data = {}
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("json_store_unreadable", path=str(self.path), error=str(e))
            self._quarantine()
            self._data = {}
            return

        if not isinstance(raw, dict):
            logger.warning("json_store_wrong_shape", path=str(self.path), type=type(raw).__name__)
            self._quarantine()
            self._data = {}
            return

        # Only string values are valid; anything else is dropped
        self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _quarantine(self) -> None:
        """Keep the broken file for inspection instead of overwriting it."""
        try:
            self.path.replace(self.path.with_suffix(self.path.suffix + ".corrupt"))
        except OSError as e:
            logger.warning("json_store_quarantine_failed", path=str(self.path), error=str(e))

    def _save(self) -> None:
        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            temp_file.replace(self.path)
        except OSError as e:
            logger.error("json_store_save_failed", path=str(self.path), error=str(e))
            raise LocalStoreError(f"Failed to save local store {self.path}: {e}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = value
            try:
                self._save()
            except LocalStoreError:
                self._restore(key, previous)
                raise

    def delete(self, key: str) -> None:
        with self._lock:
            previous = self._data.pop(key, None)
            if previous is None:
                return
            try:
                self._save()
            except LocalStoreError:
                self._data[key] = previous
                raise

    def _restore(self, key: str, previous: Optional[str]) -> None:
        if previous is None:
            self._data.pop(key, None)
        else:
            self._data[key] = previous

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self._data)


class LocalCache:
    """
    Typed view over a KeyValueStore.

    Reads never raise: corrupt entries come back empty (lists) or None.
    Writes raise LocalStoreError if the underlying store cannot persist.
    """

    def __init__(
        self,
        store: KeyValueStore,
        namespace: str = "eden_wallet_data",
        audit: Optional[StorageAuditLog] = None,
    ):
        self._store = store
        self._namespace = namespace
        self._audit = audit or StorageAuditLog()

    @property
    def namespace(self) -> str:
        return self._namespace

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def transactions_key(self, ledger: Ledger) -> str:
        return f"{self._namespace}_{ledger.value}"

    def settings_key(self, ledger: Ledger) -> str:
        return f"{self._namespace}_settings_{ledger.value}"

    def outbox_key(self, ledger: Ledger) -> str:
        return f"{self._namespace}_outbox_{ledger.value}"

    @property
    def remote_config_key(self) -> str:
        return f"{self._namespace}_remote_config"

    # -------------------------------------------------------------------------
    # Raw JSON access
    # -------------------------------------------------------------------------

    def _read_json(self, key: str) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            self._audit.log(StorageEventBuilder.cache_corrupted(key, str(e)))
            return None

    def _write_json(self, key: str, value: Any) -> None:
        self._store.set(key, json.dumps(value))

    def _read_transactions(self, key: str, ledger: Ledger) -> list[Transaction]:
        data = self._read_json(key)
        if data is None:
            return []
        if not isinstance(data, list):
            self._audit.log(StorageEventBuilder.cache_corrupted(key, "expected a list"))
            return []

        transactions = []
        skipped = 0
        for item in data:
            if not isinstance(item, dict):
                skipped += 1
                continue
            try:
                # Entries written by older clients have no ledger field
                transactions.append(Transaction.model_validate({**item, "ledger": ledger}))
            except ValidationError:
                skipped += 1
        if skipped:
            self._audit.log(StorageEventBuilder.cache_corrupted(
                key, f"skipped {skipped} malformed transaction(s)"
            ))
        return transactions

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def get_transactions(self, ledger: Ledger) -> list[Transaction]:
        return self._read_transactions(self.transactions_key(ledger), ledger)

    def put_transactions(self, ledger: Ledger, transactions: list[Transaction]) -> None:
        self._write_json(
            self.transactions_key(ledger),
            [t.to_record() for t in transactions],
        )

    # -------------------------------------------------------------------------
    # Outbox
    # -------------------------------------------------------------------------

    def get_outbox(self, ledger: Ledger) -> list[Transaction]:
        return self._read_transactions(self.outbox_key(ledger), ledger)

    def put_outbox(self, ledger: Ledger, transactions: list[Transaction]) -> None:
        key = self.outbox_key(ledger)
        if not transactions:
            self._store.delete(key)
            return
        self._write_json(key, [t.to_record() for t in transactions])

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_settings(self, ledger: Ledger) -> Optional[WorkspaceSettings]:
        key = self.settings_key(ledger)
        data = self._read_json(key)
        if data is None:
            return None
        try:
            return WorkspaceSettings.from_document(data)
        except SettingsValidationError as e:
            self._audit.log(StorageEventBuilder.cache_corrupted(key, str(e)))
            return None

    def put_settings(self, ledger: Ledger, settings: WorkspaceSettings) -> None:
        self._write_json(self.settings_key(ledger), settings.to_document())

    # -------------------------------------------------------------------------
    # User-entered remote configuration
    # -------------------------------------------------------------------------

    def get_remote_config(self) -> Optional[UserRemoteConfig]:
        data = self._read_json(self.remote_config_key)
        if data is None:
            return None
        try:
            return UserRemoteConfig.model_validate(data)
        except ValidationError as e:
            self._audit.log(StorageEventBuilder.cache_corrupted(self.remote_config_key, str(e)))
            return None

    def put_remote_config(self, config: UserRemoteConfig) -> None:
        self._write_json(self.remote_config_key, config.model_dump())

    def clear_remote_config(self) -> None:
        self._store.delete(self.remote_config_key)
