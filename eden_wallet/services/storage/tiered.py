"""
Two-Tier Cache Strategy

The local-first, remote-best-effort policy lives here and nowhere else.
Call sites describe WHAT to read or write on each tier; this class decides
WHEN each tier is used and records what happened.

    read       remote if enabled, mirror into local on success, else local
    write      local first then remote (settings), or
               remote first and local only on failure (transactions)
    reconcile  push what only the local tier knows about

With remote=None the class degrades to a plain local store, which is how
tests and unconfigured installs run without any branching at call sites.
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar

from eden_wallet.audit import StorageAuditLog
from eden_wallet.models import (
    Ledger,
    StorageEventBuilder,
    SyncReport,
    Tier,
)
from eden_wallet.models.status import utcnow
from eden_wallet.services.storage.interface import LocalStoreError, RemoteStoreInterface
from eden_wallet.services.storage.local import LocalCache


T = TypeVar("T")

RemoteCall = Callable[[RemoteStoreInterface], Awaitable[T]]


class TwoTierCache:
    """
    Strategy object coordinating the remote and local tiers.

    Remote failures are recorded and absorbed. Local
    write failures are logged; local reads never fail (LocalCache).
    """

    def __init__(
        self,
        remote: Optional[RemoteStoreInterface],
        local: LocalCache,
        audit: Optional[StorageAuditLog] = None,
    ):
        self._remote = remote
        self._local = local
        self._audit = audit or StorageAuditLog()
        self._degraded = False
        self._last_error: Optional[str] = None
        self._last_synced_at: Optional[datetime] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def remote(self) -> Optional[RemoteStoreInterface]:
        return self._remote

    @property
    def local(self) -> LocalCache:
        return self._local

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def last_synced_at(self) -> Optional[datetime]:
        return self._last_synced_at

    def set_remote(self, remote: Optional[RemoteStoreInterface]) -> None:
        """Swap the remote tier (e.g. after the user enters credentials)."""
        self._remote = remote
        self._degraded = False
        self._last_error = None

    def _record_success(self) -> None:
        self._degraded = False
        self._last_error = None
        self._last_synced_at = utcnow()

    def _record_failure(self, error: Exception) -> None:
        self._degraded = True
        self._last_error = str(error)

    async def call_remote(self, call: RemoteCall) -> tuple[bool, Optional[T]]:
        """
        Run one remote call, absorbing its failure.

        Returns:
            (succeeded, result); (False, None) when disabled or on failure
        """
        if self._remote is None:
            return False, None
        try:
            result = await call(self._remote)
        except Exception as e:
            # Any remote failure is a signal to fall back, never an error for the caller
            self._record_failure(e)
            return False, None
        self._record_success()
        return True, result

    def write_local(self, key: str, write: Callable[[], None]) -> bool:
        try:
            write()
            return True
        except LocalStoreError as e:
            self._audit.log(StorageEventBuilder.local_write_failed(key, str(e)))
            return False

    # -------------------------------------------------------------------------
    # Strategy operations
    # -------------------------------------------------------------------------

    async def read(
        self,
        resource: str,
        ledger: Ledger,
        remote_read: RemoteCall,
        local_read: Callable[[], T],
        mirror: Optional[Callable[[T], None]] = None,
        none_is_miss: bool = False,
    ) -> tuple[T, Tier]:
        """
        Read from the remote if possible, otherwise from the local tier.

        Args:
            resource: Name used in logs
            ledger: Ledger being read
            remote_read: Coroutine function taking the remote store
            local_read: Fallback reader; must not raise
            mirror: Called with the remote value to refresh the local tier
            none_is_miss: Treat a remote None as "fall back to local"

        Returns:
            (value, tier that served it)
        """
        if self._remote is not None:
            ok, value = await self.call_remote(remote_read)
            if ok and not (value is None and none_is_miss):
                if mirror is not None:
                    self.write_local(resource, lambda: mirror(value))
                return value, Tier.REMOTE
            if not ok:
                self._audit.log(StorageEventBuilder.remote_read_failed(
                    resource, ledger.value, self._last_error or "unknown error"
                ))

        return local_read(), Tier.LOCAL

    async def write(
        self,
        resource: str,
        ledger: Ledger,
        remote_write: RemoteCall,
        local_write: Callable[[], None],
        local_first: bool,
    ) -> Optional[Tier]:
        """
        Write through the two tiers.

        local_first=True: the local write always happens, then the remote
        is attempted. Returns REMOTE if the remote accepted too.

        local_first=False: the remote is attempted; the local write runs
        only if the remote is disabled or failed.

        Returns:
            The tier that ended up holding the write, or None if neither did
        """
        if local_first:
            local_ok = self.write_local(resource, local_write)
            ok, _ = await self.call_remote(remote_write)
            if ok:
                return Tier.REMOTE
            if self._remote is not None:
                self._audit.log(StorageEventBuilder.remote_write_failed(
                    resource, ledger.value, self._last_error or "unknown error"
                ))
            return Tier.LOCAL if local_ok else None

        ok, _ = await self.call_remote(remote_write)
        if ok:
            return Tier.REMOTE
        if self._remote is not None:
            self._audit.log(StorageEventBuilder.remote_write_failed(
                resource, ledger.value, self._last_error or "unknown error"
            ))
        return Tier.LOCAL if self.write_local(resource, local_write) else None

    async def reconcile(self, ledger: Ledger) -> SyncReport:
        """
        Push locally-held state the remote has not seen.

        1. Outbox transactions are inserted in order with their local ids;
           pushed entries leave the outbox. The first failure stops the
           pass and the rest stay queued.
        2. If the remote has no settings for the ledger but the local tier
           does, the local settings are uploaded.
        """
        report = SyncReport(ledger=ledger.value)
        if self._remote is None:
            return report
        report.attempted = True

        outbox = self._local.get_outbox(ledger)
        remaining = []
        for index, transaction in enumerate(outbox):
            ok, _ = await self.call_remote(
                lambda remote, t=transaction: remote.insert_transaction(
                    t.to_draft(), ledger, transaction_id=t.id
                )
            )
            if ok:
                report.pushed += 1
            else:
                # Remote is down; keep the rest for the next pass
                remaining = outbox[index:]
                report.failed = len(remaining)
                break

        if outbox:
            self.write_local(
                self._local.outbox_key(ledger),
                lambda: self._local.put_outbox(ledger, remaining),
            )
            self._audit.log(StorageEventBuilder.outbox_pushed(
                ledger.value, report.pushed, report.failed
            ))

        local_settings = self._local.get_settings(ledger)
        if local_settings is not None and not report.failed:
            ok, remote_settings = await self.call_remote(
                lambda remote: remote.fetch_settings(ledger)
            )
            if ok and remote_settings is None:
                pushed, _ = await self.call_remote(
                    lambda remote: remote.upsert_settings(local_settings, ledger)
                )
                report.settings_pushed = pushed

        return report
