"""
Storage Event Models

The store swallows remote failures instead of raising them, so every
fallback and sync step is recorded as a StorageEvent. Events go to the
structured log and to a small in-memory ring the UI can show.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from eden_wallet.models.status import utcnow


class StorageEventType(str, Enum):
    """Things the store does that are worth tracing."""
    # Reads
    REMOTE_READ_FAILED = "remote_read_failed"
    CACHE_REFRESHED = "cache_refreshed"
    SERVED_FROM_CACHE = "served_from_cache"
    SETTINGS_MIRRORED = "settings_mirrored"

    # Writes
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_CREATED_LOCALLY = "transaction_created_locally"
    TRANSACTION_DELETED = "transaction_deleted"
    REMOTE_WRITE_FAILED = "remote_write_failed"
    SETTINGS_SAVED = "settings_saved"

    # Sync
    OUTBOX_PUSHED = "outbox_pushed"
    OUTBOX_PUSH_FAILED = "outbox_push_failed"

    # Local tier
    CACHE_CORRUPTED = "cache_corrupted"
    LOCAL_WRITE_FAILED = "local_write_failed"

    # Configuration
    CONFIG_RESOLVED = "config_resolved"


class AuditSeverity(str, Enum):
    """Severity level for storage events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StorageEvent(BaseModel):
    """A single traced storage event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: StorageEventType
    severity: AuditSeverity = AuditSeverity.INFO
    ledger: Optional[str] = Field(
        default=None,
        description="Ledger the event concerns, if any"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Transaction id or settings key"
    )
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "ledger": self.ledger,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class StorageEventBuilder:
    """
    Helper class to build storage events with common patterns.

    Usage:
        event = StorageEventBuilder.remote_read_failed("transactions", ledger, err)
    """

    @staticmethod
    def remote_read_failed(resource: str, ledger: str, error: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.REMOTE_READ_FAILED,
            severity=AuditSeverity.WARNING,
            ledger=ledger,
            description=f"Remote read of {resource} failed, using local cache",
            details={"resource": resource},
            error_message=error,
        )

    @staticmethod
    def cache_refreshed(ledger: str, count: int, pending: int) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.CACHE_REFRESHED,
            severity=AuditSeverity.DEBUG,
            ledger=ledger,
            description=f"Local cache refreshed with {count} remote transactions",
            details={"remote_count": count, "pending_kept": pending},
        )

    @staticmethod
    def served_from_cache(resource: str, ledger: str, count: int) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.SERVED_FROM_CACHE,
            severity=AuditSeverity.DEBUG,
            ledger=ledger,
            description=f"Served {resource} from local cache",
            details={"resource": resource, "count": count},
        )

    @staticmethod
    def settings_mirrored(ledger: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.SETTINGS_MIRRORED,
            severity=AuditSeverity.DEBUG,
            ledger=ledger,
            description="Remote settings mirrored into local cache",
        )

    @staticmethod
    def transaction_created(transaction_id: Optional[str], ledger: str, tier: str) -> StorageEvent:
        local = tier == "local"
        return StorageEvent(
            event_type=(
                StorageEventType.TRANSACTION_CREATED_LOCALLY if local
                else StorageEventType.TRANSACTION_CREATED
            ),
            severity=AuditSeverity.WARNING if local else AuditSeverity.INFO,
            ledger=ledger,
            entity_id=transaction_id,
            description=(
                "Transaction stored locally, queued for upload" if local
                else "Transaction stored remotely"
            ),
            details={"tier": tier},
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, ledger: str, remote_deleted: bool) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.TRANSACTION_DELETED,
            ledger=ledger,
            entity_id=transaction_id,
            description="Transaction deleted",
            details={"remote_deleted": remote_deleted},
        )

    @staticmethod
    def remote_write_failed(resource: str, ledger: str, error: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.REMOTE_WRITE_FAILED,
            severity=AuditSeverity.WARNING,
            ledger=ledger,
            description=f"Remote write of {resource} failed",
            details={"resource": resource},
            error_message=error,
        )

    @staticmethod
    def settings_saved(ledger: str, tier: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.SETTINGS_SAVED,
            ledger=ledger,
            description=f"Workspace settings saved ({tier})",
            details={"tier": tier},
        )

    @staticmethod
    def outbox_pushed(ledger: str, pushed: int, failed: int) -> StorageEvent:
        return StorageEvent(
            event_type=(
                StorageEventType.OUTBOX_PUSH_FAILED if failed
                else StorageEventType.OUTBOX_PUSHED
            ),
            severity=AuditSeverity.WARNING if failed else AuditSeverity.INFO,
            ledger=ledger,
            description=f"Pushed {pushed} offline transactions, {failed} failed",
            details={"pushed": pushed, "failed": failed},
        )

    @staticmethod
    def cache_corrupted(key: str, error: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.CACHE_CORRUPTED,
            severity=AuditSeverity.WARNING,
            entity_id=key,
            description=f"Unreadable local cache entry {key}, treating as empty",
            error_message=error,
        )

    @staticmethod
    def local_write_failed(key: str, error: str) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.LOCAL_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_id=key,
            description=f"Could not write local cache entry {key}",
            error_message=error,
        )

    @staticmethod
    def config_resolved(source: str, configured: bool) -> StorageEvent:
        return StorageEvent(
            event_type=StorageEventType.CONFIG_RESOLVED,
            description=(
                f"Remote configured from {source}" if configured
                else "Remote not configured, running local-only"
            ),
            details={"source": source, "configured": configured},
        )
