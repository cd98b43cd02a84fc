"""
Data Models Package

Pydantic models for everything the store reads, writes or reports.
"""

from eden_wallet.models.transaction import (
    Ledger,
    Transaction,
    TransactionDraft,
)
from eden_wallet.models.workspace import (
    AccountLabel,
    SettingsValidationError,
    WorkspaceSettings,
    default_workspace_settings,
)
from eden_wallet.models.audit import (
    AuditSeverity,
    StorageEvent,
    StorageEventBuilder,
    StorageEventType,
)
from eden_wallet.models.status import (
    ConnectionCheck,
    StoreStatus,
    SyncReport,
    Tier,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Transaction models
    "Ledger",
    "Transaction",
    "TransactionDraft",
    # Workspace models
    "AccountLabel",
    "SettingsValidationError",
    "WorkspaceSettings",
    "default_workspace_settings",
    # Storage event models
    "AuditSeverity",
    "StorageEvent",
    "StorageEventBuilder",
    "StorageEventType",
    # Status models
    "ConnectionCheck",
    "StoreStatus",
    "SyncReport",
    "Tier",
    "ValidationIssue",
    "ValidationResult",
]
