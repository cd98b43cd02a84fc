"""Storage event logging package."""

from eden_wallet.audit.logger import StorageAuditLog, configure_logging

__all__ = ["StorageAuditLog", "configure_logging"]
