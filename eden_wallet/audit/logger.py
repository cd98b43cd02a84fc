"""
Storage Audit Log

The store never raises remote failures to the UI, which makes silent data
divergence easy to miss. Every fallback therefore goes through here:
- Structured local log (structlog, JSON lines)
- A bounded in-memory list of recent events the UI can show
"""

import logging
from collections import deque
from typing import Optional

import structlog

from eden_wallet.models.audit import AuditSeverity, StorageEvent, StorageEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Set the minimum level of the eden_wallet loggers. The root logger is not touched."""
    logging.getLogger("eden_wallet").setLevel(getattr(logging, level.upper(), logging.INFO))


class StorageAuditLog:
    """
    Central storage event log.

    Keeps the most recent `limit` events in memory, newest last.
    """

    def __init__(self, limit: int = 200):
        self._events: deque[StorageEvent] = deque(maxlen=limit)
        self._logger = structlog.get_logger("eden_wallet.storage")

    def log(self, event: StorageEvent) -> None:
        """Record an event locally and in memory."""
        log_dict = event.to_log_dict()
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("storage_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("storage_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("storage_event", **log_dict)
        else:
            self._logger.info("storage_event", **log_dict)
        self._events.append(event)

    def recent(
        self,
        limit: Optional[int] = None,
        event_type: Optional[StorageEventType] = None,
    ) -> list[StorageEvent]:
        """Recent events, newest first."""
        events = [
            e for e in reversed(self._events)
            if event_type is None or e.event_type == event_type
        ]
        return events if limit is None else events[:limit]

    def clear(self) -> None:
        self._events.clear()
