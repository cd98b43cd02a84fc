"""
Status, Sync and Validation Result Models

These are the values the store hands back to the UI besides the data itself:
which tier served a request, whether the store is running degraded, what a
sync pass did, and what validation found.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tier(str, Enum):
    """Which persistence tier served or accepted an operation."""
    REMOTE = "remote"
    LOCAL = "local"


# =============================================================================
# STORE STATUS
# =============================================================================

class StoreStatus(BaseModel):
    """
    Degraded-mode report for the UI.

    The facade never raises, so this is the only way the UI can tell
    that it is looking at cached data.
    """

    remote_configured: bool = Field(
        default=False,
        description="Is a remote backend configured at all?"
    )
    config_source: str = Field(
        default="none",
        description="Where the remote configuration came from"
    )
    degraded: bool = Field(
        default=False,
        description="Did the most recent remote call fail?"
    )
    last_remote_error: Optional[str] = Field(
        default=None,
        description="Message of the most recent remote failure"
    )
    last_synced_at: Optional[datetime] = Field(
        default=None,
        description="When the remote last answered successfully"
    )
    pending_uploads: dict[str, int] = Field(
        default_factory=dict,
        description="Ledger -> number of locally created rows not yet pushed"
    )

    @property
    def offline(self) -> bool:
        """True when the UI should show an offline banner."""
        return not self.remote_configured or self.degraded


class SyncReport(BaseModel):
    """What one reconcile pass did for a ledger."""

    ledger: str
    attempted: bool = Field(
        default=False,
        description="False when the remote is not configured"
    )
    pushed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    settings_pushed: bool = False
    finished_at: datetime = Field(default_factory=utcnow)


class ConnectionCheck(BaseModel):
    """Result of probing the remote backend."""

    success: bool
    message: str
    checked_at: datetime = Field(default_factory=utcnow)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'unknown_category', 'zero_amount')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Outcome of checking a draft against a ledger's vocabulary."""

    validated_at: datetime = Field(default_factory=utcnow)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
