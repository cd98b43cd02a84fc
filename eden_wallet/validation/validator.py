"""
Transaction Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - VOCABULARY:
- Category, sub-category and account label must exist in the ledger's
  settings
- This catches free-text input and parser output that drifted from the
  workspace

STAGE 2 - SEMANTIC:
- Zero amounts
- Far-future or very old dates
- Unusually large amounts
- Overlong remarks

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to confirm or correct. The store itself takes
already-confirmed data and does not call this.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from eden_wallet.models import (
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
    WorkspaceSettings,
)


MAX_REMARKS_LENGTH = 500
FUTURE_DATE_TOLERANCE_DAYS = 1
OLD_DATE_THRESHOLD_DAYS = 365 * 2
LARGE_AMOUNT = Decimal("10000")


class TransactionValidator:
    """
    Checks a draft against one ledger's workspace settings.

    Stage 1 needs the settings; stage 2 only looks at the draft.
    """

    def __init__(
        self,
        settings: WorkspaceSettings,
        large_amount: Decimal = LARGE_AMOUNT,
        today: Optional[date] = None,
    ):
        """
        Args:
            settings: The ledger's current settings
            large_amount: Amounts above this (in absolute value) get a warning
            today: Reference date for date checks; defaults to date.today()
        """
        self._settings = settings
        self._large_amount = large_amount
        self._today = today

    def _validate_vocabulary(self, draft: TransactionDraft) -> list[ValidationIssue]:
        issues = []
        settings = self._settings

        if draft.spending_category not in settings.categories:
            issues.append(ValidationIssue(
                field="spending_category",
                issue_type="unknown_category",
                message=f"Category '{draft.spending_category}' is not in this ledger's settings",
                severity="error",
                suggested_fix="Pick an existing category or add it in Settings",
            ))
        elif draft.sub_category and draft.sub_category not in settings.sub_categories(draft.spending_category):
            issues.append(ValidationIssue(
                field="sub_category",
                issue_type="unknown_sub_category",
                message=(
                    f"Sub-category '{draft.sub_category}' does not belong to "
                    f"'{draft.spending_category}'"
                ),
                severity="error",
                suggested_fix="Pick one of the category's sub-categories or leave it empty",
            ))

        if draft.account_type not in settings.account_configs:
            issues.append(ValidationIssue(
                field="account_type",
                issue_type="unknown_account_type",
                message=f"Account label '{draft.account_type}' does not exist",
                severity="error",
                suggested_fix=f"Use the default label ({settings.default_account_type})",
            ))

        return issues

    def _validate_semantic(self, draft: TransactionDraft) -> list[ValidationIssue]:
        issues = []
        today = self._today or date.today()

        if draft.amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="zero_amount",
                message="Amount is zero",
                severity="error",
                suggested_fix="Enter the amount spent",
            ))
        elif abs(draft.amount) > self._large_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if draft.date > today + timedelta(days=FUTURE_DATE_TOLERANCE_DAYS):
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))
        elif draft.date < today - timedelta(days=OLD_DATE_THRESHOLD_DAYS):
            issues.append(ValidationIssue(
                field="date",
                issue_type="suspicious_date",
                message=f"Date ({draft.date}) seems unusually old",
                severity="warning",
                suggested_fix="Please verify the year",
            ))

        if len(draft.remarks) > MAX_REMARKS_LENGTH:
            issues.append(ValidationIssue(
                field="remarks",
                issue_type="too_long",
                message=f"Remarks are longer than {MAX_REMARKS_LENGTH} characters",
                severity="warning",
                suggested_fix="Shorten the remarks",
            ))

        return issues

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """
        Run both stages.

        Returns:
            ValidationResult with all issues found
        """
        issues = self._validate_vocabulary(draft)
        issues.extend(self._validate_semantic(draft))
        return ValidationResult(issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per issue, errors first."""
        if not result.issues:
            return "All checks passed."

        lines = []
        for issue in sorted(result.issues, key=lambda i: i.severity != "error"):
            prefix = "Error" if issue.severity == "error" else "Check"
            line = f"{prefix}: {issue.message}"
            if issue.suggested_fix:
                line += f" ({issue.suggested_fix})"
            lines.append(line)
        return "\n".join(lines)
