"""
Tests for transaction validation against a ledger's vocabulary.
"""

from datetime import date
from decimal import Decimal

import pytest

from eden_wallet.models import default_workspace_settings
from eden_wallet.validation import TransactionValidator


TODAY = date(2024, 6, 15)


@pytest.fixture
def validator():
    return TransactionValidator(default_workspace_settings(), today=TODAY)


def issue_types(result):
    return [issue.issue_type for issue in result.issues]


class TestVocabulary:
    """Stage 1: names must exist in the settings."""

    def test_valid_draft(self, validator, draft_factory):
        result = validator.validate(draft_factory(day=5, sub_category="Hawker"))

        assert result.is_valid is True
        assert result.issues == []

    def test_unknown_category(self, validator, draft_factory):
        result = validator.validate(draft_factory(spending_category="Crypto"))

        assert result.is_valid is False
        assert issue_types(result) == ["unknown_category"]

    def test_sub_category_must_belong_to_category(self, validator, draft_factory):
        result = validator.validate(draft_factory(sub_category="Fuel"))

        assert issue_types(result) == ["unknown_sub_category"]

    def test_empty_sub_category_is_fine(self, validator, draft_factory):
        assert validator.validate(draft_factory(sub_category="")).is_valid

    def test_unknown_account_type(self, validator, draft_factory):
        result = validator.validate(draft_factory(account_type="USER_123"))

        [issue] = result.issues
        assert issue.issue_type == "unknown_account_type"
        assert "OWN_EXPENSE" in issue.suggested_fix


class TestSemantic:
    """Stage 2: values that parse but look wrong."""

    def test_zero_amount_is_an_error(self, validator, draft_factory):
        result = validator.validate(draft_factory(amount="0.00"))

        assert result.has_errors
        assert issue_types(result) == ["zero_amount"]

    def test_large_amount_is_a_warning(self, validator, draft_factory):
        result = validator.validate(draft_factory(amount="25000.00"))

        assert result.is_valid is True
        assert [w.issue_type for w in result.warnings] == ["suspicious_value"]

    def test_large_refund_is_a_warning(self, validator, draft_factory):
        result = validator.validate(draft_factory(amount="-25000.00"))

        assert issue_types(result) == ["suspicious_value"]

    def test_future_date(self, validator, draft_factory):
        draft = draft_factory().model_copy(update={"date": date(2024, 7, 1)})

        assert issue_types(validator.validate(draft)) == ["future_date"]

    def test_tomorrow_is_tolerated(self, validator, draft_factory):
        draft = draft_factory().model_copy(update={"date": date(2024, 6, 16)})

        assert validator.validate(draft).issues == []

    def test_very_old_date(self, validator, draft_factory):
        draft = draft_factory().model_copy(update={"date": date(2020, 1, 1)})

        assert issue_types(validator.validate(draft)) == ["suspicious_date"]

    def test_long_remarks(self, validator, draft_factory):
        result = validator.validate(draft_factory(remarks="x" * 501))

        assert issue_types(result) == ["too_long"]

    def test_custom_large_amount_threshold(self, draft_factory):
        validator = TransactionValidator(
            default_workspace_settings(), large_amount=Decimal("50"), today=TODAY
        )

        assert issue_types(validator.validate(draft_factory(amount="60.00"))) == ["suspicious_value"]


class TestSummary:

    def test_all_clear(self, validator, draft_factory):
        result = validator.validate(draft_factory())
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_listed_first(self, validator, draft_factory):
        result = validator.validate(draft_factory(amount="25000.00", spending_category="Crypto"))

        lines = validator.get_user_friendly_summary(result).splitlines()
        assert lines[0].startswith("Error:")
        assert lines[1].startswith("Check:")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
