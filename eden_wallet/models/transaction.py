"""
Transaction Models

DESIGN DECISION: A transaction is immutable once stored. The UI edits by
deleting and re-adding, so the model is frozen and there is no update path.

Two shapes exist:
- TransactionDraft: what a form or the text parser hands over after the user
  confirmed it (no id, no ledger yet)
- Transaction: a stored row, with an id and the ledger it belongs to
"""

from datetime import date as date_type
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Ledger(str, Enum):
    """
    The two independent workspaces.

    Every transaction and settings document belongs to exactly one.
    """
    PERSONAL = "Personal"
    JOINT = "Joint"


class TransactionDraft(BaseModel):
    """
    A confirmed but not yet stored transaction.

    Amounts are signed: refunds and reimbursements may be negative.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="ignore")

    date: date_type = Field(
        ...,
        description="Calendar date of the spend (no time of day)"
    )
    amount: Decimal = Field(
        ...,
        max_digits=14,
        decimal_places=2,
        description="Signed amount in the workspace currency"
    )
    spending_category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name from the ledger's settings"
    )
    sub_category: str = Field(
        default="",
        max_length=100,
        description="Sub-category name, may be empty"
    )
    account_type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account label key from the ledger's settings"
    )
    remarks: str = Field(
        default="",
        description="Free text, may be empty"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        """Floats from JSON go through str so 15.5 stays 15.50, not 15.4999..."""
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        if isinstance(v, (float, int, str, Decimal)):
            try:
                return Decimal(str(v).strip()).quantize(Decimal("0.01"))
            except InvalidOperation:
                raise ValueError(f"invalid amount: {v!r}")
        return v

    @field_validator("sub_category", "remarks", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)

    def with_id(self, transaction_id: str, ledger: Ledger) -> "Transaction":
        """Attach identity, producing a storable transaction."""
        return Transaction(
            id=transaction_id,
            ledger=ledger,
            **self.model_dump(),
        )


class Transaction(TransactionDraft):
    """A stored transaction."""

    id: str = Field(
        ...,
        min_length=1,
        description="Globally unique id; server-assigned or a local uuid4"
    )
    ledger: Ledger = Field(
        ...,
        description="Workspace this transaction belongs to"
    )

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v: Any) -> Any:
        # Remote ids may come back as ints or UUIDs depending on the schema
        return str(v) if v is not None else v

    @classmethod
    def new_local(cls, draft: TransactionDraft, ledger: Ledger) -> "Transaction":
        """Create a transaction with a locally generated id."""
        return draft.with_id(str(uuid4()), ledger)

    def to_draft(self) -> TransactionDraft:
        return TransactionDraft(**self.model_dump(exclude={"id", "ledger"}))

    def to_record(self) -> dict:
        """JSON-safe dict, used for the local cache."""
        return self.model_dump(mode="json")

    def matches(self, draft: TransactionDraft) -> bool:
        """Same content as the draft, ignoring id and ledger."""
        return self.to_draft() == draft
