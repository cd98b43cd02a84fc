"""
Spending Analytics

DESIGN DECISION: Aggregation is DETERMINISTIC and works only on stored rows.
Nothing here reads from a tier or estimates; callers pass in the list they
got from DataStorage.list_transactions.

What counts as spending depends on the ledger:
- Personal: own expenses, money owed to the partner, money owed to the
  joint fund, and every user-created label
- Joint: every transaction

Balances with the partner and the fund are signed: positive means they owe
the user.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from eden_wallet.constants import PERSONAL_EXPENSE_TYPES, USER_LABEL_PREFIX, SystemAccountType
from eden_wallet.models import Ledger, Transaction


ZERO = Decimal("0.00")


class Balances(BaseModel):
    """Headline numbers for a date range."""

    total_spent: Decimal = Field(default=ZERO, description="Spending per the ledger's rule")
    net_partner: Decimal = Field(
        default=ZERO,
        description="Owed by partner minus owed to partner"
    )
    net_fund: Decimal = Field(
        default=ZERO,
        description="Owed by the joint fund minus owed to it"
    )
    transaction_count: int = Field(default=0, ge=0)


class MonthlyTotal(BaseModel):
    """Spending in one calendar month."""

    sort_key: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    month: str = Field(..., description="Display label, e.g. 'Jan 2025'")
    amount: Decimal


class CategoryTotal(BaseModel):
    name: str
    amount: Decimal


def is_personal_expense(account_type: str, ledger: Ledger) -> bool:
    """Whether a row counts towards spending on this ledger."""
    if ledger == Ledger.JOINT:
        return True
    return account_type in PERSONAL_EXPENSE_TYPES or account_type.startswith(USER_LABEL_PREFIX)


def filter_by_date(
    transactions: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Transaction]:
    """Keep rows with start <= date <= end; a missing bound is open."""
    return [
        t for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]


def compute_balances(
    transactions: Iterable[Transaction],
    ledger: Ledger,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Balances:
    rows = filter_by_date(transactions, start, end)
    total = net_partner = net_fund = ZERO

    for t in rows:
        if is_personal_expense(t.account_type, ledger):
            total += t.amount

        if t.account_type == SystemAccountType.OWED_BY_PARTNER.value:
            net_partner += t.amount
        elif t.account_type == SystemAccountType.OWED_TO_PARTNER.value:
            net_partner -= t.amount
        elif t.account_type == SystemAccountType.OWED_BY_FUND.value:
            net_fund += t.amount
        elif t.account_type == SystemAccountType.OWED_TO_FUND.value:
            net_fund -= t.amount

    return Balances(
        total_spent=total,
        net_partner=net_partner,
        net_fund=net_fund,
        transaction_count=len(rows),
    )


def monthly_spending(transactions: Iterable[Transaction], ledger: Ledger) -> list[MonthlyTotal]:
    """
    Spending per month over the whole history, oldest month first.

    Not date-filtered: the trend chart always shows everything.
    """
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if not is_personal_expense(t.account_type, ledger):
            continue
        key = t.date.strftime("%Y-%m")
        totals[key] = totals.get(key, ZERO) + t.amount

    return [
        MonthlyTotal(
            sort_key=key,
            month=date(int(key[:4]), int(key[5:]), 1).strftime("%b %Y"),
            amount=amount,
        )
        for key, amount in sorted(totals.items())
    ]


def spending_by_category(
    transactions: Iterable[Transaction],
    ledger: Ledger,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[CategoryTotal]:
    """Spending per category in the range, largest first."""
    totals: dict[str, Decimal] = {}
    for t in filter_by_date(transactions, start, end):
        if is_personal_expense(t.account_type, ledger):
            totals[t.spending_category] = totals.get(t.spending_category, ZERO) + t.amount

    return sorted(
        (CategoryTotal(name=name, amount=amount) for name, amount in totals.items()),
        key=lambda c: c.amount,
        reverse=True,
    )
