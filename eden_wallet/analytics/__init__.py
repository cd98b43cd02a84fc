"""Analytics package."""

from eden_wallet.analytics.balances import (
    Balances,
    CategoryTotal,
    MonthlyTotal,
    compute_balances,
    filter_by_date,
    is_personal_expense,
    monthly_spending,
    spending_by_category,
)

__all__ = [
    "Balances",
    "CategoryTotal",
    "MonthlyTotal",
    "compute_balances",
    "filter_by_date",
    "is_personal_expense",
    "monthly_spending",
    "spending_by_category",
]
