"""Default workspace vocabulary and well-known account label keys."""

from enum import Enum


class SystemAccountType(str, Enum):
    """Label keys every fresh workspace starts with."""
    OWN_EXPENSE = "OWN_EXPENSE"
    OWED_TO_PARTNER = "OWED_TO_NXQ"
    OWED_BY_PARTNER = "OWED_BY_NXQ"
    OWED_TO_FUND = "OWED_TO_NXQWK"
    OWED_BY_FUND = "OWED_BY_NXQWK"


# Keys of labels the user adds at runtime start with this
USER_LABEL_PREFIX = "USER_"

DEFAULT_ACCOUNT_CONFIGS: dict[str, dict[str, str]] = {
    SystemAccountType.OWN_EXPENSE.value: {
        "label": "Personal Spending",
        "color": "blue",
        "description": "Transactions that are purely your own expenses.",
    },
    SystemAccountType.OWED_TO_PARTNER.value: {
        "label": "Owed to Partner",
        "color": "rose",
        "description": "Money you spent that you owe back to your partner.",
    },
    SystemAccountType.OWED_BY_PARTNER.value: {
        "label": "Owed by Partner",
        "color": "emerald",
        "description": "Money your partner owes you (e.g., you paid for them).",
    },
    SystemAccountType.OWED_TO_FUND.value: {
        "label": "Owed to Shared Fund",
        "color": "amber",
        "description": "Money you owe or need to contribute to the joint fund.",
    },
    SystemAccountType.OWED_BY_FUND.value: {
        "label": "Owed by Shared Fund",
        "color": "violet",
        "description": "Money the joint fund owes you (e.g., reimbursements).",
    },
}

DEFAULT_SPENDING_CATEGORIES: dict[str, list[str]] = {
    "Food": ["Restaurant", "Dessert/Bread", "Hawker", "Cafe", "Fast Food"],
    "Groceries": ["Supermarket", "Wet Market", "Health/Personal Care"],
    "Transport": ["Public (Bus/Train)", "Taxi/Grab", "Fuel", "Parking"],
    "Shopping": ["Clothes", "Electronics", "Home/Living", "Gifts"],
    "Bills": ["Utilities", "Mobile/Wifi", "Subscriptions", "Insurance"],
    "Others": ["Misc", "Entertainment", "Medical"],
}

COLOR_PALETTE = [
    "blue", "emerald", "rose", "amber", "violet",
    "indigo", "cyan", "pink", "orange", "slate",
]

# Labels counted as the user's own spending on the Personal ledger
PERSONAL_EXPENSE_TYPES = frozenset({
    SystemAccountType.OWN_EXPENSE.value,
    SystemAccountType.OWED_TO_PARTNER.value,
    SystemAccountType.OWED_TO_FUND.value,
})
