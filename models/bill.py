"""Bill model for recurring bills and subscriptions."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

BILL_FREQUENCIES = ("weekly", "monthly", "yearly")
BILL_KINDS = ("bill", "subscription")


@dataclass
class Bill:
    """A recurring payment.

    Attributes:
        id: Unique identifier (auto-generated).
        name: Display name, e.g. "Netflix".
        amount: Amount charged per occurrence (always positive).
        currency: ISO currency code.
        frequency: 'weekly', 'monthly', or 'yearly'.
        kind: 'bill' or 'subscription'.
        next_due_date: Date of the next occurrence.
        is_active: Inactive bills are excluded from summaries.
    """

    id: int
    name: str
    amount: Decimal
    currency: str
    frequency: str
    kind: str
    next_due_date: date
    is_active: bool = True

    @property
    def is_subscription(self) -> bool:
        return self.kind == "subscription"
