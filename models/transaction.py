from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
import uuid

TRANSACTION_TYPES = ("income", "expense", "transfer")


@dataclass
class Transaction:
    id: str  # uuid4 hex unless the caller supplies one
    title: str
    amount: Decimal  # always positive
    type: str  # 'income', 'expense', or 'transfer'
    transaction_date: Optional[date]
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    transaction_time: Optional[time] = None
    currency: Optional[str] = None  # None means the home currency
    is_cleared: bool = False
    is_balance_adjustment: bool = False
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        title: str,
        amount: Decimal,
        type: str,
        transaction_date: date,
        *,
        id: Optional[str] = None,
        **fields,
    ) -> "Transaction":
        """Create a Transaction with a generated ID."""
        return cls(
            id=id or uuid.uuid4().hex,
            title=title,
            amount=amount,
            type=type,
            transaction_date=transaction_date,
            **fields,
        )

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    def to_dict(self) -> dict:
        """Convert transaction to dictionary for database storage."""
        return {
            "id": self.id,
            "title": self.title,
            "amount": float(self.amount),
            "transaction_type": self.type,
            "category_id": self.category_id,
            "account_id": self.account_id,
            "transaction_date": (
                self.transaction_date.isoformat() if self.transaction_date else None
            ),
            "transaction_time": (
                self.transaction_time.strftime("%H:%M")
                if self.transaction_time
                else None
            ),
            "currency": self.currency,
            "is_cleared": int(self.is_cleared),
            "is_balance_adjustment": int(self.is_balance_adjustment),
            "description": self.description,
        }
