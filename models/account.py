from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

ACCOUNT_TYPES = ("cash", "bank", "card", "mobile_money", "investment", "loan", "other")


@dataclass
class Account:
    id: int
    name: str  # unique, e.g. "wallet"
    type: str  # one of ACCOUNT_TYPES
    balance: Decimal
    currency: str  # ISO code, e.g. "USD"
    is_default: bool = False
    is_active: bool = True
    description: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert account to dictionary for database storage."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "balance": float(self.balance),
            "currency": self.currency,
            "is_default": int(self.is_default),
            "is_active": int(self.is_active),
            "description": self.description,
        }
