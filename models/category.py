"""Category model for transaction classification."""

from dataclasses import dataclass
from typing import Optional

CATEGORY_TYPES = ("expense", "income", "both")


@dataclass
class TransactionCategory:
    """A named, colored classification bucket for transactions.

    Attributes:
        id: Unique identifier (auto-generated).
        name: Category name (unique).
        type: 'expense', 'income', or 'both'.
        color: Hex color string, e.g. "#FF9800".
        icon: Symbolic icon name, e.g. "restaurant".
        description: Optional description of what belongs in this category.
        sort_order: Position used when listing categories.
        is_active: Inactive categories are hidden from pickers.
    """

    id: int
    name: str
    type: str = "expense"
    color: str = "#CDAF56"
    icon: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True

    def applies_to(self, transaction_type: str) -> bool:
        """Whether this category can classify a transaction of the given type."""
        return self.type == "both" or self.type == transaction_type
