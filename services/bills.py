"""Bill service for recurring bills and subscriptions."""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional
from models.bill import Bill, BILL_FREQUENCIES, BILL_KINDS
from services import read_models
from tools.currency import validate_money
from logger import get_logger

logger = get_logger()

_BILL_SELECT_FIELDS = "id, name, amount, currency, frequency, kind, next_due_date, is_active"

# Occurrences per month for each frequency
_MONTHLY_FACTOR = {
    "weekly": Decimal(52) / Decimal(12),
    "monthly": Decimal(1),
    "yearly": Decimal(1) / Decimal(12),
}

UPCOMING_WINDOW_DAYS = 7


class BillService:
    """Service for managing recurring bills and subscriptions."""

    def __init__(self, db_manager, cache=None):
        """Initialize the bill service.

        Args:
            db_manager: Database manager instance for database operations.
            cache: Optional ReadModelCache to invalidate after writes.
        """
        self.db_manager = db_manager
        self.cache = cache

    def create(
        self,
        name: str,
        amount: Decimal,
        currency: str,
        frequency: str,
        next_due_date: date,
        kind: str = "bill",
    ) -> Bill:
        """Create a new bill.

        Raises:
            ValueError: If frequency, kind, or amount is invalid.
        """
        if frequency not in BILL_FREQUENCIES:
            raise ValueError(f"Unknown bill frequency: {frequency}")
        if kind not in BILL_KINDS:
            raise ValueError(f"Unknown bill kind: {kind}")
        if validate_money(amount) < 0:
            raise ValueError("Bill amount must not be negative")

        currency = currency.upper()
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO bills (name, amount, currency, frequency, kind, next_due_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    float(amount),
                    currency,
                    frequency,
                    kind,
                    next_due_date.isoformat(),
                ),
            )
            conn.commit()
            bill_id = cursor.lastrowid

        read_models.invalidate_after_write(self.cache, read_models.BILL_WRITES)
        logger.info(f"Created {kind} '{name}' (ID: {bill_id})")
        return Bill(
            id=bill_id,
            name=name,
            amount=Decimal(str(amount)),
            currency=currency,
            frequency=frequency,
            kind=kind,
            next_due_date=next_due_date,
        )

    def find_all(self) -> List[Bill]:
        """Get all bills, ordered by next due date."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_BILL_SELECT_FIELDS} FROM bills ORDER BY next_due_date, id"
            )
            return [self._row_to_bill(row) for row in cursor.fetchall()]

    def find_active(self) -> List[Bill]:
        """Get active bills, ordered by next due date."""
        return [bill for bill in self.find_all() if bill.is_active]

    def deactivate(self, bill_id: int) -> bool:
        """Mark a bill inactive.

        Returns:
            True if the bill was updated, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "UPDATE bills SET is_active = 0 WHERE id = ?", (bill_id,)
            )
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.BILL_WRITES)
        return cursor.rowcount > 0

    def monthly_summary(self, today: Optional[date] = None) -> Dict:
        """Summarize active bills for the recurring section of the expenses view.

        Args:
            today: Reference date for upcoming/overdue checks. Defaults to today.

        Returns:
            Dictionary with:
            - "total_bills": number of active bills and subscriptions
            - "subscriptions": number of active subscriptions
            - "bills": number of active plain bills
            - "monthly_totals": currency code -> normalized monthly cost (Decimal)
            - "upcoming_count": bills due within the next 7 days
            - "overdue_count": bills whose due date has passed
        """
        today = today or date.today()
        bills = self.find_active()

        monthly_totals: Dict[str, Decimal] = {}
        for bill in bills:
            monthly = bill.amount * _MONTHLY_FACTOR[bill.frequency]
            monthly_totals[bill.currency] = (
                monthly_totals.get(bill.currency, Decimal("0")) + monthly
            )

        horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)
        return {
            "total_bills": len(bills),
            "subscriptions": sum(1 for b in bills if b.is_subscription),
            "bills": sum(1 for b in bills if not b.is_subscription),
            "monthly_totals": {
                currency: total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
                for currency, total in monthly_totals.items()
            },
            "upcoming_count": sum(
                1 for b in bills if today <= b.next_due_date <= horizon
            ),
            "overdue_count": sum(1 for b in bills if b.next_due_date < today),
        }

    def _row_to_bill(self, row: tuple) -> Bill:
        """Convert a database row to a Bill object."""
        return Bill(
            id=row[0],
            name=row[1],
            amount=Decimal(str(row[2])),
            currency=row[3],
            frequency=row[4],
            kind=row[5],
            next_due_date=date.fromisoformat(row[6]),
            is_active=bool(row[7]),
        )
