"""Date-range resolution and per-currency expense aggregation.

A range is an inclusive pair of calendar days computed from an anchor date and
a view granularity. Weeks run Monday to Sunday. The six-month and year views
are trailing windows aligned to calendar months that end with the anchor's
month.

Amounts are summed per currency code and never merged across codes. A
transaction without a currency counts toward the home currency. Records with
no usable date or amount are skipped with a warning and do not abort the
aggregation.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from logger import get_logger
from models.transaction import Transaction

logger = get_logger()

ZERO = Decimal("0")


class ExpenseRangeView(Enum):
    """Supported range granularities."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    SIX_MONTHS = "six_months"
    YEAR = "year"


@dataclass(frozen=True)
class ExpenseRange:
    """Inclusive date range with day-level precision."""

    start: date
    end: date

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> List[date]:
        return [self.start + timedelta(days=i) for i in range(self.total_days)]


@dataclass
class ExpenseDailyTotal:
    """Expense aggregate for a single day of a range."""

    date: date
    totals_by_currency: Dict[str, Decimal] = field(default_factory=dict)
    transaction_count: int = 0


def normalize_date(value) -> date:
    """Strip the time of day from a date or datetime.

    Aware datetimes are converted to local time first.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def start_of_week(value) -> date:
    """Monday of the week containing the given day."""
    day = normalize_date(value)
    return day - timedelta(days=day.weekday())


def end_of_month(value) -> date:
    day = normalize_date(value)
    return day + relativedelta(day=31)


def range_for(anchor, view: ExpenseRangeView) -> ExpenseRange:
    """Resolve the concrete range for an anchor date and granularity.

    Args:
        anchor: Any date or datetime inside the wanted range.
        view: Range granularity.

    Returns:
        ExpenseRange with inclusive start and end days.
    """
    day = normalize_date(anchor)
    view = ExpenseRangeView(view)

    if view is ExpenseRangeView.DAY:
        return ExpenseRange(start=day, end=day)
    if view is ExpenseRangeView.WEEK:
        start = start_of_week(day)
        return ExpenseRange(start=start, end=start + timedelta(days=6))
    if view is ExpenseRangeView.MONTH:
        return ExpenseRange(start=day.replace(day=1), end=end_of_month(day))

    months_back = 5 if view is ExpenseRangeView.SIX_MONTHS else 11
    start = day.replace(day=1) - relativedelta(months=months_back)
    return ExpenseRange(start=start, end=end_of_month(day))


def _usable_day(transaction: Transaction) -> Optional[date]:
    """Normalized transaction date, or None if the record has no usable date."""
    try:
        return normalize_date(transaction.transaction_date)
    except TypeError:
        logger.warning(
            f"Skipping transaction {transaction.id}: missing or invalid date"
        )
        return None


def _usable_amount(transaction: Transaction) -> Optional[Decimal]:
    try:
        amount = Decimal(str(transaction.amount))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning(f"Skipping transaction {transaction.id}: invalid amount")
        return None
    return amount


def _filter_for_range(
    transactions: Iterable[Transaction], expense_range: ExpenseRange, kind: str
) -> List[Transaction]:
    result = []
    for transaction in transactions:
        if transaction.type != kind or transaction.is_balance_adjustment:
            continue
        day = _usable_day(transaction)
        if day is not None and expense_range.contains(day):
            result.append(transaction)
    return result


def filter_expenses_for_range(
    transactions: Iterable[Transaction], expense_range: ExpenseRange
) -> List[Transaction]:
    """Keep expense transactions dated inside the range, preserving input order.

    Balance adjustments are never counted as spending.
    """
    return _filter_for_range(transactions, expense_range, "expense")


def filter_incomes_for_range(
    transactions: Iterable[Transaction], expense_range: ExpenseRange
) -> List[Transaction]:
    """Keep income transactions dated inside the range, preserving input order."""
    return _filter_for_range(transactions, expense_range, "income")


def totals_by_currency(
    transactions: Iterable[Transaction], default_currency: str
) -> Dict[str, Decimal]:
    """Sum amounts per currency code.

    With no transactions at all the result is {default_currency: 0}, so callers
    always have a home currency to display. Otherwise only observed codes are
    present.
    """
    totals: Dict[str, Decimal] = {}
    for transaction in transactions:
        amount = _usable_amount(transaction)
        if amount is None:
            continue
        currency = transaction.currency or default_currency
        totals[currency] = totals.get(currency, ZERO) + amount

    if not totals:
        totals[default_currency] = ZERO
    return totals


def daily_totals(
    transactions: Iterable[Transaction],
    expense_range: ExpenseRange,
    default_currency: str,
) -> List[ExpenseDailyTotal]:
    """One entry per day of the range in ascending order, empty days included.

    Transactions dated outside the range are ignored.
    """
    by_day = {day: ExpenseDailyTotal(date=day) for day in expense_range.days()}

    for transaction in transactions:
        day = _usable_day(transaction)
        if day is None or day not in by_day:
            continue
        amount = _usable_amount(transaction)
        if amount is None:
            continue
        entry = by_day[day]
        currency = transaction.currency or default_currency
        entry.totals_by_currency[currency] = (
            entry.totals_by_currency.get(currency, ZERO) + amount
        )
        entry.transaction_count += 1

    return [by_day[day] for day in sorted(by_day)]


def average_daily_totals(
    totals: Dict[str, Decimal], expense_range: ExpenseRange
) -> Dict[str, Decimal]:
    """Divide each currency total by the number of days in the range."""
    days = expense_range.total_days
    if days <= 0:
        return {currency: ZERO for currency in totals}
    return {currency: amount / days for currency, amount in totals.items()}
