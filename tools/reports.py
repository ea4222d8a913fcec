"""Expense overview and weekly finance report builders."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from models.transaction import Transaction
from services import read_models
from tools.expense_range import (
    ExpenseDailyTotal,
    ExpenseRange,
    ExpenseRangeView,
    average_daily_totals,
    daily_totals,
    filter_expenses_for_range,
    filter_incomes_for_range,
    range_for,
    start_of_week,
    totals_by_currency,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
UNCATEGORIZED = "Uncategorized"


@dataclass
class CategorySpending:
    """Expense totals for one category within a range."""

    category_id: Optional[int]
    name: str
    color: Optional[str]
    totals_by_currency: Dict[str, Decimal] = field(default_factory=dict)
    transaction_count: int = 0


@dataclass
class ExpensesOverview:
    """Everything the expenses view shows for a selected range."""

    view: ExpenseRangeView
    range: ExpenseRange
    currency: str
    totals_by_currency: Dict[str, Decimal]
    average_daily_by_currency: Dict[str, Decimal]
    daily_totals: List[ExpenseDailyTotal]
    transaction_count: int
    categories: List[CategorySpending]
    bill_summary: Dict


@dataclass
class DailySummary:
    date: date
    label: str
    income: Decimal
    expense: Decimal


@dataclass
class ReportCategoryItem:
    category_id: Optional[int]
    name: str
    amount: Decimal
    percentage: Decimal


@dataclass
class WeeklyReport:
    """Single-currency summary of one Monday-to-Sunday week."""

    week_start: date
    week_end: date
    currency: str
    total_income: Decimal
    total_expense: Decimal
    net: Decimal
    savings_rate: Decimal
    income_change_vs_prev_week: Optional[Decimal]
    expense_change_vs_prev_week: Optional[Decimal]
    daily_summaries: List[DailySummary]
    top_expense_categories: List[ReportCategoryItem]
    busiest_day: Optional[str]
    quietest_day: Optional[str]
    average_daily_spending: Decimal
    total_transactions: int
    avg_per_transaction: Decimal
    highest_single_expense: Optional[Decimal]
    highest_single_income: Optional[Decimal]


def _category_lookup(services) -> Dict[int, object]:
    return {category.id: category for category in services.categories.find_all()}


def expenses_overview(services, anchor, view: ExpenseRangeView) -> ExpensesOverview:
    """Build the expenses view for the range containing the anchor date.

    Transactions come from the all_transactions read-model, so repeated calls
    reuse one query until a writer invalidates it.

    Args:
        services: Services container.
        anchor: Any date inside the wanted range.
        view: Range granularity.

    Returns:
        ExpensesOverview for the resolved range.
    """
    view = ExpenseRangeView(view)
    currency = services.settings.get_default_currency()
    expense_range = range_for(anchor, view)

    transactions = services.read_models.get(read_models.ALL_TRANSACTIONS)
    expenses = filter_expenses_for_range(transactions, expense_range)
    totals = totals_by_currency(expenses, currency)

    return ExpensesOverview(
        view=view,
        range=expense_range,
        currency=currency,
        totals_by_currency=totals,
        average_daily_by_currency=average_daily_totals(totals, expense_range),
        daily_totals=daily_totals(expenses, expense_range, currency),
        transaction_count=len(expenses),
        categories=_category_spending(services, expenses, currency),
        bill_summary=services.read_models.get(read_models.BILL_SUMMARY),
    )


def _category_spending(
    services, expenses: List[Transaction], currency: str
) -> List[CategorySpending]:
    categories = _category_lookup(services)
    by_category: Dict[Optional[int], List[Transaction]] = {}
    for transaction in expenses:
        by_category.setdefault(transaction.category_id, []).append(transaction)

    result = []
    for category_id, items in by_category.items():
        category = categories.get(category_id)
        result.append(
            CategorySpending(
                category_id=category_id,
                name=category.name if category else UNCATEGORIZED,
                color=category.color if category else None,
                totals_by_currency=totals_by_currency(items, currency),
                transaction_count=len(items),
            )
        )

    # Largest home-currency spend first
    result.sort(key=lambda c: (-c.totals_by_currency.get(currency, ZERO), c.name))
    return result


def monthly_statistics(services, month_of: date) -> Dict:
    """Income and expense totals per currency for the month containing a date.

    Returns:
        Dictionary with "range", "income", "expense" and "net"; the last three
        map currency code to Decimal.
    """
    currency = services.settings.get_default_currency()
    month_range = range_for(month_of, ExpenseRangeView.MONTH)
    transactions = services.transactions.get_transactions_by_date_range(
        month_range.start, month_range.end
    )

    income = totals_by_currency(
        filter_incomes_for_range(transactions, month_range), currency
    )
    expense = totals_by_currency(
        filter_expenses_for_range(transactions, month_range), currency
    )
    net = {
        code: income.get(code, ZERO) - expense.get(code, ZERO)
        for code in sorted(set(income) | set(expense))
    }
    return {"range": month_range, "income": income, "expense": expense, "net": net}


def _percent_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    if previous <= 0:
        return None
    return (current - previous) / previous * HUNDRED


def weekly_report(services, week_of, currency: Optional[str] = None) -> WeeklyReport:
    """Build the weekly finance report for the week containing a date.

    Only transactions in the report currency are counted. A transaction with
    no currency counts as the home currency. Balance adjustments are excluded.

    Args:
        services: Services container.
        week_of: Any date inside the wanted week.
        currency: Report currency. Defaults to the home currency.

    Returns:
        WeeklyReport for Monday..Sunday of that week.
    """
    home = services.settings.get_default_currency()
    currency = currency or home
    start = start_of_week(week_of)
    end = start + timedelta(days=6)
    prev_start = start - timedelta(days=7)

    fetched = services.transactions.get_transactions_by_date_range(prev_start, end)
    relevant = [
        t
        for t in fetched
        if not t.is_balance_adjustment and (t.currency or home) == currency
    ]
    week = [t for t in relevant if start <= t.transaction_date <= end]
    prev_week = [t for t in relevant if t.transaction_date < start]

    income_tx = [t for t in week if t.is_income]
    expense_tx = [t for t in week if t.is_expense]
    total_income = sum((t.amount for t in income_tx), ZERO)
    total_expense = sum((t.amount for t in expense_tx), ZERO)
    prev_income = sum((t.amount for t in prev_week if t.is_income), ZERO)
    prev_expense = sum((t.amount for t in prev_week if t.is_expense), ZERO)

    net = total_income - total_expense
    savings_rate = net / total_income * HUNDRED if total_income > 0 else ZERO

    daily = []
    for offset, label in enumerate(DAY_LABELS):
        day = start + timedelta(days=offset)
        daily.append(
            DailySummary(
                date=day,
                label=label,
                income=sum(
                    (t.amount for t in income_tx if t.transaction_date == day), ZERO
                ),
                expense=sum(
                    (t.amount for t in expense_tx if t.transaction_date == day), ZERO
                ),
            )
        )

    # Busiest needs some activity; quietest is the first day with the least
    busiest_day, busiest_total = None, ZERO
    quietest_day, quietest_total = None, None
    for summary in daily:
        total = summary.income + summary.expense
        if total > busiest_total:
            busiest_day, busiest_total = summary.label, total
        if quietest_total is None or total < quietest_total:
            quietest_day, quietest_total = summary.label, total

    count = len(income_tx) + len(expense_tx)
    return WeeklyReport(
        week_start=start,
        week_end=end,
        currency=currency,
        total_income=total_income,
        total_expense=total_expense,
        net=net,
        savings_rate=savings_rate,
        income_change_vs_prev_week=_percent_change(total_income, prev_income),
        expense_change_vs_prev_week=_percent_change(total_expense, prev_expense),
        daily_summaries=daily,
        top_expense_categories=_top_categories(services, expense_tx, total_expense),
        busiest_day=busiest_day,
        quietest_day=quietest_day,
        average_daily_spending=total_expense / 7,
        total_transactions=count,
        avg_per_transaction=(total_income + total_expense) / count if count else ZERO,
        highest_single_expense=max((t.amount for t in expense_tx), default=None),
        highest_single_income=max((t.amount for t in income_tx), default=None),
    )


def _top_categories(
    services, expense_tx: List[Transaction], total_expense: Decimal
) -> List[ReportCategoryItem]:
    if total_expense <= 0:
        return []

    categories = _category_lookup(services)
    amounts: Dict[Optional[int], Decimal] = {}
    for transaction in expense_tx:
        amounts[transaction.category_id] = (
            amounts.get(transaction.category_id, ZERO) + transaction.amount
        )

    items = []
    for category_id, amount in amounts.items():
        category = categories.get(category_id)
        items.append(
            ReportCategoryItem(
                category_id=category_id,
                name=category.name if category else UNCATEGORIZED,
                amount=amount,
                percentage=amount / total_expense * HUNDRED,
            )
        )
    items.sort(key=lambda item: (-item.amount, item.name))
    return items
