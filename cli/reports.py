#!/usr/bin/env python3

import sys
from datetime import date
from tools.currency import format_amount
from tools.expense_range import ExpenseRangeView
from tools.reports import expenses_overview, weekly_report
from logger import get_logger

logger = get_logger()


def _anchor(args) -> date:
    if not args.date:
        return date.today()
    try:
        return date.fromisoformat(args.date)
    except ValueError:
        logger.error(f"Invalid date '{args.date}'. Use YYYY-MM-DD.")
        sys.exit(1)


def _format_totals(totals) -> str:
    return ", ".join(
        format_amount(amount, currency) for currency, amount in sorted(totals.items())
    )


def cmd_expenses(args, services):
    """Show spending for a day, week, month, six months or year."""
    overview = expenses_overview(services, _anchor(args), ExpenseRangeView(args.view))
    expense_range = overview.range

    logger.info(
        f"\nExpenses {expense_range.start.isoformat()} .. {expense_range.end.isoformat()}"
        f" ({overview.view.value}, {expense_range.total_days} days)"
    )
    logger.info("=" * 80)
    logger.info(f"Total: {_format_totals(overview.totals_by_currency)}")
    logger.info(f"Daily average: {_format_totals(overview.average_daily_by_currency)}")
    logger.info(f"Transactions: {overview.transaction_count}")

    if overview.categories:
        logger.info("\nBy category:")
        for item in overview.categories:
            logger.info(
                f"  {item.name:<28} {_format_totals(item.totals_by_currency):>20}"
                f"  ({item.transaction_count})"
            )

    if args.daily:
        logger.info("\nDaily breakdown:")
        for day in overview.daily_totals:
            totals = _format_totals(day.totals_by_currency) if day.transaction_count else "-"
            logger.info(f"  {day.date.isoformat()}  {totals}")

    summary = overview.bill_summary
    logger.info(
        f"\nRecurring: {summary['total_bills']} active, "
        f"{summary['upcoming_count']} due soon, {summary['overdue_count']} overdue"
    )


def cmd_weekly(args, services):
    """Show the weekly finance report."""
    report = weekly_report(services, _anchor(args), args.currency)

    def sym(amount):
        return format_amount(amount, report.currency)

    logger.info(
        f"\nWeek {report.week_start.isoformat()} .. {report.week_end.isoformat()}"
        f" ({report.currency})"
    )
    logger.info("=" * 80)
    logger.info(f"Income: {sym(report.total_income)}")
    logger.info(f"Expenses: {sym(report.total_expense)}")
    logger.info(f"Net: {sym(report.net)}")
    logger.info(f"Savings rate: {report.savings_rate:.1f}%")
    if report.expense_change_vs_prev_week is not None:
        logger.info(f"Spending vs last week: {report.expense_change_vs_prev_week:+.1f}%")
    if report.income_change_vs_prev_week is not None:
        logger.info(f"Income vs last week: {report.income_change_vs_prev_week:+.1f}%")

    logger.info("\nDay   Income        Expense")
    for day in report.daily_summaries:
        logger.info(f"{day.label:<5} {sym(day.income):>12}  {sym(day.expense):>12}")

    if report.top_expense_categories:
        logger.info("\nTop categories:")
        for item in report.top_expense_categories:
            logger.info(f"  {item.name:<28} {sym(item.amount):>12}  {item.percentage:.0f}%")

    logger.info("\nInsights:")
    logger.info(f"  Average daily spend: {sym(report.average_daily_spending)}")
    logger.info(f"  Transactions: {report.total_transactions}")
    logger.info(f"  Average per transaction: {sym(report.avg_per_transaction)}")
    if report.busiest_day:
        logger.info(f"  Busiest day: {report.busiest_day}")
    if report.quietest_day:
        logger.info(f"  Quietest day: {report.quietest_day}")
    if report.highest_single_expense is not None:
        logger.info(f"  Largest expense: {sym(report.highest_single_expense)}")


def setup_parser(subparsers):
    """Setup reports subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "reports",
        help="Spending reports",
        description="Expense overview and weekly finance report",
    )

    reports_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available reports",
        dest="subcommand",
        required=True,
    )

    expenses_parser = reports_subparsers.add_parser(
        "expenses", help="Spending for a selected range"
    )
    expenses_parser.add_argument(
        "--view",
        choices=[view.value for view in ExpenseRangeView],
        default=ExpenseRangeView.DAY.value,
        help="Range granularity (default: day)",
    )
    expenses_parser.add_argument("--date", help="Anchor date (YYYY-MM-DD, default: today)")
    expenses_parser.add_argument(
        "--daily", action="store_true", help="Include the per-day breakdown"
    )
    expenses_parser.set_defaults(func=cmd_expenses)

    weekly_parser = reports_subparsers.add_parser("weekly", help="Weekly finance report")
    weekly_parser.add_argument("--date", help="Any day of the week (default: today)")
    weekly_parser.add_argument("--currency", help="Report currency (default: home)")
    weekly_parser.set_defaults(func=cmd_weekly)
