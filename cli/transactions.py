#!/usr/bin/env python3

import sys
import csv
from datetime import date
from pathlib import Path
from services.quick_add import QuickAddError
from tools.currency import format_amount
from logger import get_logger

logger = get_logger()


def _resolve_category(services, category_input):
    """Look up a category by ID first, then by name."""
    try:
        return services.categories.find(int(category_input))
    except ValueError:
        return services.categories.find_by_name(category_input)


def cmd_quick_add(args, services):
    """Record an expense against the default account.

    Args:
        args: Parsed command-line arguments with category and amount
        services: Services container with the quick-add service
    """
    category = _resolve_category(services, args.category)
    if not category:
        logger.error(f"Category '{args.category}' not found.")
        logger.info("Use 'python -m cli categories list --type expense' to see categories.")
        sys.exit(1)

    try:
        result = services.quick_add.submit(
            category.id, args.amount, submission_id=args.submission_id
        )
    except QuickAddError as e:
        logger.error(str(e))
        sys.exit(1)

    transaction = result.transaction
    account = result.account
    if result.duplicate:
        logger.info(f"Expense {transaction.id} was already recorded.")
        return

    logger.info(
        f"✓ Added {format_amount(transaction.amount, transaction.currency)} "
        f"for {transaction.title}"
    )
    logger.info(
        f"  {account.name}: {format_amount(result.previous_balance, account.currency)}"
        f" -> {format_amount(account.balance, account.currency)}"
    )


def _parse_range(args):
    start = date.fromisoformat(args.start_date) if args.start_date else date.min
    end = date.fromisoformat(args.end_date) if args.end_date else date.max
    return start, end


def cmd_list(args, services):
    """List transactions, newest first."""
    try:
        start, end = _parse_range(args)
    except ValueError as e:
        logger.error(f"Invalid date format: {e}")
        logger.error("Use YYYY-MM-DD for --start-date and --end-date")
        sys.exit(1)

    transactions = services.transactions.get_transactions_by_date_range(
        start, end, transaction_type=args.type
    )
    if not transactions:
        logger.info("No transactions found for the specified criteria.")
        return

    home = services.settings.get_default_currency()
    for t in transactions:
        sign = "-" if t.is_expense else "+"
        logger.info(
            f"{t.transaction_date.isoformat()}  {t.title[:30]:<30} "
            f"{sign}{format_amount(t.amount, t.currency or home):>14}  {t.id[:8]}"
        )

    logger.info(f"\nTotal transactions: {len(transactions)}")


def cmd_export(args, services):
    """Export transactions to CSV.

    Args:
        args: Parsed command-line arguments
        services: Services container with transactions, accounts, categories services
    """
    try:
        start, end = _parse_range(args)
    except ValueError as e:
        logger.error(f"Invalid date format: {e}")
        sys.exit(1)

    transactions = services.transactions.get_transactions_by_date_range(start, end)
    if not transactions:
        logger.info("No transactions found for the specified criteria.")
        return

    account_map = {acc.id: acc.name for acc in services.accounts.find_all()}
    category_map = {cat.id: cat.name for cat in services.categories.find_all()}

    try:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="") as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(
                [
                    "id",
                    "transaction_date",
                    "transaction_time",
                    "title",
                    "transaction_type",
                    "amount",
                    "currency",
                    "account_name",
                    "category_name",
                    "is_cleared",
                ]
            )
            for t in transactions:
                writer.writerow(
                    [
                        t.id,
                        t.transaction_date.isoformat(),
                        t.transaction_time.strftime("%H:%M") if t.transaction_time else "",
                        t.title,
                        t.type,
                        str(t.amount),
                        t.currency or "",
                        account_map.get(t.account_id, ""),
                        category_map.get(t.category_id, ""),
                        int(t.is_cleared),
                    ]
                )

        logger.info(f"✓ Exported {len(transactions)} transaction(s) to: {output_path}")

    except Exception as e:
        logger.error(f"Error exporting transactions: {e}")
        sys.exit(1)


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Record and list transactions",
        description="Quick-add expenses, list and export transactions",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    quick_add_parser = transactions_subparsers.add_parser(
        "quick-add", help="Add an expense to the default account"
    )
    quick_add_parser.add_argument("category", help="Expense category ID or name")
    quick_add_parser.add_argument("amount", help="Amount, e.g. 25.50")
    quick_add_parser.add_argument(
        "--submission-id",
        help="Idempotency key; repeating it will not record the expense twice",
    )
    quick_add_parser.set_defaults(func=cmd_quick_add)

    list_parser = transactions_subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument("--start-date", help="Start date (YYYY-MM-DD)")
    list_parser.add_argument("--end-date", help="End date (YYYY-MM-DD)")
    list_parser.add_argument(
        "--type", choices=["income", "expense", "transfer"], help="Filter by type"
    )
    list_parser.set_defaults(func=cmd_list)

    export_parser = transactions_subparsers.add_parser(
        "export", help="Export transactions to CSV"
    )
    export_parser.add_argument("--start-date", help="Start date (YYYY-MM-DD)")
    export_parser.add_argument("--end-date", help="End date (YYYY-MM-DD)")
    export_parser.add_argument(
        "--output", "-o", required=True, help="Output CSV file path"
    )
    export_parser.set_defaults(func=cmd_export)
