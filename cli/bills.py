#!/usr/bin/env python3

import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from models.bill import BILL_FREQUENCIES, BILL_KINDS
from services import read_models
from tools.currency import format_amount
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List bills and subscriptions."""
    bills = services.bills.find_all()
    if not bills:
        logger.info("No bills found.")
        return

    for bill in bills:
        status = "" if bill.is_active else " [inactive]"
        logger.info(
            f"{bill.id:>4}  {bill.name:<24} {bill.kind:<12} {bill.frequency:<8} "
            f"{format_amount(bill.amount, bill.currency):>12}  "
            f"next {bill.next_due_date.isoformat()}{status}"
        )


def cmd_create(args, services):
    """Create a bill or subscription."""
    try:
        amount = Decimal(args.amount)
        due = date.fromisoformat(args.next_due)
    except (InvalidOperation, ValueError) as e:
        logger.error(f"Invalid bill details: {e}")
        sys.exit(1)

    currency = args.currency or services.settings.get_default_currency()
    try:
        bill = services.bills.create(
            args.name, amount, currency, args.frequency, due, kind=args.kind
        )
        logger.info(f"✓ Created {bill.kind} '{bill.name}' (ID: {bill.id})")
    except Exception as e:
        logger.error(f"Error creating bill: {e}")
        sys.exit(1)


def cmd_summary(args, services):
    """Show the recurring bills summary."""
    summary = services.read_models.get(read_models.BILL_SUMMARY)

    logger.info("\nRecurring")
    logger.info("=" * 80)
    logger.info(
        f"Active: {summary['total_bills']} "
        f"({summary['bills']} bills, {summary['subscriptions']} subscriptions)"
    )
    for currency, total in sorted(summary["monthly_totals"].items()):
        logger.info(f"Monthly ({currency}): {format_amount(total, currency)}")
    logger.info(f"Due in the next 7 days: {summary['upcoming_count']}")
    logger.info(f"Overdue: {summary['overdue_count']}")


def setup_parser(subparsers):
    """Setup bills subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "bills",
        help="Manage bills and subscriptions",
        description="Track recurring bills and subscriptions",
    )

    bills_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available bill commands",
        dest="subcommand",
        required=True,
    )

    list_parser = bills_subparsers.add_parser("list", help="List bills")
    list_parser.set_defaults(func=cmd_list)

    create_parser = bills_subparsers.add_parser("create", help="Create a bill")
    create_parser.add_argument("name", help="Bill name")
    create_parser.add_argument("amount", help="Amount per occurrence")
    create_parser.add_argument(
        "--frequency", choices=BILL_FREQUENCIES, default="monthly"
    )
    create_parser.add_argument("--kind", choices=BILL_KINDS, default="bill")
    create_parser.add_argument("--currency", help="Currency code (default: home)")
    create_parser.add_argument(
        "--next-due", required=True, help="Next due date (YYYY-MM-DD)"
    )
    create_parser.set_defaults(func=cmd_create)

    summary_parser = bills_subparsers.add_parser("summary", help="Monthly summary")
    summary_parser.set_defaults(func=cmd_summary)
