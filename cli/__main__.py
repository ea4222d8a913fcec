#!/usr/bin/env python3
"""
Pocketledger CLI - Unified command-line interface for tracking expenses.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    accounts     Manage accounts
    categories   Manage transaction categories
    transactions Quick-add, list and export transactions
    bills        Manage bills and subscriptions
    reports      Expense overview and weekly report
    settings     User settings
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli accounts create
    python -m cli accounts set-default wallet
    python -m cli transactions quick-add "Food & Dining" 25.50
    python -m cli reports expenses --view week --daily
    python -m cli reports weekly --date 2024-03-06
"""

import sys
import argparse
from cli import accounts, bills, categories, migrate, reports, settings, transactions
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging

# Commands whose handlers take the services container
_SERVICE_COMMANDS = (
    "accounts",
    "bills",
    "categories",
    "reports",
    "settings",
    "transactions",
)


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Pocketledger - Personal expense tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    accounts.setup_parser(subparsers)
    categories.setup_parser(subparsers)
    transactions.setup_parser(subparsers)
    bills.setup_parser(subparsers)
    reports.setup_parser(subparsers)
    settings.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            if args.command in _SERVICE_COMMANDS:
                args.func(args, Services(config))
            elif args.command == "migrate":
                # Migrate commands need db_manager for raw database operations
                args.func(args, DatabaseManager(config))
            else:
                args.func(args)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
