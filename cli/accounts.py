#!/usr/bin/env python3

import sys
from decimal import Decimal, InvalidOperation
from models.account import ACCOUNT_TYPES
from services import read_models
from tools.currency import format_amount, is_supported
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List all accounts in the database."""
    accounts = services.read_models.get(read_models.ALL_ACCOUNTS)

    if not accounts:
        logger.info("No accounts found.")
        return

    logger.info("\nAccounts:")
    logger.info("=" * 80)
    for account in accounts:
        marker = " (default)" if account.is_default else ""
        logger.info(f"ID: {account.id}{marker}")
        logger.info(f"Name: {account.name}")
        logger.info(f"Type: {account.type}")
        logger.info(f"Balance: {format_amount(account.balance, account.currency)}")
        if account.description:
            logger.info(f"Description: {account.description}")
        if not account.is_active:
            logger.info("Status: inactive")
        logger.info("-" * 80)

    logger.info(f"\nTotal accounts: {len(accounts)}")
    totals = services.read_models.get(read_models.TOTAL_BALANCE)
    for currency, total in sorted(totals.items()):
        logger.info(f"Total balance ({currency}): {format_amount(total, currency)}")


def cmd_create(args, services):
    """Interactively create a new account."""
    print("\nCreate New Account")
    print("=" * 80)

    name = input("Account name (e.g., wallet): ").strip()
    if not name:
        logger.error("Account name cannot be empty.")
        sys.exit(1)

    print(f"\nAvailable account types: {', '.join(ACCOUNT_TYPES)}")
    account_type = input("Account type [cash]: ").strip() or "cash"
    if account_type not in ACCOUNT_TYPES:
        logger.error(f"Invalid account type '{account_type}'.")
        logger.error(f"Must be one of: {', '.join(ACCOUNT_TYPES)}")
        sys.exit(1)

    home = services.settings.get_default_currency()
    currency = input(f"Currency [{home}]: ").strip().upper() or home
    if not is_supported(currency):
        logger.error(f"Unsupported currency '{currency}'.")
        sys.exit(1)

    balance_input = input("Opening balance [0]: ").strip() or "0"
    try:
        balance = Decimal(balance_input)
    except InvalidOperation:
        logger.error(f"Invalid balance '{balance_input}'.")
        sys.exit(1)

    description = input("Description (optional, press Enter to skip): ").strip()

    try:
        account = services.accounts.create(
            name, account_type, currency, balance, description or None
        )

        logger.info(f"\n✓ Account created successfully with ID: {account.id}")
        logger.info(f"  Name: {account.name}")
        logger.info(f"  Type: {account.type}")
        logger.info(f"  Balance: {format_amount(account.balance, account.currency)}")

    except Exception as e:
        logger.error(f"Error creating account: {e}")
        sys.exit(1)


def cmd_set_default(args, services):
    """Mark an account as the default account for quick-add."""
    account = services.accounts.find_by_name(args.account_name)
    if not account:
        logger.error(f"Account '{args.account_name}' not found.")
        logger.info("Use 'python -m cli accounts list' to see available accounts.")
        sys.exit(1)

    try:
        services.accounts.set_default(account.id)
        logger.info(f"✓ '{account.name}' is now the default account")
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)


def setup_parser(subparsers):
    """Setup accounts subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "accounts",
        help="Manage accounts",
        description="Create, list and choose the default account",
    )

    accounts_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available account commands",
        dest="subcommand",
        required=True,
    )

    list_parser = accounts_subparsers.add_parser("list", help="List all accounts")
    list_parser.set_defaults(func=cmd_list)

    create_parser = accounts_subparsers.add_parser(
        "create", help="Create a new account interactively"
    )
    create_parser.set_defaults(func=cmd_create)

    default_parser = accounts_subparsers.add_parser(
        "set-default", help="Set the default account used by quick-add"
    )
    default_parser.add_argument("account_name", help="Name of the account")
    default_parser.set_defaults(func=cmd_set_default)
