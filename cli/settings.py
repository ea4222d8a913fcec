#!/usr/bin/env python3

import sys
from tools.currency import all_currency_codes, get_currency_name, get_currency_symbol
from logger import get_logger

logger = get_logger()


def cmd_currency(args, services):
    """Show or change the home currency."""
    if not args.code:
        code = services.settings.get_default_currency()
        logger.info(f"Home currency: {code} ({get_currency_symbol(code)}, {get_currency_name(code)})")
        return

    try:
        code = services.settings.set_default_currency(args.code)
    except ValueError as e:
        logger.error(str(e))
        logger.info(f"Supported currencies: {', '.join(all_currency_codes())}")
        sys.exit(1)

    logger.info(f"✓ Home currency set to {code}")


def setup_parser(subparsers):
    """Setup settings subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "settings",
        help="User settings",
        description="View and change user settings",
    )

    settings_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available settings",
        dest="subcommand",
        required=True,
    )

    currency_parser = settings_subparsers.add_parser(
        "currency", help="Show or set the home currency"
    )
    currency_parser.add_argument("code", nargs="?", help="New currency code, e.g. USD")
    currency_parser.set_defaults(func=cmd_currency)
