#!/usr/bin/env python3

import sys
from pathlib import Path
from models.category import CATEGORY_TYPES
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List categories, optionally only those for one transaction type."""
    if args.type:
        categories = services.categories.find_by_type(args.type)
    else:
        categories = services.categories.find_all()

    if not categories:
        logger.info("No categories found.")
        logger.info("Use 'python -m cli categories seed' to create the defaults.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        status = "" if category.is_active else " [inactive]"
        logger.info(
            f"{category.id:>4}  {category.name:<28} {category.type:<8} "
            f"{category.color}  {category.icon or ''}{status}"
        )

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_create(args, services):
    """Create a category from command-line arguments."""
    try:
        category = services.categories.create(
            args.name,
            args.type,
            color=args.color,
            icon=args.icon,
            description=args.description,
        )

        logger.info(f"✓ Category created successfully with ID: {category.id}")
        logger.info(f"  Name: {category.name}")
        logger.info(f"  Type: {category.type}")

    except Exception as e:
        logger.error(f"Error creating category: {e}")
        sys.exit(1)


def cmd_seed(args, services):
    """Create the default income and expense categories."""
    path = Path(args.file) if args.file else None
    if path is not None and not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    try:
        created = services.categories.seed_defaults(path)
        logger.info(f"✓ Created {created} categor{'y' if created == 1 else 'ies'}")
    except Exception as e:
        logger.error(f"Error seeding categories: {e}")
        sys.exit(1)


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List, create and seed transaction categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List categories")
    list_parser.add_argument(
        "--type", choices=["expense", "income"], help="Only categories for this type"
    )
    list_parser.set_defaults(func=cmd_list)

    create_parser = categories_subparsers.add_parser("create", help="Create a category")
    create_parser.add_argument("name", help="Category name")
    create_parser.add_argument(
        "--type", choices=CATEGORY_TYPES, default="expense", help="Category type"
    )
    create_parser.add_argument("--color", default="#CDAF56", help="Hex color")
    create_parser.add_argument("--icon", help="Icon name")
    create_parser.add_argument("--description", help="Description")
    create_parser.set_defaults(func=cmd_create)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Create the default categories"
    )
    seed_parser.add_argument("--file", help="YAML file to load instead of the defaults")
    seed_parser.set_defaults(func=cmd_seed)
