"""Helper utilities for tests."""

from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
import sqlite3

from cli.migrate import apply_pending
from models.transaction import Transaction


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    apply_pending(conn, migrations_dir)


def make_transaction(
    amount,
    on: date,
    type: str = "expense",
    currency="USD",
    **fields,
) -> Transaction:
    """Build an in-memory transaction with sensible defaults."""
    fields.setdefault("title", f"{type} {amount}")
    return Transaction.new(
        amount=Decimal(str(amount)),
        type=type,
        transaction_date=on,
        currency=currency,
        **fields,
    )


def at(day: date, hour: int = 12, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))
