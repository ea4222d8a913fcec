"""Transaction service for database operations."""

from typing import List, Optional
from datetime import date, datetime, time
from decimal import Decimal
from models.transaction import Transaction, TRANSACTION_TYPES
from services import read_models
from tools.currency import validate_money
from logger import get_logger

logger = get_logger()

# SQL Query Constants
_TRANSACTION_SELECT_FIELDS = """id, title, amount, transaction_type, category_id, account_id,
       transaction_date, transaction_time, currency, is_cleared, is_balance_adjustment,
       description, created_at"""

_TRANSACTION_INSERT_FIELDS = """id, title, amount, transaction_type, category_id, account_id,
    transaction_date, transaction_time, currency, is_cleared, is_balance_adjustment,
    description"""

# Automatically generate placeholders from field count
_TRANSACTION_INSERT_PLACEHOLDERS = (
    f"({', '.join(['?'] * len(_TRANSACTION_INSERT_FIELDS.split(',')))})"
)


def _as_iso(value) -> str:
    return value.isoformat() if isinstance(value, date) else value


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db_manager, cache=None):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
            cache: Optional ReadModelCache to invalidate after writes.
        """
        self.db_manager = db_manager
        self.cache = cache

    def create(self, transaction: Transaction) -> Transaction:
        """Create a single transaction in the database.

        Args:
            transaction: Transaction object to insert.

        Returns:
            The same Transaction object.

        Raises:
            ValueError: If the transaction type, amount or date is invalid.
            sqlite3.IntegrityError: If the ID already exists or a reference is invalid.
        """
        with self.db_manager.connect() as conn:
            self.insert(conn, transaction)
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.TRANSACTION_WRITES)

        logger.info(
            f"Created {transaction.type} transaction {transaction.id[:8]}... "
            f"({transaction.amount} {transaction.currency or ''})".rstrip()
        )
        return transaction

    def insert(self, conn, transaction: Transaction) -> None:
        """Insert a transaction through an open connection without committing.

        Meant to run inside a caller-managed write transaction.
        """
        if transaction.type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {transaction.type}")
        if validate_money(transaction.amount) < 0:
            raise ValueError("Transaction amount must not be negative")
        if transaction.transaction_date is None:
            raise ValueError("Transaction date is required")

        row = transaction.to_dict()
        conn.execute(
            f"""
            INSERT INTO transactions ({_TRANSACTION_INSERT_FIELDS})
            VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
            """,
            (
                row["id"],
                row["title"],
                row["amount"],
                row["transaction_type"],
                row["category_id"],
                row["account_id"],
                row["transaction_date"],
                row["transaction_time"],
                row["currency"],
                row["is_cleared"],
                row["is_balance_adjustment"],
                row["description"],
            ),
        )

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Get a single transaction by ID.

        Args:
            transaction_id: The transaction ID.

        Returns:
            Transaction object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            return self.find_with(conn, transaction_id)

    def find_with(self, conn, transaction_id: str) -> Optional[Transaction]:
        """Like find, but reads through an already-open connection."""
        cursor = conn.execute(
            f"""
            SELECT {_TRANSACTION_SELECT_FIELDS}
            FROM transactions
            WHERE id = ?
            """,
            (transaction_id,),
        )
        row = cursor.fetchone()

        if row:
            return self._row_to_transaction(row)
        return None

    def find_all(self) -> List[Transaction]:
        """Get every transaction.

        Returns:
            List of Transaction objects, newest first.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_SELECT_FIELDS}
                FROM transactions
                ORDER BY transaction_date DESC, transaction_time DESC, rowid DESC
                """
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def find_by_account(self, account_id: int) -> List[Transaction]:
        """Get all transactions for a specific account.

        Args:
            account_id: The account ID to filter by.

        Returns:
            List of Transaction objects, newest first.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_SELECT_FIELDS}
                FROM transactions
                WHERE account_id = ?
                ORDER BY transaction_date DESC, transaction_time DESC, rowid DESC
                """,
                (account_id,),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def get_transactions_by_date_range(
        self,
        start_date,
        end_date,
        *,
        account_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        category_ids: Optional[List[int]] = None,
    ) -> List[Transaction]:
        """Get transactions within an inclusive date range.

        Args:
            start_date: Start date (date or ISO string YYYY-MM-DD).
            end_date: End date (date or ISO string YYYY-MM-DD).
            account_id: Optional account ID to filter by.
            transaction_type: Optional 'income', 'expense', or 'transfer'.
            category_ids: Optional list of category IDs to filter by.

        Returns:
            List of Transaction objects, newest first.
        """
        query = f"""
            SELECT {_TRANSACTION_SELECT_FIELDS}
            FROM transactions
            WHERE transaction_date >= ? AND transaction_date <= ?
        """

        params = [_as_iso(start_date), _as_iso(end_date)]

        if account_id is not None:
            query += " AND account_id = ?"
            params.append(account_id)

        if transaction_type is not None:
            query += " AND transaction_type = ?"
            params.append(transaction_type)

        if category_ids:
            placeholders = ", ".join(["?"] * len(category_ids))
            query += f" AND category_id IN ({placeholders})"
            params.extend(category_ids)

        query += " ORDER BY transaction_date DESC, transaction_time DESC, rowid DESC"

        with self.db_manager.connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def delete(self, transaction_id: str) -> bool:
        """Delete a transaction by ID.

        Account balances are not adjusted.

        Returns:
            True if the transaction was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            )
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.TRANSACTION_WRITES)
        return cursor.rowcount > 0

    def _row_to_transaction(self, row: tuple) -> Transaction:
        """Convert a database row to a Transaction object."""
        return Transaction(
            id=row[0],
            title=row[1],
            amount=Decimal(str(row[2])),
            type=row[3],
            category_id=row[4],
            account_id=row[5],
            transaction_date=date.fromisoformat(row[6]),
            transaction_time=time.fromisoformat(row[7]) if row[7] else None,
            currency=row[8],
            is_cleared=bool(row[9]),
            is_balance_adjustment=bool(row[10]),
            description=row[11],
            created_at=datetime.fromisoformat(row[12]) if row[12] else None,
        )
