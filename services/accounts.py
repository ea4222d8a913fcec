"""Account service for database operations."""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from models.account import Account, ACCOUNT_TYPES
from services import read_models
from tools.currency import validate_money
from logger import get_logger

logger = get_logger()

_ACCOUNT_SELECT_FIELDS = (
    "id, name, type, balance, currency, is_default, is_active, description"
)


class AccountService:
    """Service for managing accounts and their balances."""

    def __init__(self, db_manager, cache=None):
        """Initialize the account service.

        Args:
            db_manager: Database manager instance for database operations.
            cache: Optional ReadModelCache to invalidate after writes.
        """
        self.db_manager = db_manager
        self.cache = cache

    def find_all(self) -> List[Account]:
        """Get all accounts from the database.

        Returns:
            List of Account objects, ordered by id.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_ACCOUNT_SELECT_FIELDS} FROM accounts ORDER BY id"
            )
            return [self._row_to_account(row) for row in cursor.fetchall()]

    def find(self, account_id: int) -> Optional[Account]:
        """Get a single account by ID.

        Args:
            account_id: The account ID to find.

        Returns:
            Account object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            return self.find_with(conn, account_id)

    def find_with(self, conn, account_id: int) -> Optional[Account]:
        """Like find, but reads through an already-open connection."""
        cursor = conn.execute(
            f"SELECT {_ACCOUNT_SELECT_FIELDS} FROM accounts WHERE id = ?",
            (account_id,),
        )
        row = cursor.fetchone()
        return self._row_to_account(row) if row else None

    def find_by_name(self, name: str) -> Optional[Account]:
        """Get a single account by name.

        Args:
            name: The account name to find.

        Returns:
            Account object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_ACCOUNT_SELECT_FIELDS} FROM accounts WHERE name = ?",
                (name,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_account(row)
            return None

    def get_default(self) -> Optional[Account]:
        """Get the default account, if one is set and still active.

        Returns:
            Account object, or None if there is no active default account.
        """
        with self.db_manager.connect() as conn:
            return self.get_default_with(conn)

    def get_default_with(self, conn) -> Optional[Account]:
        """Like get_default, but reads through an already-open connection."""
        cursor = conn.execute(
            f"""
            SELECT {_ACCOUNT_SELECT_FIELDS}
            FROM accounts
            WHERE is_default = 1 AND is_active = 1
            """
        )
        row = cursor.fetchone()
        return self._row_to_account(row) if row else None

    def create(
        self,
        name: str,
        account_type: str,
        currency: str,
        balance: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> Account:
        """Create a new account.

        Args:
            name: Account name (should be unique).
            account_type: One of ACCOUNT_TYPES (e.g., "cash").
            currency: ISO currency code of the account.
            balance: Opening balance.
            description: Optional human-readable description.

        Returns:
            The created Account object with id populated.

        Raises:
            ValueError: If account_type is not supported or the balance is not
                a storable amount.
            sqlite3.IntegrityError: If the name is already taken.
        """
        if account_type not in ACCOUNT_TYPES:
            raise ValueError(f"Unknown account type: {account_type}")
        balance = validate_money(balance)

        currency = currency.upper()
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO accounts (name, type, balance, currency, description)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, account_type, float(balance), currency, description),
            )
            conn.commit()
            account_id = cursor.lastrowid

        read_models.invalidate_after_write(self.cache, read_models.ACCOUNT_WRITES)
        logger.info(f"Created account '{name}' (ID: {account_id})")
        return Account(
            id=account_id,
            name=name,
            type=account_type,
            balance=Decimal(str(balance)),
            currency=currency,
            description=description,
        )

    def update(self, account: Account) -> bool:
        """Persist all editable fields of an account.

        The default flag is not touched here; use set_default.

        Args:
            account: Account with updated values.

        Returns:
            True if the account was updated, False if not found.

        Raises:
            ValueError: If the balance is not a storable amount.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE accounts
                SET name = ?, type = ?, balance = ?, currency = ?,
                    is_active = ?, description = ?
                WHERE id = ?
                """,
                (
                    account.name,
                    account.type,
                    float(validate_money(account.balance)),
                    account.currency,
                    int(account.is_active),
                    account.description,
                    account.id,
                ),
            )
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.ACCOUNT_WRITES)
        return cursor.rowcount > 0

    def set_default(self, account_id: int) -> Account:
        """Make an account the single default account.

        Args:
            account_id: The account ID to mark as default.

        Returns:
            The updated Account.

        Raises:
            ValueError: If the account does not exist or is inactive.
        """
        with self.db_manager.connect() as conn:
            account = self.find_with(conn, account_id)
            if account is None:
                raise ValueError(f"Account with ID {account_id} not found")
            if not account.is_active:
                raise ValueError(f"Account '{account.name}' is not active")

            try:
                conn.execute("UPDATE accounts SET is_default = 0 WHERE is_default = 1")
                conn.execute(
                    "UPDATE accounts SET is_default = 1 WHERE id = ?", (account_id,)
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        account.is_default = True
        read_models.invalidate_after_write(self.cache, read_models.ACCOUNT_WRITES)
        logger.info(f"Default account set to '{account.name}'")
        return account

    def debit(self, conn, account_id: int, amount: Decimal) -> Tuple[Decimal, Decimal]:
        """Subtract an amount from an account balance without committing.

        Meant to run inside a caller-managed write transaction.

        Args:
            conn: Open connection with an active write transaction.
            account_id: The account to debit.
            amount: Positive amount to subtract.

        Returns:
            Tuple of (previous_balance, new_balance).

        Raises:
            ValueError: If the account does not exist or the new balance is
                out of range.
        """
        account = self.find_with(conn, account_id)
        if account is None:
            raise ValueError(f"Account with ID {account_id} not found")

        new_balance = validate_money(account.balance - amount)
        conn.execute(
            "UPDATE accounts SET balance = ? WHERE id = ?",
            (float(new_balance), account_id),
        )
        return account.balance, new_balance

    def total_balance_by_currency(self) -> Dict[str, Decimal]:
        """Sum balances of active accounts per currency.

        Returns:
            Dictionary mapping currency code to total balance.
        """
        totals: Dict[str, Decimal] = {}
        for account in self.find_all():
            if not account.is_active:
                continue
            totals[account.currency] = (
                totals.get(account.currency, Decimal("0")) + account.balance
            )
        return totals

    def delete(self, account_id: int) -> bool:
        """Delete an account by ID.

        Args:
            account_id: The account ID to delete.

        Returns:
            True if account was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.ACCOUNT_WRITES)
        return cursor.rowcount > 0

    def _row_to_account(self, row: tuple) -> Account:
        """Convert a database row to an Account object."""
        return Account(
            id=row[0],
            name=row[1],
            type=row[2],
            balance=Decimal(str(row[3])),
            currency=row[4],
            is_default=bool(row[5]),
            is_active=bool(row[6]),
            description=row[7],
        )
