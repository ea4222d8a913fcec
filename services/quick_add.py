"""Quick-add expense flow.

Quick-add records an expense from just a category and an amount. It is charged
to the default account in the home currency. The insert and the balance
debit are committed as one write transaction, so either both happen or
neither does. The default account is checked again inside that transaction;
if it changed since lookup, the submission is retried against the new one.
Read-models that depend on transactions or balances are invalidated only after
the commit.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from models.account import Account
from models.transaction import Transaction
from services import read_models
from tools.currency import validate_money
from logger import get_logger

logger = get_logger()

# Read-models refreshed after a successful quick-add
INVALIDATED_READ_MODELS = read_models.TRANSACTION_WRITES + read_models.ACCOUNT_WRITES

# Retries when the default account changes between lookup and write
_MAX_ATTEMPTS = 3


class QuickAddError(Exception):
    """Raised when a quick-add is rejected or cannot be saved.

    Attributes:
        reason: Machine-readable code, one of MESSAGES.
    """

    MESSAGES = {
        "missing_category": "Please select a category first",
        "empty_amount": "Please enter an amount",
        "invalid_amount": "Please enter a valid amount",
        "no_default_account": "No default account set. Please set a default account first.",
        "persist_failed": "Failed to add expense",
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or self.MESSAGES.get(reason, reason))


@dataclass
class QuickAddResult:
    """Outcome of a successful quick-add.

    Attributes:
        transaction: The recorded expense.
        account: The default account after the debit.
        previous_balance: Balance before the debit.
        duplicate: True if the submission ID had already been recorded and
            nothing new was written.
    """

    transaction: Transaction
    account: Account
    previous_balance: Decimal
    duplicate: bool = False


def parse_amount(amount_text: Optional[str]) -> Decimal:
    """Parse user-entered amount text into a positive Decimal.

    At most two decimal places are accepted, up to MAX_AMOUNT.

    Raises:
        QuickAddError: 'empty_amount' or 'invalid_amount'.
    """
    text = (amount_text or "").strip()
    if not text:
        raise QuickAddError("empty_amount")

    try:
        amount = validate_money(text)
    except ValueError:
        raise QuickAddError("invalid_amount") from None

    if amount <= 0:
        raise QuickAddError("invalid_amount")
    return amount


class QuickAddService:
    """Validates and records quick-add expenses."""

    def __init__(self, db_manager, accounts, categories, transactions, settings, cache):
        self.db_manager = db_manager
        self.accounts = accounts
        self.categories = categories
        self.transactions = transactions
        self.settings = settings
        self.cache = cache
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def submit(
        self,
        category_id: Optional[int],
        amount_text: Optional[str],
        *,
        submission_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> QuickAddResult:
        """Record an expense against the default account.

        Args:
            category_id: Selected expense category ID.
            amount_text: Amount as typed by the user, e.g. "25.50".
            submission_id: Optional client-generated ID. Re-submitting the same
                ID returns the existing transaction without debiting again.
            now: Timestamp to record. Defaults to the current local time.

        Returns:
            QuickAddResult for the recorded (or previously recorded) expense.

        Raises:
            QuickAddError: If validation fails or the write is rolled back.
        """
        category = self._require_category(category_id)
        amount = parse_amount(amount_text)
        now = now or datetime.now()

        for _ in range(_MAX_ATTEMPTS):
            account = self.accounts.get_default()
            if account is None:
                raise QuickAddError("no_default_account")

            currency = self.settings.get_default_currency()
            if account.currency != currency:
                logger.warning(
                    f"Quick-add in {currency} debits account '{account.name}' "
                    f"held in {account.currency} without conversion"
                )

            transaction = Transaction.new(
                title=category.name,
                amount=amount,
                type="expense",
                transaction_date=now.date(),
                id=submission_id,
                category_id=category.id,
                account_id=account.id,
                transaction_time=now.time().replace(second=0, microsecond=0),
                currency=currency,
                is_cleared=True,
            )

            with self._lock_for(account.id):
                result = self._record(transaction)
            if result is not None:
                break
        else:
            logger.error("Quick-add gave up: default account kept changing")
            raise QuickAddError("persist_failed")

        if result.duplicate:
            logger.info(f"Quick-add {transaction.id} already recorded, skipping")
            return result

        self.cache.invalidate_many(INVALIDATED_READ_MODELS)
        logger.info(
            f"Quick-added {amount} {currency} to '{category.name}' from "
            f"'{result.account.name}' (balance {result.previous_balance} -> "
            f"{result.account.balance})"
        )
        return result

    def _require_category(self, category_id: Optional[int]):
        if category_id is None:
            raise QuickAddError("missing_category")

        category = self.categories.find(category_id)
        if category is None or not category.is_active:
            raise QuickAddError("missing_category")
        if not category.applies_to("expense"):
            raise QuickAddError("missing_category")
        return category

    def _record(self, transaction: Transaction) -> Optional[QuickAddResult]:
        """Insert the transaction and debit the account in one write transaction.

        The default account is read again under the write lock. Returns None,
        with nothing written, if it is no longer transaction.account_id.
        """
        with self.db_manager.connect() as conn:
            try:
                if not conn.in_transaction:
                    conn.execute("BEGIN IMMEDIATE")

                existing = self.transactions.find_with(conn, transaction.id)
                if existing is not None:
                    account = self.accounts.find_with(conn, existing.account_id)
                    conn.rollback()
                    return QuickAddResult(
                        transaction=existing,
                        account=account,
                        previous_balance=account.balance,
                        duplicate=True,
                    )

                current = self.accounts.get_default_with(conn)
                if current is None:
                    conn.rollback()
                    raise QuickAddError("no_default_account")
                if current.id != transaction.account_id:
                    conn.rollback()
                    logger.warning(
                        f"Default account changed to '{current.name}' during quick-add, retrying"
                    )
                    return None

                self.transactions.insert(conn, transaction)
                previous, _ = self.accounts.debit(
                    conn, transaction.account_id, transaction.amount
                )
                conn.commit()
            except QuickAddError:
                raise
            except Exception as e:
                conn.rollback()
                logger.error(f"Quick-add rolled back: {e}")
                raise QuickAddError("persist_failed") from e

            account = self.accounts.find_with(conn, transaction.account_id)

        return QuickAddResult(
            transaction=transaction, account=account, previous_balance=previous
        )

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(account_id, threading.Lock())
