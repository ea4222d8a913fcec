"""Memoized read-models with explicit invalidation.

A read-model is a named, zero-argument loader whose result is cached until
someone invalidates it. Writers call invalidate() after committing so the next
reader gets fresh data. A read-model may also carry a stamp function, e.g.
date.today; a cached value whose stamp no longer matches is reloaded.
"""

import threading
from typing import Any, Callable, Dict, Iterable, Optional, Tuple
from logger import get_logger

logger = get_logger()

# Keys registered by Services
ALL_TRANSACTIONS = "all_transactions"
TOTAL_BALANCE = "total_balance"
MONTHLY_STATISTICS = "monthly_statistics"
DEFAULT_ACCOUNT = "default_account"
ALL_ACCOUNTS = "all_accounts"
BILL_SUMMARY = "bill_summary"
DEFAULT_CURRENCY = "default_currency"
EXPENSE_CATEGORIES = "expense_categories"
EXPENSES_OVERVIEW = "expenses_overview"

# Read-models made stale by each kind of committed write
TRANSACTION_WRITES = (ALL_TRANSACTIONS, MONTHLY_STATISTICS, EXPENSES_OVERVIEW)
ACCOUNT_WRITES = (ALL_ACCOUNTS, DEFAULT_ACCOUNT, TOTAL_BALANCE)
BILL_WRITES = (BILL_SUMMARY, EXPENSES_OVERVIEW)
CATEGORY_WRITES = (EXPENSE_CATEGORIES, EXPENSES_OVERVIEW)
CURRENCY_WRITES = (DEFAULT_CURRENCY, MONTHLY_STATISTICS, EXPENSES_OVERVIEW)

_MISSING = object()


class ReadModelCache:
    """Registry of memoized loaders keyed by name."""

    def __init__(self):
        self._loaders: Dict[str, Callable[[], Any]] = {}
        self._stamps: Dict[str, Optional[Callable[[], Any]]] = {}
        self._values: Dict[str, Tuple[Any, Any]] = {}
        self._lock = threading.RLock()

    def register(
        self,
        key: str,
        loader: Callable[[], Any],
        stamp: Optional[Callable[[], Any]] = None,
    ) -> None:
        """Register (or replace) the loader for a key. Drops any cached value.

        Args:
            key: Read-model name.
            loader: Zero-argument function producing the value.
            stamp: Optional zero-argument function; the cached value is only
                reused while it returns the same thing as at load time.
        """
        with self._lock:
            self._loaders[key] = loader
            self._stamps[key] = stamp
            self._values.pop(key, None)

    def keys(self):
        return list(self._loaders)

    def get(self, key: str) -> Any:
        """Return the cached value for a key, loading it if stale.

        Raises:
            KeyError: If no loader is registered for the key.
        """
        with self._lock:
            loader = self._loader(key)
            stamp = self._current_stamp(key)
            cached = self._values.get(key, _MISSING)
            if cached is not _MISSING and cached[0] == stamp:
                return cached[1]

            value = loader()
            self._values[key] = (stamp, value)
            return value

    def is_cached(self, key: str) -> bool:
        with self._lock:
            self._loader(key)
            cached = self._values.get(key, _MISSING)
            return cached is not _MISSING and cached[0] == self._current_stamp(key)

    def invalidate(self, key: str) -> None:
        """Mark a key stale so the next get() reloads it.

        Raises:
            KeyError: If no loader is registered for the key.
        """
        with self._lock:
            self._loader(key)
            if self._values.pop(key, _MISSING) is not _MISSING:
                logger.debug(f"Invalidated read-model '{key}'")

    def invalidate_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.invalidate(key)

    def invalidate_all(self) -> None:
        with self._lock:
            self._values.clear()

    def _loader(self, key: str) -> Callable[[], Any]:
        try:
            return self._loaders[key]
        except KeyError:
            raise KeyError(f"Unknown read-model: {key}") from None

    def _current_stamp(self, key: str) -> Any:
        stamp = self._stamps.get(key)
        return stamp() if stamp is not None else None


def invalidate_after_write(cache: Optional[ReadModelCache], keys: Iterable[str]) -> None:
    """Invalidate keys on an optional cache; services built without one skip it."""
    if cache is not None:
        cache.invalidate_many(keys)
