"""Settings service for persisted user preferences."""

from typing import Optional
from config import FALLBACK_CURRENCY
from services import read_models
from tools.currency import is_supported, resolve_currency
from logger import get_logger

logger = get_logger()

DEFAULT_CURRENCY_KEY = "default_currency"


class SettingsService:
    """Key/value settings stored in the database.

    Args:
        db_manager: Database manager instance for database operations.
        configured_currency: Home currency from the config file, used when the
            user has not chosen one.
        cache: Optional ReadModelCache to invalidate after writes.
    """

    def __init__(
        self, db_manager, configured_currency: str = FALLBACK_CURRENCY, cache=None
    ):
        self.db_manager = db_manager
        self.configured_currency = resolve_currency(configured_currency)
        self.cache = cache

    def get(self, key: str) -> Optional[str]:
        with self.db_manager.connect() as conn:
            cursor = conn.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.db_manager.connect() as conn:
            conn.execute(
                """
                INSERT INTO settings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            conn.commit()

        if key == DEFAULT_CURRENCY_KEY:
            read_models.invalidate_after_write(self.cache, read_models.CURRENCY_WRITES)

    def get_default_currency(self) -> str:
        """Home currency: the stored choice if supported, else the configured one."""
        return resolve_currency(
            self.get(DEFAULT_CURRENCY_KEY), fallback=self.configured_currency
        )

    def set_default_currency(self, currency: str) -> str:
        """Store the home currency.

        Raises:
            ValueError: If the currency code is not supported.
        """
        if not is_supported(currency):
            raise ValueError(f"Unsupported currency: {currency}")
        currency = currency.upper()
        self.set(DEFAULT_CURRENCY_KEY, currency)
        logger.info(f"Default currency set to {currency}")
        return currency
