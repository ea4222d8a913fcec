"""Base services container for dependency injection."""

from datetime import date
from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services and read-models.

    This class provides a centralized way to access all services and makes
    it easy to inject mock services for testing.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config is ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.accounts import AccountService
        from services.transactions import TransactionService
        from services.categories import CategoryService
        from services.bills import BillService
        from services.settings import SettingsService
        from services.read_models import ReadModelCache
        from services.quick_add import QuickAddService

        # Clock for date-dependent read-models; tests may replace it
        self.today = date.today

        self.read_models = ReadModelCache()
        self.accounts = AccountService(self.db_manager, self.read_models)
        self.transactions = TransactionService(self.db_manager, self.read_models)
        self.categories = CategoryService(self.db_manager, self.read_models)
        self.bills = BillService(self.db_manager, self.read_models)
        self.settings = SettingsService(
            self.db_manager, config.default_currency, self.read_models
        )
        self.quick_add = QuickAddService(
            self.db_manager,
            self.accounts,
            self.categories,
            self.transactions,
            self.settings,
            self.read_models,
        )

        self._register_read_models()

    def _register_read_models(self) -> None:
        from services import read_models as keys
        from tools.expense_range import ExpenseRangeView
        from tools.reports import expenses_overview, monthly_statistics

        cache = self.read_models

        def today():
            return self.today()

        cache.register(keys.ALL_TRANSACTIONS, self.transactions.find_all)
        cache.register(keys.ALL_ACCOUNTS, self.accounts.find_all)
        cache.register(keys.DEFAULT_ACCOUNT, self.accounts.get_default)
        cache.register(keys.TOTAL_BALANCE, self.accounts.total_balance_by_currency)
        cache.register(keys.DEFAULT_CURRENCY, self.settings.get_default_currency)
        cache.register(
            keys.EXPENSE_CATEGORIES, lambda: self.categories.find_by_type("expense")
        )

        # Views relative to today reload once the date changes
        cache.register(
            keys.BILL_SUMMARY, lambda: self.bills.monthly_summary(today()), stamp=today
        )
        cache.register(
            keys.MONTHLY_STATISTICS,
            lambda: monthly_statistics(self, today()),
            stamp=today,
        )
        cache.register(
            keys.EXPENSES_OVERVIEW,
            lambda: expenses_overview(self, today(), ExpenseRangeView.DAY),
            stamp=today,
        )
