import pytest
from datetime import date
from decimal import Decimal

from services import read_models
from services.accounts import AccountService
from services.read_models import ReadModelCache
from services.settings import SettingsService
from tests.helpers import make_transaction


class TestReadModelCache:
    """Tests for ReadModelCache."""

    def setup_method(self):
        self.calls = 0
        self.cache = ReadModelCache()

        def loader():
            self.calls += 1
            return self.calls

        self.cache.register("counter", loader)

    def test_get_memoizes(self):
        assert self.cache.get("counter") == 1
        assert self.cache.get("counter") == 1
        assert self.calls == 1

    def test_invalidate_reloads_on_next_get(self):
        self.cache.get("counter")

        self.cache.invalidate("counter")

        assert not self.cache.is_cached("counter")
        assert self.cache.get("counter") == 2

    def test_invalidate_before_first_load(self):
        self.cache.invalidate("counter")

        assert self.cache.get("counter") == 1

    def test_invalidate_all(self):
        self.cache.register("other", lambda: "x")
        self.cache.get("counter")
        self.cache.get("other")

        self.cache.invalidate_all()

        assert not self.cache.is_cached("counter")
        assert not self.cache.is_cached("other")

    def test_register_replaces_loader(self):
        self.cache.get("counter")

        self.cache.register("counter", lambda: "fresh")

        assert self.cache.get("counter") == "fresh"

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            self.cache.get("missing")
        with pytest.raises(KeyError):
            self.cache.invalidate("missing")

    def test_failed_load_is_not_cached(self):
        def broken():
            raise RuntimeError("db down")

        self.cache.register("broken", broken)

        with pytest.raises(RuntimeError):
            self.cache.get("broken")
        assert not self.cache.is_cached("broken")

    def test_stamp_change_reloads(self):
        stamp = ["monday"]
        self.cache.register("stamped", lambda: self.calls, stamp=lambda: stamp[0])
        self.calls = 5

        assert self.cache.get("stamped") == 5
        self.calls = 6
        assert self.cache.get("stamped") == 5

        stamp[0] = "tuesday"

        assert not self.cache.is_cached("stamped")
        assert self.cache.get("stamped") == 6
        assert self.cache.is_cached("stamped")


class TestServiceReadModels:
    """Tests for the read-models registered by Services."""

    def test_all_keys_registered(self, services):
        assert set(services.read_models.keys()) == {
            read_models.ALL_TRANSACTIONS,
            read_models.TOTAL_BALANCE,
            read_models.MONTHLY_STATISTICS,
            read_models.DEFAULT_ACCOUNT,
            read_models.ALL_ACCOUNTS,
            read_models.BILL_SUMMARY,
            read_models.DEFAULT_CURRENCY,
            read_models.EXPENSE_CATEGORIES,
            read_models.EXPENSES_OVERVIEW,
        }

    def test_every_read_model_loads(self, services, food, wallet):
        for key in services.read_models.keys():
            services.read_models.get(key)

        assert services.read_models.get(read_models.DEFAULT_ACCOUNT).id == wallet.id
        assert services.read_models.get(read_models.DEFAULT_CURRENCY) == "USD"
        assert services.read_models.get(read_models.TOTAL_BALANCE) == {
            "USD": Decimal("100.00")
        }
        assert [c.name for c in services.read_models.get(read_models.EXPENSE_CATEGORIES)] == [
            "Food"
        ]

    def test_cached_until_a_write(self, services, wallet):
        first = services.read_models.get(read_models.ALL_ACCOUNTS)

        assert services.read_models.get(read_models.ALL_ACCOUNTS) is first

        services.accounts.create("bank", "bank", "USD")

        assert len(services.read_models.get(read_models.ALL_ACCOUNTS)) == 2


class TestWritesRefreshReadModels:
    """Tests that service writes refresh the read-models built on them."""

    TODAY = date(2024, 3, 6)

    @pytest.fixture(autouse=True)
    def fixed_today(self, services):
        services.today = lambda: self.TODAY

    def test_overview_reflects_created_transaction(self, services, food, wallet):
        before = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert before.totals_by_currency == {"USD": Decimal("0")}

        txn = services.transactions.create(
            make_transaction(12, self.TODAY, category_id=food.id, account_id=wallet.id)
        )

        after = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert after.totals_by_currency == {"USD": Decimal("12")}
        assert after.transaction_count == 1
        assert len(services.read_models.get(read_models.ALL_TRANSACTIONS)) == 1

        services.transactions.delete(txn.id)

        overview = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert overview.transaction_count == 0
        assert services.read_models.get(read_models.ALL_TRANSACTIONS) == []

    def test_default_account_reflects_set_default(self, services, wallet):
        assert services.read_models.get(read_models.DEFAULT_ACCOUNT).id == wallet.id

        bank = services.accounts.create("bank", "bank", "USD", Decimal("50"))
        services.accounts.set_default(bank.id)

        assert services.read_models.get(read_models.DEFAULT_ACCOUNT).id == bank.id

    def test_total_balance_reflects_update(self, services, wallet):
        assert services.read_models.get(read_models.TOTAL_BALANCE) == {
            "USD": Decimal("100.00")
        }

        wallet.balance = Decimal("80.25")
        services.accounts.update(wallet)

        assert services.read_models.get(read_models.TOTAL_BALANCE) == {
            "USD": Decimal("80.25")
        }
        assert services.read_models.get(read_models.DEFAULT_ACCOUNT).balance == Decimal(
            "80.25"
        )

    def test_bill_summary_reflects_bill_writes(self, services):
        assert services.read_models.get(read_models.BILL_SUMMARY)["total_bills"] == 0

        bill = services.bills.create(
            "Rent", Decimal("500"), "USD", "monthly", date(2024, 3, 10)
        )

        assert services.read_models.get(read_models.BILL_SUMMARY)["total_bills"] == 1
        overview = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert overview.bill_summary["upcoming_count"] == 1

        services.bills.deactivate(bill.id)

        assert services.read_models.get(read_models.BILL_SUMMARY)["total_bills"] == 0

    def test_expense_categories_reflect_create(self, services, food):
        assert len(services.read_models.get(read_models.EXPENSE_CATEGORIES)) == 1

        services.categories.create("Transport", "expense")

        names = [c.name for c in services.read_models.get(read_models.EXPENSE_CATEGORIES)]
        assert sorted(names) == ["Food", "Transport"]

    def test_default_currency_reflects_setting(self, services):
        assert services.read_models.get(read_models.DEFAULT_CURRENCY) == "USD"

        services.settings.set_default_currency("EUR")

        assert services.read_models.get(read_models.DEFAULT_CURRENCY) == "EUR"
        assert services.read_models.get(read_models.EXPENSES_OVERVIEW).currency == "EUR"

    def test_services_work_without_a_cache(self, db_manager_with_schema):
        settings = SettingsService(db_manager_with_schema, "USD")
        accounts = AccountService(db_manager_with_schema)

        assert settings.set_default_currency("eur") == "EUR"
        assert accounts.create("cash", "cash", "EUR").id is not None


class TestDateRollover:
    """Tests that read-models relative to today follow the date."""

    def test_overview_moves_to_the_new_day(self, services):
        services.today = lambda: date(2024, 3, 6)
        services.transactions.create(make_transaction(5, date(2024, 3, 7)))

        overview = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert overview.range.start == date(2024, 3, 6)
        assert overview.transaction_count == 0

        services.today = lambda: date(2024, 3, 7)

        overview = services.read_models.get(read_models.EXPENSES_OVERVIEW)
        assert overview.range.start == date(2024, 3, 7)
        assert overview.transaction_count == 1

    def test_bill_summary_moves_to_the_new_day(self, services):
        services.today = lambda: date(2024, 3, 6)
        services.bills.create("Water", Decimal("20"), "USD", "monthly", date(2024, 3, 6))

        assert services.read_models.get(read_models.BILL_SUMMARY)["overdue_count"] == 0

        services.today = lambda: date(2024, 3, 7)

        assert services.read_models.get(read_models.BILL_SUMMARY)["overdue_count"] == 1

    def test_same_day_stays_cached(self, services):
        services.today = lambda: date(2024, 3, 6)
        first = services.read_models.get(read_models.MONTHLY_STATISTICS)

        assert services.read_models.get(read_models.MONTHLY_STATISTICS) is first
        assert services.read_models.is_cached(read_models.MONTHLY_STATISTICS)
