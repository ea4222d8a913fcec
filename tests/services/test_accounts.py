import pytest
import sqlite3
from decimal import Decimal


class TestAccountService:
    """Tests for AccountService."""

    def test_create_account(self, services):
        """Test creating a new account."""
        account = services.accounts.create(
            "checking", "bank", "usd", Decimal("250.75"), "Main checking"
        )

        assert account.id is not None
        assert account.id > 0
        assert account.name == "checking"
        assert account.type == "bank"
        assert account.currency == "USD"
        assert account.balance == Decimal("250.75")
        assert account.description == "Main checking"
        assert account.is_default is False
        assert account.is_active is True

    def test_create_rejects_unknown_type(self, services):
        with pytest.raises(ValueError):
            services.accounts.create("x", "piggy_bank", "USD")

    @pytest.mark.parametrize("balance", [Decimal("1E+400"), Decimal("10.005")])
    def test_create_rejects_unstorable_balance(self, services, balance):
        with pytest.raises(ValueError):
            services.accounts.create("x", "cash", "USD", balance)
        assert services.accounts.find_all() == []

    def test_update_rejects_unstorable_balance(self, services, wallet):
        wallet.balance = Decimal("0.001")

        with pytest.raises(ValueError):
            services.accounts.update(wallet)
        assert services.accounts.find(wallet.id).balance == Decimal("100.00")

    def test_create_duplicate_name_raises(self, services):
        """Test that account names are unique."""
        services.accounts.create("wallet", "cash", "USD")

        with pytest.raises(sqlite3.IntegrityError):
            services.accounts.create("wallet", "cash", "EUR")

    def test_find_account_by_id(self, services):
        created = services.accounts.create("card", "card", "EUR", Decimal("12.30"))

        found = services.accounts.find(created.id)

        assert found == created

    def test_find_account_by_id_not_found(self, services):
        assert services.accounts.find(9999) is None

    def test_find_by_name(self, services):
        services.accounts.create("telebirr", "mobile_money", "ETB")

        found = services.accounts.find_by_name("telebirr")

        assert found is not None
        assert found.type == "mobile_money"
        assert found.currency == "ETB"

    def test_find_by_name_case_sensitive(self, services):
        """Test that account name lookup is case-sensitive."""
        services.accounts.create("wallet", "cash", "USD")

        assert services.accounts.find_by_name("Wallet") is None

    def test_find_all_ordered_by_id(self, services):
        first = services.accounts.create("b", "cash", "USD")
        second = services.accounts.create("a", "cash", "USD")

        accounts = services.accounts.find_all()

        assert [a.id for a in accounts] == [first.id, second.id]

    def test_find_all_empty(self, services):
        assert services.accounts.find_all() == []

    def test_update_account(self, services):
        account = services.accounts.create("wallet", "cash", "USD")
        account.name = "pocket"
        account.balance = Decimal("42")

        assert services.accounts.update(account) is True
        found = services.accounts.find(account.id)
        assert found.name == "pocket"
        assert found.balance == Decimal("42")

    def test_delete_account(self, services):
        account = services.accounts.create("wallet", "cash", "USD")

        assert services.accounts.delete(account.id) is True
        assert services.accounts.find(account.id) is None
        assert services.accounts.delete(account.id) is False


class TestDefaultAccount:
    """Tests for set_default and get_default."""

    def test_no_default_initially(self, services):
        services.accounts.create("wallet", "cash", "USD")

        assert services.accounts.get_default() is None

    def test_set_default(self, services, wallet):
        assert wallet.is_default is True
        assert services.accounts.get_default().id == wallet.id

    def test_set_default_moves_flag(self, services, wallet):
        bank = services.accounts.create("bank", "bank", "USD")

        services.accounts.set_default(bank.id)

        assert services.accounts.get_default().id == bank.id
        assert services.accounts.find(wallet.id).is_default is False
        assert sum(a.is_default for a in services.accounts.find_all()) == 1

    def test_set_default_unknown_account(self, services):
        with pytest.raises(ValueError):
            services.accounts.set_default(9999)

    def test_set_default_inactive_account(self, services):
        account = services.accounts.create("old", "cash", "USD")
        account.is_active = False
        services.accounts.update(account)

        with pytest.raises(ValueError):
            services.accounts.set_default(account.id)

    def test_inactive_default_is_not_returned(self, services, wallet):
        wallet.is_active = False
        services.accounts.update(wallet)

        assert services.accounts.get_default() is None


class TestBalances:
    """Tests for debit and total_balance_by_currency."""

    def test_debit_returns_previous_and_new(self, services, wallet, db_manager_with_schema):
        with db_manager_with_schema.connect() as conn:
            previous, new = services.accounts.debit(conn, wallet.id, Decimal("30.25"))
            conn.commit()

        assert previous == Decimal("100.00")
        assert new == Decimal("69.75")
        assert services.accounts.find(wallet.id).balance == Decimal("69.75")

    def test_debit_unknown_account(self, services, db_manager_with_schema):
        with db_manager_with_schema.connect() as conn:
            with pytest.raises(ValueError):
                services.accounts.debit(conn, 9999, Decimal("1"))

    def test_total_balance_by_currency(self, services, wallet):
        services.accounts.create("savings", "bank", "USD", Decimal("400"))
        services.accounts.create("birr", "cash", "ETB", Decimal("1500"))
        closed = services.accounts.create("closed", "bank", "USD", Decimal("1000"))
        closed.is_active = False
        services.accounts.update(closed)

        assert services.accounts.total_balance_by_currency() == {
            "USD": Decimal("500"),
            "ETB": Decimal("1500"),
        }

    def test_to_dict(self, wallet):
        data = wallet.to_dict()

        assert data["name"] == "wallet"
        assert data["currency"] == "USD"
        assert data["balance"] == 100.0
        assert data["is_default"] == 1
