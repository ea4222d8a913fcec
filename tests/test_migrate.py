"""Tests against a real on-disk database managed by DatabaseManager."""

from decimal import Decimal

from cli.migrate import apply_pending, get_applied_migrations
from db.manager import DatabaseManager
from services.base import Services


class TestMigrations:
    def test_apply_pending_once(self, test_config):
        db_manager = DatabaseManager(test_config)

        with db_manager.connect() as conn:
            first = apply_pending(conn, db_manager.get_migrations_dir())
            second = apply_pending(conn, db_manager.get_migrations_dir())
            applied = get_applied_migrations(conn)

        assert first == ["001_initial_schema.sql"]
        assert second == []
        assert applied == {"001_initial_schema.sql"}
        assert test_config.db_path.exists()


class TestFileBackedServices:
    """Writes go through a fresh connection per call, as in the CLI."""

    def test_quick_add_persists_across_connections(self, test_config):
        db_manager = DatabaseManager(test_config)
        with db_manager.connect() as conn:
            apply_pending(conn, db_manager.get_migrations_dir())

        services = Services(test_config)
        services.categories.seed_defaults()
        wallet = services.accounts.create("wallet", "cash", "USD", Decimal("100.00"))
        services.accounts.set_default(wallet.id)
        dining = services.categories.find_by_name("Food & Dining")

        result = services.quick_add.submit(dining.id, "25.50")

        reopened = Services(test_config)
        assert reopened.accounts.find(wallet.id).balance == Decimal("74.50")
        assert reopened.transactions.find(result.transaction.id).title == "Food & Dining"
