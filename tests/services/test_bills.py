import pytest
from datetime import date
from decimal import Decimal

TODAY = date(2024, 3, 6)


class TestBillService:
    """Tests for BillService."""

    def test_create_bill(self, services):
        bill = services.bills.create(
            "Netflix", Decimal("15.49"), "usd", "monthly", date(2024, 3, 20), "subscription"
        )

        assert bill.id is not None
        assert bill.currency == "USD"
        assert bill.is_subscription is True
        assert services.bills.find_all() == [bill]

    @pytest.mark.parametrize(
        "frequency, kind, amount",
        [("daily", "bill", "1"), ("monthly", "loan", "1"), ("monthly", "bill", "-1")],
    )
    def test_create_rejects_invalid_values(self, services, frequency, kind, amount):
        with pytest.raises(ValueError):
            services.bills.create("Bad", Decimal(amount), "USD", frequency, TODAY, kind)

    def test_find_all_ordered_by_due_date(self, services):
        later = services.bills.create("Rent", Decimal("500"), "USD", "monthly", date(2024, 4, 1))
        sooner = services.bills.create("Water", Decimal("20"), "USD", "monthly", date(2024, 3, 9))

        assert [b.id for b in services.bills.find_all()] == [sooner.id, later.id]

    def test_deactivate(self, services):
        bill = services.bills.create("Gym", Decimal("30"), "USD", "monthly", TODAY)

        assert services.bills.deactivate(bill.id) is True
        assert services.bills.find_active() == []
        assert services.bills.find_all()[0].is_active is False


class TestMonthlySummary:
    """Tests for BillService.monthly_summary."""

    def test_empty(self, services):
        summary = services.bills.monthly_summary(TODAY)

        assert summary == {
            "total_bills": 0,
            "subscriptions": 0,
            "bills": 0,
            "monthly_totals": {},
            "upcoming_count": 0,
            "overdue_count": 0,
        }

    def test_normalizes_frequencies_to_monthly(self, services):
        services.bills.create("Phone", Decimal("15"), "USD", "monthly", date(2024, 3, 20))
        services.bills.create(
            "Cloud", Decimal("120"), "USD", "yearly", date(2024, 9, 1), "subscription"
        )
        services.bills.create("Cleaner", Decimal("12"), "USD", "weekly", date(2024, 3, 8))
        services.bills.create("Internet", Decimal("1500"), "ETB", "monthly", date(2024, 3, 25))

        summary = services.bills.monthly_summary(TODAY)

        assert summary["monthly_totals"] == {
            "USD": Decimal("77.00"),
            "ETB": Decimal("1500.00"),
        }
        assert summary["total_bills"] == 4
        assert summary["subscriptions"] == 1
        assert summary["bills"] == 3

    def test_upcoming_and_overdue(self, services):
        services.bills.create("Due today", Decimal("1"), "USD", "monthly", TODAY)
        services.bills.create("In a week", Decimal("1"), "USD", "monthly", date(2024, 3, 13))
        services.bills.create("Next month", Decimal("1"), "USD", "monthly", date(2024, 4, 6))
        services.bills.create("Yesterday", Decimal("1"), "USD", "monthly", date(2024, 3, 5))

        summary = services.bills.monthly_summary(TODAY)

        assert summary["upcoming_count"] == 2
        assert summary["overdue_count"] == 1

    def test_inactive_bills_excluded(self, services):
        bill = services.bills.create("Old", Decimal("99"), "USD", "monthly", date(2024, 3, 1))
        services.bills.deactivate(bill.id)

        summary = services.bills.monthly_summary(TODAY)

        assert summary["total_bills"] == 0
        assert summary["overdue_count"] == 0
        assert summary["monthly_totals"] == {}
