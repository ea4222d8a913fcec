import pytest
from decimal import Decimal

from tools.currency import (
    all_currency_codes,
    format_amount,
    format_amount_full,
    get_currency_name,
    get_currency_symbol,
    is_supported,
    MAX_AMOUNT,
    resolve_currency,
    validate_money,
)


class TestCurrency:
    """Tests for currency lookups and formatting."""

    def test_known_codes(self):
        codes = all_currency_codes()

        assert "ETB" in codes
        assert "USD" in codes
        assert len(codes) == len(set(codes))

    def test_is_supported_ignores_case(self):
        assert is_supported("usd")
        assert not is_supported("XXX")
        assert not is_supported("")
        assert not is_supported(None)

    def test_symbol_and_name(self):
        assert get_currency_symbol("USD") == "$"
        assert get_currency_symbol("etb") == "Br"
        assert get_currency_name("EUR") == "Euro"

    def test_unknown_code_is_its_own_symbol(self):
        assert get_currency_symbol("XYZ") == "XYZ"
        assert get_currency_name("XYZ") == "XYZ"

    def test_resolve_currency(self):
        assert resolve_currency("gbp") == "GBP"
        assert resolve_currency("XYZ") == "ETB"
        assert resolve_currency(None, fallback="USD") == "USD"

    def test_format_amount(self):
        assert format_amount(Decimal("25.5"), "USD") == "$25.50"
        assert format_amount(Decimal("0.125"), "EUR") == "€0.13"
        assert format_amount(3, "ETB") == "Br3.00"
        assert format_amount(1.1, "XYZ") == "XYZ1.10"

    def test_format_amount_full(self):
        assert format_amount_full(Decimal("74.5"), "USD") == "$74.50 USD"


class TestValidateMoney:
    """Tests for validate_money."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("12.40", Decimal("12.40")),
            (Decimal("-3"), Decimal("-3")),
            (7, Decimal("7")),
            ("0.500", Decimal("0.50")),
            (MAX_AMOUNT, MAX_AMOUNT),
            (-MAX_AMOUNT, -MAX_AMOUNT),
        ],
    )
    def test_accepts_cents(self, value, expected):
        assert validate_money(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            "abc",
            "NaN",
            "-Infinity",
            Decimal("1E+400"),
            "1e-400",
            "0.001",
            "0.123456789012345678901",
            MAX_AMOUNT + Decimal("0.01"),
            -MAX_AMOUNT - Decimal("0.01"),
        ],
    )
    def test_rejects_unstorable(self, value):
        with pytest.raises(ValueError):
            validate_money(value)

    def test_max_amount_survives_float_round_trip(self):
        assert Decimal(str(float(MAX_AMOUNT))) == MAX_AMOUNT
