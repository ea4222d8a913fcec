"""Currency codes, symbols, and amount formatting."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from config import FALLBACK_CURRENCY

# code -> (symbol, name)
_CURRENCY_DATA = {
    "ETB": ("Br", "Ethiopian Birr"),
    "USD": ("$", "US Dollar"),
    "EUR": ("€", "Euro"),
    "GBP": ("£", "British Pound"),
    "JPY": ("¥", "Japanese Yen"),
    "CNY": ("¥", "Chinese Yuan"),
    "INR": ("₹", "Indian Rupee"),
    "AUD": ("A$", "Australian Dollar"),
    "CAD": ("C$", "Canadian Dollar"),
    "CHF": ("Fr", "Swiss Franc"),
    "KRW": ("₩", "South Korean Won"),
    "BRL": ("R$", "Brazilian Real"),
    "MXN": ("Mex$", "Mexican Peso"),
    "ZAR": ("R", "South African Rand"),
    "AED": ("د.إ", "UAE Dirham"),
    "SAR": ("﷼", "Saudi Riyal"),
    "TRY": ("₺", "Turkish Lira"),
    "RUB": ("₽", "Russian Ruble"),
    "PLN": ("zł", "Polish Zloty"),
    "SEK": ("kr", "Swedish Krona"),
    "NOK": ("kr", "Norwegian Krone"),
    "DKK": ("kr", "Danish Krone"),
    "SGD": ("S$", "Singapore Dollar"),
    "HKD": ("HK$", "Hong Kong Dollar"),
    "THB": ("฿", "Thai Baht"),
    "MYR": ("RM", "Malaysian Ringgit"),
    "IDR": ("Rp", "Indonesian Rupiah"),
    "PHP": ("₱", "Philippine Peso"),
    "VND": ("₫", "Vietnamese Dong"),
    "PKR": ("₨", "Pakistani Rupee"),
    "BDT": ("৳", "Bangladeshi Taka"),
    "NGN": ("₦", "Nigerian Naira"),
    "EGP": ("E£", "Egyptian Pound"),
    "KES": ("KSh", "Kenyan Shilling"),
    "NZD": ("NZ$", "New Zealand Dollar"),
    "CZK": ("Kč", "Czech Koruna"),
    "HUF": ("Ft", "Hungarian Forint"),
    "ILS": ("₪", "Israeli Shekel"),
}

_CENTS = Decimal("0.01")

# Amounts are stored as SQLite REAL; below this, cents survive the float round trip
MAX_AMOUNT = Decimal("999999999999.99")


def all_currency_codes() -> list:
    return list(_CURRENCY_DATA.keys())


def is_supported(code: str) -> bool:
    return bool(code) and code.upper() in _CURRENCY_DATA


def get_currency_symbol(code: str) -> str:
    """Symbol for a currency code, or the code itself when unknown."""
    data = _CURRENCY_DATA.get((code or "").upper())
    return data[0] if data else code


def get_currency_name(code: str) -> str:
    data = _CURRENCY_DATA.get((code or "").upper())
    return data[1] if data else code


def validate_money(value) -> Decimal:
    """Return value as a Decimal that can be stored exactly, to the cent.

    Raises:
        ValueError: If the value is not a finite number, has more than two
            decimal places, or exceeds MAX_AMOUNT in magnitude.
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"Amount exceeds {MAX_AMOUNT}: {value!r}")
    if amount != amount.quantize(_CENTS):
        raise ValueError(f"Amount has more than two decimal places: {value!r}")
    return amount


def resolve_currency(code, fallback: str = FALLBACK_CURRENCY) -> str:
    """Return an upper-cased supported code, falling back when it isn't one."""
    if code and is_supported(code):
        return code.upper()
    return fallback


def format_amount(amount, code: str) -> str:
    """Format an amount with two decimals and a symbol prefix, e.g. "$25.50"."""
    value = Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{get_currency_symbol(code)}{value}"


def format_amount_full(amount, code: str) -> str:
    """Like format_amount with the code appended, e.g. "$25.50 USD"."""
    return f"{format_amount(amount, code)} {code}"
