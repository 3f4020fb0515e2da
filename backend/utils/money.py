# backend/utils/money.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "LKR": "LKR ",
}


def to_cents(amount: Union[Decimal, int, float, str]) -> int:
    """Convert a decimal amount in major units to integer minor units."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(value * 100)


def to_amount(cents: int) -> float:
    return round(cents / 100, 2)


def format_price(cents: int, currency: str = "USD") -> str:
    # Display only; never parsed back for arithmetic
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{Decimal(cents) / 100:,.2f}"


def percent_of(cents: int, percent: int) -> int:
    """Share of an amount in minor units, rounded half up."""
    return int((Decimal(cents) * percent / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
