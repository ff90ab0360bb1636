"""
Number Formatting

All money, percentage and return strings shown by the app come from here,
so the output is reproducible regardless of host locale.

Rules:
- Currency: symbol prefix, "," grouping, exactly two fraction digits.
  Negative values carry a leading "-" before the symbol.
- Percentage: one fraction digit (half-up), "%" suffix. Input is already
  in percent units (42.5 -> "42.5%").
- Investment return: input is a ratio (0.1667 -> "+16.7%"). A "+" is added
  only for strictly positive rounded values.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, float, int]

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from expanding to their binary value
    return Decimal(str(value))


def _quantize(value: Number, step: Decimal) -> Decimal:
    rounded = _to_decimal(value).quantize(step, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return abs(rounded)
    return rounded


def format_currency(amount: Number, currency: str = "USD") -> str:
    """Format an amount as currency, e.g. 1234.5 -> "$1,234.50"."""
    rounded = _quantize(amount, _CENT)
    code = currency.upper()
    prefix = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{prefix}{abs(rounded):,.2f}"


def format_percentage(value: Number) -> str:
    """Format a value already in percent units, e.g. 42.46 -> "42.5%"."""
    return f"{_quantize(value, _TENTH):.1f}%"


def format_investment_return(ratio: Number) -> str:
    """Format a return ratio with an explicit sign, e.g. 0.1667 -> "+16.7%"."""
    percent = _quantize(_to_decimal(ratio) * 100, _TENTH)
    text = f"{percent:.1f}%"
    if percent > 0:
        return "+" + text
    return text


def format_compact_number(number: Number) -> str:
    """Compact display for large values, e.g. 1234567 -> "1.2M"."""
    suffixes = ["", "K", "M", "B", "T"]
    value = abs(_to_decimal(number))
    index = 0
    while value >= 1000 and index < len(suffixes) - 1:
        value /= 1000
        index += 1
    rounded = _quantize(value, _TENTH)
    sign = "-" if _to_decimal(number) < 0 and rounded != 0 else ""
    return f"{sign}{rounded:.1f}{suffixes[index]}"
