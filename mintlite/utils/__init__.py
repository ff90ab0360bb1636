"""Formatting and calendar helpers."""

from mintlite.utils.dates import (
    add_months,
    as_utc,
    end_of_month,
    end_of_week,
    format_for_api,
    format_for_display,
    is_same_month,
    months_between,
    parse_api_date,
    period_bounds,
    start_of_month,
    start_of_week,
    utc_now,
)
from mintlite.utils.formatting import (
    CURRENCY_SYMBOLS,
    format_compact_number,
    format_currency,
    format_investment_return,
    format_percentage,
)

__all__ = [
    # Dates
    "add_months",
    "as_utc",
    "end_of_month",
    "end_of_week",
    "format_for_api",
    "format_for_display",
    "is_same_month",
    "months_between",
    "parse_api_date",
    "period_bounds",
    "start_of_month",
    "start_of_week",
    "utc_now",
    # Numbers
    "CURRENCY_SYMBOLS",
    "format_compact_number",
    "format_currency",
    "format_investment_return",
    "format_percentage",
]
