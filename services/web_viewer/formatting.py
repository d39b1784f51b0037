"""
Display formatting for watchlist tables.
"""
from typing import Optional

NOT_AVAILABLE = "N/A"


def format_currency(value: float, symbol: str = "$") -> str:
    """
    Format a price as currency with two decimals.

    >>> format_currency(1234.5)
    '$1,234.50'
    >>> format_currency(-3)
    '-$3.00'
    """
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_change(value: float, percent: float) -> str:
    """
    Format a change as ``±value (±percent%)``; the sign follows the change value.

    >>> format_change(1.5, 0.75)
    '+1.50 (+0.75%)'
    >>> format_change(-2, -1.1)
    '-2.00 (-1.10%)'
    """
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f} ({sign}{percent:.2f}%)"


def price_cell(price: Optional[float], currency_symbol: str = "$") -> str:
    """Price column text; a missing or zero price has no quote behind it."""
    if not price:
        return NOT_AVAILABLE
    return format_currency(price, currency_symbol)


def change_cell(change: Optional[float], change_percent: Optional[float]) -> str:
    """Change column text."""
    if change is None or change_percent is None:
        return NOT_AVAILABLE
    return format_change(change, change_percent)


def change_direction(change: Optional[float]) -> str:
    """CSS modifier for the change column: missing data counts as positive."""
    return "positive" if (change or 0) >= 0 else "negative"
