"""
Data validation utilities.
"""
import re
from typing import Optional


def is_blank(value: Optional[str]) -> bool:
    """
    Check whether an identifying field is missing.

    Args:
        value: String to check

    Returns:
        True for None or the empty string, False otherwise
    """
    return value is None or value == ""


def validate_symbol(symbol: Optional[str]) -> bool:
    """
    Validate an instrument ticker symbol.

    Symbols are matched exactly as given, so the only requirement is that
    the value is present.

    Args:
        symbol: Ticker symbol

    Returns:
        True if valid, False otherwise
    """
    return not is_blank(symbol)


def validate_email(email: Optional[str]) -> bool:
    """
    Validate email address shape.

    Args:
        email: Email address

    Returns:
        True if valid, False otherwise
    """
    if is_blank(email):
        return False
    pattern = r'^[^@\s]+@[^@\s]+$'
    return bool(re.match(pattern, email))
