"""
Field normalization utilities.
Single responsibility: trim raw values and classify numeric literals.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional


# Whitespace removed from both ends of every field, header and key token
TRIM_CHARS = " \t\r\n"

NUMERIC_PATTERN = re.compile(r"^[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?$")

# Diffs with a larger decimal exponent are written in scientific notation
PLAIN_EXPONENT_LIMIT = 40


def trim(val: str) -> str:
    """Strip spaces, tabs and line-break characters from both ends."""
    return val.strip(TRIM_CHARS)


def is_numeric(val: str) -> bool:
    """
    Check whether a trimmed value is a plain numeric literal.
    
    Accepts an optional sign, digits with an optional decimal point and an
    optional exponent. Empty strings, thousands separators and currency
    symbols are not numeric.
    
    Examples:
        >>> is_numeric("-1.5e3")
        True
        >>> is_numeric("1,000")
        False
    """
    return bool(NUMERIC_PATTERN.match(val))


def to_decimal(val: str) -> Optional[Decimal]:
    """
    Parse a numeric literal into a Decimal.
    
    Args:
        val: Trimmed field value
        
    Returns:
        Decimal value or None if the value is not numeric
    """
    if not is_numeric(val):
        return None
    try:
        return Decimal(val)
    except InvalidOperation:
        return None


def format_decimal(val: Decimal) -> str:
    """
    Render a Decimal for reports.
    
    Plain notation unless the exponent is very large or very small, in
    which case scientific notation keeps the field short. Infinite values
    render as "Infinity" / "-Infinity".
    """
    if not val.is_finite():
        return str(val)
    if abs(val.adjusted()) > PLAIN_EXPONENT_LIMIT:
        return format(val, "E")
    return format(val, "f")


def normalize_column_name(col: str) -> str:
    """Case-insensitive lookup form of a header name."""
    return trim(col).lower()
