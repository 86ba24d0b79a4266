"""Currency and number normalization.

Parses loosely formatted dollar strings written by the model ("$55,000 -
$60,000", "275000", "N/A") into numbers, and formats numbers back into US
dollar strings. None of these functions raise: a missing or unparsable
number is a silent zero.
"""

import re
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import List, Optional

# A run of digits, grouping commas and a decimal point, starting with a digit.
_AMOUNT_PATTERN = re.compile(r"\d[\d,]*\.?\d*")

# Leading numeric prefix, the way a browser's parseFloat reads it.
_LEADING_FLOAT_PATTERN = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _to_float(token: str) -> Optional[float]:
    try:
        return float(token.replace(",", ""))
    except ValueError:
        return None


def _amounts(text: Optional[str]) -> List[float]:
    if not text:
        return []
    values = []
    for token in _AMOUNT_PATTERN.findall(str(text)):
        value = _to_float(token)
        if value is not None:
            values.append(value)
    return values


def parse_single_amount(text: Optional[str]) -> float:
    """Return the first number found in ``text``, or 0.

    Examples:
        >>> parse_single_amount("$185,000")
        185000.0
        >>> parse_single_amount("N/A")
        0.0
    """
    if not text:
        return 0.0
    match = _AMOUNT_PATTERN.search(str(text))
    if not match:
        return 0.0
    value = _to_float(match.group(0))
    return value if value is not None else 0.0


def parse_max_of_range(text: Optional[str]) -> float:
    """Return the largest number found in ``text``, or 0.

    Examples:
        >>> parse_max_of_range("$45,000 - $50,000")
        50000.0
    """
    values = _amounts(text)
    return max(values) if values else 0.0


def parse_plain_float(text: Optional[str]) -> float:
    """Parse a bare numeric string such as a form purchase price.

    Reads the leading numeric prefix only ("185000", "185000.50 USD");
    anything else is 0.
    """
    if text is None:
        return 0.0
    match = _LEADING_FLOAT_PATTERN.match(str(text))
    if not match:
        return 0.0
    return float(match.group(0))


def format_currency(value: float) -> str:
    """Format as whole US dollars, e.g. 142500 -> "$142,500"."""
    try:
        rounded = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        rounded = Decimal(0)
    if rounded == 0:
        return "$0"
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"
