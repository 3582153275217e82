"""
Format service — display renderings of dates and money.

The search filter matches against these same renderings, so a user can
find an asset by typing ``03/15/2025`` or ``1200``.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from assettrack.services.date_service import parse_flexible_date

# Leading numeric prefix, mirroring how the stored prices were entered
# ("12.50", "12.50 USD", "1e3").
_NUMBER_PREFIX_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

DEFAULT_CURRENCY_SYMBOL = "$"


def format_date(value: Any, for_search: bool = False) -> str:
    """
    Render a date as ``MM/DD/YYYY``.

    Empty or invalid values render as ``"N/A"`` for display and as an
    empty string for search matching.
    """
    parsed = parse_flexible_date(value)
    if parsed is None:
        return "" if for_search else "N/A"
    return f"{parsed.month:02d}/{parsed.day:02d}/{parsed.year}"


def to_decimal(value: Any) -> Decimal | None:
    """
    Parse a stored price into a Decimal.

    Accepts numbers and strings with a leading number; returns None when
    no finite number can be read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        text = str(value)
    else:
        match = _NUMBER_PREFIX_RE.match(str(value).strip())
        if not match:
            return None
        text = match.group(0)
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def format_currency(
    amount: Any,
    for_search: bool = False,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """
    Render an amount as currency, e.g. ``$1,234.50``.

    ``None`` renders as ``"N/A"``; other empty values render as an empty
    string for display.
    """
    if amount is None:
        return "N/A"
    if not amount and not for_search:
        return ""
    number = to_decimal(amount)
    if number is None:
        return "" if for_search else "N/A"
    sign = "-" if number < 0 else ""
    return f"{sign}{symbol}{abs(number):,.2f}"
