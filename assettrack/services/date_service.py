"""
Date service — date parsing and calendar arithmetic for the dashboard.

All dates are naive datetimes in server-local time.  Stored dates are
usually bare ``YYYY-MM-DD`` strings; those are parsed as local calendar
dates (midnight) so that a warranty expiring on the 5th never shifts to
the 4th because of a UTC conversion.

Nothing here raises on bad input: unparseable values come back as
``None`` and every caller must check for it.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Any

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Seconds in a day, for fractional day differences.
_SECONDS_PER_DAY = 24 * 60 * 60

# Unit aliases accepted by add_time_period().
_PERIOD_UNITS = {
    "day": "days",
    "days": "days",
    "week": "weeks",
    "weeks": "weeks",
    "month": "months",
    "months": "months",
    "year": "years",
    "years": "years",
}


def parse_flexible_date(value: Any) -> datetime | None:
    """
    Parse a stored date representation into a naive local datetime.

    Accepted inputs:
      - ``YYYY-MM-DD`` strings (local calendar date, midnight).
      - ``datetime`` objects (aware values are converted to local time).
      - ``date`` objects (midnight).
      - ``int``/``float`` epoch milliseconds.
      - Any other string understood by ``dateutil``.

    Returns:
        The parsed datetime, or None when the value is empty or invalid.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _to_local_naive(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    match = _ISO_DATE_RE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    return _to_local_naive(parsed)


def add_time_period(base: Any, amount: Any, unit: Any) -> datetime | None:
    """
    Add a signed number of days, weeks, months or years to a date.

    Month and year arithmetic clamps to the last valid day of the target
    month: Jan 31 + 1 month is Feb 28/29, never Mar 2/3.

    Args:
        base:   Starting date (anything parse_flexible_date accepts).
        amount: Signed integer amount.
        unit:   ``day(s)``, ``week(s)``, ``month(s)`` or ``year(s)``.

    Returns:
        The shifted datetime, or None for an invalid base, amount or unit
        (callers treat None as "stop generating occurrences").
    """
    start = base if isinstance(base, datetime) else parse_flexible_date(base)
    if start is None:
        return None

    number = _parse_amount(amount)
    if number is None:
        return None

    if not isinstance(unit, str):
        return None
    canonical = _PERIOD_UNITS.get(unit.strip().lower())
    if canonical is None:
        return None

    try:
        if canonical == "days":
            return start + timedelta(days=number)
        if canonical == "weeks":
            return start + timedelta(weeks=number)
        if canonical == "months":
            return start + relativedelta(months=number)
        return start + relativedelta(years=number)
    except (OverflowError, ValueError):
        logger.debug("Date overflow adding %s %s to %s", number, canonical, start)
        return None


def start_of_day(value: datetime) -> datetime:
    """Midnight at the start of ``value``'s calendar day."""
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    """The last representable instant of ``value``'s calendar day."""
    return datetime.combine(value.date(), time.max)


def day_difference(target: datetime, now: datetime) -> float:
    """Fractional days from ``now`` until ``target`` (negative if past)."""
    return (target - now).total_seconds() / _SECONDS_PER_DAY


# =========================================================================
# Internal helpers
# =========================================================================


def _to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; pass naive through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _parse_amount(amount: Any) -> int | None:
    """Integer amount with truncation, or None."""
    if amount is None or isinstance(amount, bool):
        return None
    if isinstance(amount, int):
        return amount
    if isinstance(amount, float):
        if amount != amount or amount in (float("inf"), float("-inf")):
            return None
        return int(amount)
    try:
        return int(str(amount).strip())
    except ValueError:
        return None
