"""Utility functions for the loan accrual engine.

This module provides helpers for parsing input values into Python data types
and for calendar arithmetic: adding months or years to a date, the first and
last day of a year and the number of days in a year. Money is rounded here as
well so that every module rounds the same way.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext

from .errors import LoanDataError

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    Raises
    ------
    LoanDataError
        If the string is not a valid ISO date.
    """
    try:
        return date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError) as exc:
        raise LoanDataError(f"Invalid date string: {value}") from exc


def decimal_from_str(value) -> Decimal:
    """Convert a numeric string (or int) into a ``Decimal``.

    Commas used as thousands separators are stripped. Floats are rejected so
    that binary rounding never leaks into monetary values.
    """
    if isinstance(value, float):
        raise LoanDataError(f"Refusing float value {value!r}; pass amounts as strings")
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned)
    except InvalidOperation as exc:
        raise LoanDataError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise LoanDataError(f"Invalid numeric value: {value}")
    return result


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(dt: date, years: int) -> date:
    return add_months(dt, years * 12)


def start_of_year(year: int) -> date:
    return date(year, 1, 1)


def end_of_year(year: int) -> date:
    return date(year, 12, 31)


def end_of_month(dt: date) -> date:
    return date(dt.year, dt.month, calendar.monthrange(dt.year, dt.month)[1])


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def round_money(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
