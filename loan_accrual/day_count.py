"""Day-count conventions for interest accrual.

The calculator turns a date range, a principal and an annual rate into the
interest accrued over that range. Four bases are supported:

``ACT_365`` / ``ACT_360``
    Actual calendar days over a fixed 365 or 360 day year.
``ACT_ACT``
    Actual calendar days over the actual length of the end date's year.
``E30_360``
    Every month counts as 30 days over a 360 day year.

Results are not rounded; rounding happens once per year in the engine.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from .data_models import DayCountBasis, InterestMethod
from .utils import days_in_year, end_of_month, end_of_year, start_of_year


def base_days(basis: DayCountBasis, to_date: date) -> int:
    """Return the denominator (days per year) for ``basis``."""
    if basis is DayCountBasis.ACT_ACT:
        return days_in_year(to_date.year)
    return int(basis.value.split("_")[1])


def interest_days(
    from_date: Optional[date],
    to_date: Optional[date],
    basis: DayCountBasis,
) -> int:
    """Count the interest days between two dates under ``basis``.

    Exactly one of the dates may be ``None``. A missing ``from_date`` means
    "from the start of ``to_date``'s year", a missing ``to_date`` means "to
    the end of ``from_date``'s year".
    """
    if from_date is None and to_date is None:
        raise ValueError("At least one of from_date and to_date is required")
    first_year = to_date is None
    last_year = from_date is None
    start = from_date if from_date is not None else start_of_year(to_date.year)
    end = to_date if to_date is not None else end_of_year(from_date.year)

    if basis is not DayCountBasis.E30_360 or end <= end_of_month(start):
        return (end - start).days

    days = max(30 - start.day + 1, 0)
    days += (end.month - start.month - 1) * 30
    days += min(end.day, 30)
    # Legacy month counting: one day less for year-to-date ranges and for
    # ranges that neither start nor end at a year boundary.
    if last_year:
        days -= 1
    if not last_year and not first_year:
        days -= 1
    return days


def accrued_interest(
    from_date: Optional[date],
    to_date: Optional[date],
    principal: Decimal,
    rate_percent: Decimal,
    method: InterestMethod,
) -> Decimal:
    """Return the interest ``principal`` earns between two dates.

    Parameters
    ----------
    from_date, to_date: Optional[date]
        The accrual range; see :func:`interest_days` for omitted ends.
    principal: Decimal
        Amount earning interest. Negative amounts yield negative interest.
    rate_percent: Decimal
        Annual interest rate in percent.
    method: InterestMethod
        Only the day-count basis is used here.
    """
    days = interest_days(from_date, to_date, method.basis)
    end = to_date if to_date is not None else end_of_year(from_date.year)
    return (
        Decimal(principal)
        * Decimal(rate_percent)
        / Decimal(100)
        * Decimal(days)
        / Decimal(base_days(method.basis, end))
    )
