"""Core calculation engine for the loan accrual engine.

This module walks a loan's transaction ledger one calendar year at a time and
produces a ``YearAccrualEntry`` per year: the balance at the start and end of
the year, the cash flows of the year by kind, and the interest accrued. The
walk is a fold; each year is computed from the previous year's end balance
and interest base amount and nothing is mutated once it has been produced.

Interest on a year is made up of two parts:

* the interest base amount carried into the year, accruing from January 1st,
* each transaction of the year, accruing from its own date,

both up to the end of the year, the reference date, or the date the balance
was cleared, whichever applies.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .data_models import InterestMethod, Loan, Transaction, TransactionType, YearAccrualEntry
from .day_count import accrued_interest
from .errors import MissingInterestMethod
from .status import repaid_date, sort_transactions
from .utils import round_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Balances at or below one currency unit are treated as repaid.
CLEARED_THRESHOLD = Decimal("1")

_BUCKETS = {
    TransactionType.DEPOSIT: "deposits",
    TransactionType.WITHDRAWAL: "withdrawals",
    TransactionType.TERMINATION: "withdrawals",
    TransactionType.NON_RECLAIM: "not_reclaimed",
    TransactionType.PARTIAL_NON_RECLAIM: "not_reclaimed",
    TransactionType.INTEREST_PAYMENT: "interest_paid",
}


def resolve_interest_method(loan: Loan, default_method: Optional[InterestMethod]) -> InterestMethod:
    """Return the loan's own method, falling back to the project default."""
    method = loan.alt_interest_method or default_method
    if method is None:
        raise MissingInterestMethod(loan.id)
    return method


def _group_by_year(transactions: Iterable[Transaction]) -> Dict[int, List[Transaction]]:
    mapping: Dict[int, List[Transaction]] = {}
    for t in transactions:
        mapping.setdefault(t.date.year, []).append(t)
    return mapping


def _accrue_year(
    loan: Loan,
    method: InterestMethod,
    year: int,
    begin: Decimal,
    base: Decimal,
    transactions: List[Transaction],
    end_date: date,
    final: bool,
    exclude_transaction_id: Optional[str],
    correct_residual: bool,
) -> Tuple[YearAccrualEntry, Decimal]:
    """Compute one year's entry and the interest base carried into the next.

    ``base`` is the interest base amount at January 1st of ``year``.
    """
    rate = loan.interest_rate
    boundary = end_date if final else None
    balance = begin
    running_base = base
    interest = ZERO
    cleared_on: Optional[date] = None
    totals = {"deposits": ZERO, "withdrawals": ZERO, "not_reclaimed": ZERO, "interest_paid": ZERO}

    for t in transactions:
        if t.date > end_date or t.id == exclude_transaction_id:
            continue
        balance += t.amount
        earns_interest = method.compound or t.type is not TransactionType.INTEREST_PAYMENT
        if earns_interest:
            running_base += t.amount
        if balance <= CLEARED_THRESHOLD:
            cleared_on = t.date
            running_base = ZERO
        elif earns_interest:
            interest += accrued_interest(t.date, boundary, t.amount, rate, method)
        bucket = _BUCKETS.get(t.type)
        if bucket is not None:
            totals[bucket] += t.amount

    if cleared_on is not None or final:
        interest += accrued_interest(None, cleared_on or end_date, base, rate, method)
    else:
        interest += base * rate / Decimal(100)
    interest = round_money(interest)
    end = round_money(balance + interest)

    interest_error = ZERO
    if final and correct_residual and cleared_on is not None and end != ZERO:
        logger.info(
            "Loan %s: removing rounding residual %s from %s interest", loan.id, end, year
        )
        interest_error = end
        interest -= end
        end = ZERO

    entry = YearAccrualEntry(
        year=year,
        begin=begin,
        deposits=totals["deposits"],
        withdrawals=totals["withdrawals"],
        not_reclaimed=totals["not_reclaimed"],
        interest_paid=totals["interest_paid"],
        interest=interest,
        interest_base_amount=base,
        end=end,
        interest_error=interest_error,
    )
    carried_base = running_base + (interest if method.compound else ZERO)
    return entry, carried_base


def accrual_by_year(
    loan: Loan,
    as_of: date,
    exclude_transaction_id: Optional[str] = None,
    default_method: Optional[InterestMethod] = None,
) -> Tuple[YearAccrualEntry, ...]:
    """Compute the per-year ledger of a loan up to ``as_of``.

    Parameters
    ----------
    loan: Loan
        The loan terms and transactions.
    as_of: date
        Reference date. Interest accrues up to this date, or up to the
        repayment date when the loan was repaid earlier.
    exclude_transaction_id: Optional[str]
        A transaction to leave out, e.g. to validate a pending withdrawal
        against the balance that exists without it.
    default_method: Optional[InterestMethod]
        The project's interest method, used when the loan has no override.

    Returns
    -------
    Tuple[YearAccrualEntry, ...]
        One entry per calendar year from the first transaction to the end
        date. Empty when the loan has not been funded yet.

    Raises
    ------
    MissingInterestMethod
        If neither the loan nor ``default_method`` provides a method.
    """
    method = resolve_interest_method(loan, default_method)
    transactions = sort_transactions(loan.transactions)
    if not transactions:
        return ()

    closing_excluded = transactions[-1].id == exclude_transaction_id
    end_date = as_of
    repaid_on = repaid_date(loan, as_of)
    clamped = repaid_on is not None and not closing_excluded
    if clamped:
        end_date = repaid_on

    first_year = transactions[0].date.year
    last_year = end_date.year
    if first_year > last_year:
        return ()

    by_year = _group_by_year(transactions)
    entries: List[YearAccrualEntry] = []
    begin = ZERO
    base = ZERO
    for year in range(first_year, last_year + 1):
        entry, base = _accrue_year(
            loan,
            method,
            year,
            begin,
            base,
            by_year.get(year, []),
            end_date,
            year == last_year,
            exclude_transaction_id,
            not closing_excluded,
        )
        logger.debug(
            "Loan %s %s: begin=%s interest=%s end=%s", loan.id, year, entry.begin, entry.interest, entry.end
        )
        entries.append(entry)
        begin = entry.end
    return tuple(entries)


def available_balance(
    loan: Loan,
    on_date: date,
    exclude_transaction_id: Optional[str] = None,
    default_method: Optional[InterestMethod] = None,
) -> Decimal:
    """Return the balance on ``on_date``, optionally ignoring one transaction.

    Used to check a pending withdrawal against the money actually available
    without counting the withdrawal itself.
    """
    entries = accrual_by_year(loan, on_date, exclude_transaction_id, default_method)
    return entries[-1].end if entries else ZERO
