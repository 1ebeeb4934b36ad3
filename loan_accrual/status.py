"""Loan lifecycle status and repayment dates.

Status is never stored: it is derived from the full transaction history every
time it is asked for.

    NOT_FUNDED  no transactions yet
    REPAID      history ends in TERMINATION or NON_RECLAIM on/before the date
    TERMINATED  notice was given on a NOTICE_PERIOD loan that is not repaid
    ACTIVE      anything else
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from .data_models import DurationUnit, Loan, LoanStatus, TerminationType, Transaction, TransactionType
from .utils import add_months, add_years

_SORT_RANK = {
    TransactionType.DEPOSIT: 0,
    TransactionType.TERMINATION: 2,
}

_CLOSING_TYPES = (TransactionType.TERMINATION, TransactionType.NON_RECLAIM)


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Return transactions in booking order.

    On the same date deposits come first and terminations last; other
    transactions keep their input order.
    """
    return sorted(transactions, key=lambda t: (t.date, _SORT_RANK.get(t.type, 1)))


def repaid_date(loan: Loan, as_of: date) -> Optional[date]:
    """Return the repayment date if the loan was repaid on or before ``as_of``."""
    if len(loan.transactions) <= 1:
        return None
    last = sort_transactions(loan.transactions)[-1]
    if last.type in _CLOSING_TYPES and last.date <= as_of:
        return last.date
    return None


def is_terminated(loan: Loan) -> bool:
    return loan.termination_type is TerminationType.NOTICE_PERIOD and loan.termination_date is not None


def loan_status(loan: Loan, as_of: date) -> LoanStatus:
    if not loan.transactions:
        return LoanStatus.NOT_FUNDED
    if repaid_date(loan, as_of) is not None:
        return LoanStatus.REPAID
    if is_terminated(loan):
        return LoanStatus.TERMINATED
    return LoanStatus.ACTIVE


def _add_duration(dt: date, length: int, unit: DurationUnit) -> date:
    if unit is DurationUnit.MONTHS:
        return add_months(dt, length)
    return add_years(dt, length)


def repay_date(loan: Loan) -> Optional[date]:
    """Return the contractual (or, after notice, expected) repayment date."""
    if loan.termination_type is TerminationType.END_DATE:
        return loan.end_date
    if loan.termination_type is TerminationType.FIXED_DURATION:
        if loan.duration is None:
            return None
        return _add_duration(loan.sign_date, loan.duration, loan.duration_unit)
    if loan.termination_date is None or loan.notice_period is None:
        return None
    return _add_duration(loan.termination_date, loan.notice_period, loan.notice_period_unit)
