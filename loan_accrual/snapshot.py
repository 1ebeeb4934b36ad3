"""Loan snapshots as of a reference date.

A snapshot reduces the per-year ledger produced by :mod:`loan_accrual.engine`
into running totals, attaches the derived status and repayment dates, and adds
one virtual INTEREST transaction per year so that interest shows up alongside
the real cash flows.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Tuple

from .data_models import (
    FileRecord,
    InterestMethod,
    Loan,
    LoanSnapshot,
    Note,
    PaymentType,
    Transaction,
    TransactionType,
    YearAccrualEntry,
)
from .engine import ZERO, accrual_by_year
from .status import is_terminated, loan_status, repay_date, repaid_date, sort_transactions
from .utils import end_of_year


def interest_booking_date(year: int, as_of: date, repaid_on: Optional[date]) -> date:
    """Return the date a year's interest is booked on.

    The repayment date in the year of repayment, the reference date in its own
    year, and December 31st otherwise.
    """
    if repaid_on is not None and repaid_on.year == year:
        return repaid_on
    if as_of.year == year:
        return as_of
    return end_of_year(year)


def interest_transactions(
    years: Iterable[YearAccrualEntry],
    as_of: date,
    repaid_on: Optional[date],
) -> List[Transaction]:
    return [
        Transaction(
            id=f"{entry.year}-interest",
            type=TransactionType.INTEREST,
            date=interest_booking_date(entry.year, as_of, repaid_on),
            amount=entry.interest,
            payment_type=PaymentType.OTHER,
        )
        for entry in years
        if entry.interest > 0
    ]


def _client_view(
    notes: Tuple[Note, ...], files: Tuple[FileRecord, ...]
) -> Tuple[Tuple[Note, ...], Tuple[FileRecord, ...]]:
    return tuple(n for n in notes if n.public), tuple(f for f in files if f.public)


def snapshot(
    loan: Loan,
    as_of: date,
    interest_year: Optional[int] = None,
    client: bool = False,
    default_method: Optional[InterestMethod] = None,
) -> LoanSnapshot:
    """Build the state of ``loan`` as of ``as_of``.

    Parameters
    ----------
    loan: Loan
        The loan terms and transactions.
    as_of: date
        Reference date.
    interest_year: Optional[int]
        Year whose interest is reported as ``interest_of_year``. Defaults to
        the year before ``as_of``.
    client: bool
        Restrict notes and files to public ones, for callers outside the
        project team. File contents are dropped in every snapshot.
    default_method: Optional[InterestMethod]
        The project's interest method, used when the loan has no override.
    """
    if interest_year is None:
        interest_year = as_of.year - 1
    years = accrual_by_year(loan, as_of, default_method=default_method)
    repaid_on = repaid_date(loan, as_of)

    balance = years[-1].end if years else ZERO
    interest_of_year = ZERO
    for entry in years:
        if entry.year == interest_year:
            interest_of_year = entry.interest

    transactions = sort_transactions(
        list(loan.transactions) + interest_transactions(years, as_of, repaid_on)
    )
    notes = tuple(loan.notes)
    # File contents never leave the loan record.
    files = tuple(replace(f, data=None) for f in loan.files)
    if client:
        notes, files = _client_view(notes, files)

    return LoanSnapshot(
        loan_id=loan.id,
        as_of=as_of,
        amount=loan.amount,
        interest_rate=loan.interest_rate,
        balance=balance,
        interest=sum((e.interest for e in years), ZERO),
        interest_of_year=interest_of_year,
        deposits=sum((e.deposits for e in years), ZERO),
        withdrawals=sum((e.withdrawals for e in years), ZERO),
        not_reclaimed=sum((e.not_reclaimed for e in years), ZERO),
        interest_paid=sum((e.interest_paid for e in years), ZERO),
        interest_error=sum((e.interest_error for e in years), ZERO),
        status=loan_status(loan, as_of),
        repaid_date=repaid_on,
        repay_date=repay_date(loan),
        is_terminated=is_terminated(loan),
        sign_date=loan.sign_date,
        years=years,
        transactions=tuple(transactions),
        notes=notes,
        files=files,
    )
