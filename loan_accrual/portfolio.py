"""Reductions over several loans.

Everything here is a stateless sum over per-loan results: lender totals with
amount and balance weighted average rates, a status breakdown, and per-year
totals across a set of loans.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .data_models import InterestMethod, LenderTotals, Loan, LoanSnapshot, LoanStatus, YearTotals
from .engine import ZERO, accrual_by_year
from .snapshot import snapshot
from .utils import end_of_year


def _weighted_rate(weighted_sum: Decimal, weight: Decimal) -> Decimal:
    if weighted_sum > 0 and weight > 0:
        return weighted_sum / weight
    return ZERO


def aggregate_lender(snapshots: Sequence[LoanSnapshot]) -> LenderTotals:
    """Sum the snapshots of one lender's loans."""
    amount = sum((s.amount for s in snapshots), ZERO)
    balance = sum((s.balance for s in snapshots), ZERO)
    rate_by_amount = sum((s.interest_rate * s.amount for s in snapshots), ZERO)
    rate_by_balance = sum((s.interest_rate * s.balance for s in snapshots), ZERO)
    return LenderTotals(
        balance=balance,
        interest=sum((s.interest for s in snapshots), ZERO),
        deposits=sum((s.deposits for s in snapshots), ZERO),
        withdrawals=sum((s.withdrawals for s in snapshots), ZERO),
        interest_paid=sum((s.interest_paid for s in snapshots), ZERO),
        interest_error=sum((s.interest_error for s in snapshots), ZERO),
        not_reclaimed=sum((s.not_reclaimed for s in snapshots), ZERO),
        amount=amount,
        interest_rate=_weighted_rate(rate_by_amount, amount),
        balance_interest_rate=_weighted_rate(rate_by_balance, balance),
        total_loans=len(snapshots),
        active_loans=sum(1 for s in snapshots if s.status is LoanStatus.ACTIVE),
        loans=tuple(snapshots),
    )


def calculate_lender(
    loans: Iterable[Loan],
    as_of: date,
    interest_year: Optional[int] = None,
    client: bool = False,
    default_method: Optional[InterestMethod] = None,
) -> LenderTotals:
    """Snapshot every loan of a lender and aggregate them.

    The snapshots in the result are ordered by sign date, newest first.
    """
    snapshots = [snapshot(loan, as_of, interest_year, client, default_method) for loan in loans]
    snapshots.sort(key=lambda s: s.sign_date, reverse=True)
    return aggregate_lender(snapshots)


def status_breakdown(snapshots: Iterable[LoanSnapshot]) -> Dict[LoanStatus, int]:
    counts = {status: 0 for status in LoanStatus}
    for s in snapshots:
        counts[s.status] += 1
    return counts


def yearly_totals(
    loans: Sequence[Loan],
    first_year: int,
    last_year: int,
    default_method: Optional[InterestMethod] = None,
) -> Tuple[YearTotals, ...]:
    """Sum each loan's entry for every year in ``first_year..last_year``.

    Each loan is evaluated as of December 31st of the year in question, so a
    year's figures never include interest from later years.
    """
    rows: List[YearTotals] = []
    for year in range(first_year, last_year + 1):
        sums = dict.fromkeys(
            ("begin", "end", "deposits", "withdrawals", "not_reclaimed", "interest_paid", "interest"), ZERO
        )
        for loan in loans:
            for entry in accrual_by_year(loan, end_of_year(year), default_method=default_method):
                if entry.year != year:
                    continue
                for key in sums:
                    sums[key] += getattr(entry, key)
        rows.append(YearTotals(year=year, **sums))
    return tuple(rows)
