"""Output helpers for the loan accrual engine.

This module renders snapshots, per-year ledgers and lender totals as plain
tab-separated text tables for the terminal.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional

from .data_models import LenderTotals, LoanSnapshot, LoanStatus, Transaction, YearAccrualEntry, YearTotals


def _fmt_date(value: Optional[date]) -> str:
    return value.isoformat() if value else "-"


def print_snapshot(snap: LoanSnapshot) -> None:
    """Print the totals of a loan snapshot in a human-readable format."""
    print(f"Loan {snap.loan_id} as of {snap.as_of.isoformat()}")
    print("-" * 72)
    print(f"Status             : {snap.status.value}")
    print(f"Amount             : {snap.amount:.2f}")
    print(f"Interest rate      : {snap.interest_rate:.3f}%")
    print(f"Balance            : {snap.balance:.2f}")
    print(f"Deposits           : {snap.deposits:.2f}")
    print(f"Withdrawals        : {snap.withdrawals:.2f}")
    if snap.not_reclaimed:
        print(f"Not reclaimed      : {snap.not_reclaimed:.2f}")
    print(f"Interest           : {snap.interest:.2f}")
    print(f"Interest of year   : {snap.interest_of_year:.2f}")
    print(f"Interest paid      : {snap.interest_paid:.2f}")
    if snap.interest_error:
        print(f"Rounding error     : {snap.interest_error:.2f}")
    print(f"Repay date         : {_fmt_date(snap.repay_date)}")
    if snap.repaid_date:
        print(f"Repaid on          : {_fmt_date(snap.repaid_date)}")
    print("-" * 72)


def print_transactions(transactions: Iterable[Transaction]) -> None:
    print("\t".join(["Date", "Type", "Amount", "Payment", "Id"]))
    for t in transactions:
        print("\t".join([t.date.isoformat(), t.type.value, f"{t.amount:.2f}", t.payment_type.value, t.id]))


def print_years(entries: Iterable[YearAccrualEntry]) -> None:
    """Print the per-year ledger as a simple table."""
    headers = ["Year", "Begin", "Deposits", "Withdraw", "NotRecl", "IntPaid", "Interest", "End", "Error"]
    print("\t".join(headers))
    for e in entries:
        row = [
            str(e.year),
            f"{e.begin:.2f}",
            f"{e.deposits:.2f}",
            f"{e.withdrawals:.2f}",
            f"{e.not_reclaimed:.2f}",
            f"{e.interest_paid:.2f}",
            f"{e.interest:.2f}",
            f"{e.end:.2f}",
            f"{e.interest_error:.2f}",
        ]
        print("\t".join(row))


def print_lender(totals: LenderTotals, lender_id: Optional[str] = None, max_rows: Optional[int] = None) -> None:
    """Print lender totals followed by one row per loan."""
    print(f"Lender {lender_id}" if lender_id else "Lender")
    print("=" * 72)
    print(f"Loans              : {totals.total_loans} ({totals.active_loans} active)")
    print(f"Amount             : {totals.amount:.2f}")
    print(f"Balance            : {totals.balance:.2f}")
    print(f"Interest           : {totals.interest:.2f}")
    print(f"Interest paid      : {totals.interest_paid:.2f}")
    print(f"Avg rate (amount)  : {totals.interest_rate:.3f}%")
    print(f"Avg rate (balance) : {totals.balance_interest_rate:.3f}%")
    print("=" * 72)
    print("\t".join(["Loan", "Signed", "Status", "Amount", "Rate", "Balance", "Interest"]))
    for s in totals.loans[:max_rows]:
        print(
            "\t".join(
                [
                    s.loan_id,
                    s.sign_date.isoformat(),
                    s.status.value,
                    f"{s.amount:.2f}",
                    f"{s.interest_rate:.3f}",
                    f"{s.balance:.2f}",
                    f"{s.interest:.2f}",
                ]
            )
        )


def print_portfolio(breakdown: Dict[LoanStatus, int], rows: Iterable[YearTotals]) -> None:
    """Print a status breakdown and per-year totals across loans."""
    print("Status breakdown")
    print("-" * 72)
    for status, count in breakdown.items():
        print(f"{status.value:20s} {count:>6d}")
    print("-" * 72)
    print("\t".join(["Year", "Begin", "Deposits", "Withdraw", "NotRecl", "IntPaid", "Interest", "End"]))
    for r in rows:
        print(
            "\t".join(
                [
                    str(r.year),
                    f"{r.begin:.2f}",
                    f"{r.deposits:.2f}",
                    f"{r.withdrawals:.2f}",
                    f"{r.not_reclaimed:.2f}",
                    f"{r.interest_paid:.2f}",
                    f"{r.interest:.2f}",
                    f"{r.end:.2f}",
                ]
            )
        )
