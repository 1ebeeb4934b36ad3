"""Data models for the loan accrual engine.

This module defines the enums and dataclasses used throughout the engine:
loan terms and their transaction ledger (the inputs), the interest method
configuration, and the derived per-year entries, loan snapshots and lender
totals (the outputs). Inputs are plain dataclasses; outputs are frozen so a
result can never be modified after it has been computed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TERMINATION = "TERMINATION"
    INTEREST_PAYMENT = "INTEREST_PAYMENT"
    PARTIAL_NON_RECLAIM = "PARTIAL_NON_RECLAIM"
    NON_RECLAIM = "NON_RECLAIM"
    # Only produced by the snapshot builder for yearly interest bookings.
    INTEREST = "INTEREST"


class PaymentType(str, Enum):
    BANK = "BANK"
    CASH = "CASH"
    OTHER = "OTHER"


class TerminationType(str, Enum):
    END_DATE = "END_DATE"
    NOTICE_PERIOD = "NOTICE_PERIOD"
    FIXED_DURATION = "FIXED_DURATION"


class DurationUnit(str, Enum):
    MONTHS = "MONTHS"
    YEARS = "YEARS"


class LoanStatus(str, Enum):
    NOT_FUNDED = "NOT_FUNDED"
    ACTIVE = "ACTIVE"
    TERMINATED = "TERMINATED"
    REPAID = "REPAID"


class DayCountBasis(str, Enum):
    ACT_365 = "ACT_365"
    E30_360 = "E30_360"
    ACT_360 = "ACT_360"
    ACT_ACT = "ACT_ACT"


class Compounding(str, Enum):
    COMPOUND = "COMPOUND"
    NOCOMPOUND = "NOCOMPOUND"


@dataclass(frozen=True)
class InterestMethod:
    """A day-count basis paired with a compounding policy.

    The string form used by configuration files is ``<BASIS>_<COMPOUNDING>``,
    for example ``"ACT_365_NOCOMPOUND"`` or ``"E30_360_COMPOUND"``.
    """

    basis: DayCountBasis
    compounding: Compounding

    @property
    def compound(self) -> bool:
        return self.compounding is Compounding.COMPOUND

    @classmethod
    def parse(cls, value: str) -> "InterestMethod":
        """Parse ``"ACT_365_COMPOUND"`` style strings.

        Raises
        ------
        ValueError
            If the basis or the compounding part is unknown.
        """
        text = value.strip().upper()
        basis_part, _, compounding_part = text.rpartition("_")
        try:
            return cls(DayCountBasis(basis_part), Compounding(compounding_part))
        except ValueError as exc:
            raise ValueError(f"Invalid interest method: {value}") from exc

    def __str__(self) -> str:
        return f"{self.basis.value}_{self.compounding.value}"


@dataclass
class Transaction:
    """A single cash flow on a loan's ledger.

    Attributes
    ----------
    id: str
        Identifier, unique within the loan.
    type: TransactionType
        Semantic kind of the cash flow.
    date: date
        Booking date.
    amount: Decimal
        Signed amount. Deposits are positive; withdrawals, terminations,
        interest payments and non-reclaims are negative. The engine trusts
        the sign it is given.
    payment_type: PaymentType
        How the money moved. Informational only.
    """

    id: str
    type: TransactionType
    date: date
    amount: Decimal
    payment_type: PaymentType = PaymentType.BANK


@dataclass
class Note:
    id: str
    text: str
    public: bool = False


@dataclass
class FileRecord:
    id: str
    name: str
    public: bool = False
    data: Optional[bytes] = None


@dataclass
class Loan:
    """Terms of a loan together with its transaction ledger.

    Only one of ``end_date``, ``notice_period`` and ``duration`` is meaningful
    for a given loan, selected by ``termination_type``. ``termination_date``
    is the date the notice was given for NOTICE_PERIOD loans.
    ``alt_interest_method`` overrides the project's default method.
    """

    id: str
    amount: Decimal
    interest_rate: Decimal  # percent per year
    sign_date: date
    termination_type: TerminationType
    end_date: Optional[date] = None
    notice_period: Optional[int] = None
    notice_period_unit: DurationUnit = DurationUnit.MONTHS
    duration: Optional[int] = None
    duration_unit: DurationUnit = DurationUnit.YEARS
    termination_date: Optional[date] = None
    alt_interest_method: Optional[InterestMethod] = None
    transactions: Tuple[Transaction, ...] = ()
    notes: Tuple[Note, ...] = ()
    files: Tuple[FileRecord, ...] = ()


@dataclass(frozen=True)
class YearAccrualEntry:
    """Balance movements of one loan in one calendar year.

    ``interest_base_amount`` is the principal earning interest at the start of
    the year under the compounding policy. ``interest_error`` is the rounding
    residual removed from ``interest`` so that a repaid loan ends at zero.
    """

    year: int
    begin: Decimal
    deposits: Decimal
    withdrawals: Decimal
    not_reclaimed: Decimal
    interest_paid: Decimal
    interest: Decimal
    interest_base_amount: Decimal
    end: Decimal
    interest_error: Decimal = Decimal("0")


@dataclass(frozen=True)
class LoanSnapshot:
    """State of a loan as of a reference date."""

    loan_id: str
    as_of: date
    amount: Decimal
    interest_rate: Decimal
    balance: Decimal
    interest: Decimal
    interest_of_year: Decimal
    deposits: Decimal
    withdrawals: Decimal
    not_reclaimed: Decimal
    interest_paid: Decimal
    interest_error: Decimal
    status: LoanStatus
    repaid_date: Optional[date]
    repay_date: Optional[date]
    is_terminated: bool
    sign_date: date
    years: Tuple[YearAccrualEntry, ...] = ()
    transactions: Tuple[Transaction, ...] = ()
    notes: Tuple[Note, ...] = ()
    files: Tuple[FileRecord, ...] = ()


@dataclass(frozen=True)
class LenderTotals:
    """Sums over all loans of one lender.

    ``interest_rate`` is weighted by loan amount, ``balance_interest_rate``
    by current balance.
    """

    balance: Decimal
    interest: Decimal
    deposits: Decimal
    withdrawals: Decimal
    interest_paid: Decimal
    interest_error: Decimal
    not_reclaimed: Decimal
    amount: Decimal
    interest_rate: Decimal
    balance_interest_rate: Decimal
    total_loans: int
    active_loans: int
    loans: Tuple[LoanSnapshot, ...] = field(default=())


@dataclass(frozen=True)
class YearTotals:
    """Per-year sums across a set of loans."""

    year: int
    begin: Decimal
    end: Decimal
    deposits: Decimal
    withdrawals: Decimal
    not_reclaimed: Decimal
    interest_paid: Decimal
    interest: Decimal
