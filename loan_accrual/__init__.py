"""Interest and balance accrual for loan ledgers."""

from .data_models import (
    Compounding,
    DayCountBasis,
    DurationUnit,
    FileRecord,
    InterestMethod,
    LenderTotals,
    Loan,
    LoanSnapshot,
    LoanStatus,
    Note,
    PaymentType,
    TerminationType,
    Transaction,
    TransactionType,
    YearAccrualEntry,
    YearTotals,
)
from .day_count import accrued_interest
from .engine import accrual_by_year, available_balance
from .errors import AccrualError, LoanDataError, MissingInterestMethod
from .portfolio import aggregate_lender, calculate_lender, status_breakdown, yearly_totals
from .snapshot import snapshot
from .status import is_terminated, loan_status, repaid_date, repay_date, sort_transactions
