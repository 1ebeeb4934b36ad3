"""
test_status.py - Unit tests for loan status and repayment dates

Tests:
- Status derivation (NOT_FUNDED, ACTIVE, TERMINATED, REPAID)
- Repaid date rules (closing type, date, minimum history)
- Contractual repayment dates for each termination type
- Same-date ordering of transactions (property)
"""

from datetime import date
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from loan_accrual import (
    DurationUnit,
    LoanStatus,
    TerminationType,
    Transaction,
    TransactionType,
    is_terminated,
    loan_status,
    repaid_date,
    repay_date,
    sort_transactions,
)

from tests.builders import make_loan, tx


class TestLoanStatus:

    def test_no_transactions_is_not_funded(self):
        assert loan_status(make_loan([]), date(2025, 1, 1)) is LoanStatus.NOT_FUNDED

    def test_funded_loan_is_active(self, funded_loan):
        assert loan_status(funded_loan, date(2025, 1, 1)) is LoanStatus.ACTIVE

    def test_terminated_history_is_repaid(self, repaid_loan):
        assert loan_status(repaid_loan, date(2025, 1, 2)) is LoanStatus.REPAID
        assert repaid_date(repaid_loan, date(2025, 1, 2)) == date(2025, 1, 1)

    def test_repayment_on_reference_date_counts(self, repaid_loan):
        assert repaid_date(repaid_loan, date(2025, 1, 1)) == date(2025, 1, 1)

    def test_future_termination_is_not_yet_repaid(self, repaid_loan):
        assert repaid_date(repaid_loan, date(2024, 12, 31)) is None
        assert loan_status(repaid_loan, date(2024, 12, 31)) is LoanStatus.ACTIVE

    def test_non_reclaim_closes_the_loan(self):
        loan = make_loan(
            [
                tx("t1", "DEPOSIT", date(2020, 1, 1), "1000"),
                tx("t2", "NON_RECLAIM", date(2024, 1, 1), "-1100"),
            ]
        )
        assert loan_status(loan, date(2024, 6, 1)) is LoanStatus.REPAID

    def test_partial_non_reclaim_does_not_close_the_loan(self):
        loan = make_loan(
            [
                tx("t1", "DEPOSIT", date(2020, 1, 1), "1000"),
                tx("t2", "PARTIAL_NON_RECLAIM", date(2024, 1, 1), "-100"),
            ]
        )
        assert loan_status(loan, date(2024, 6, 1)) is LoanStatus.ACTIVE

    def test_single_termination_is_not_a_repayment(self):
        loan = make_loan([tx("t1", "TERMINATION", date(2024, 1, 1), "-10")])
        assert repaid_date(loan, date(2025, 1, 1)) is None

    def test_closing_must_be_last_after_sorting(self):
        # Termination is listed first but a later withdrawal follows it.
        loan = make_loan(
            [
                tx("t3", "TERMINATION", date(2024, 1, 1), "-500"),
                tx("t1", "DEPOSIT", date(2023, 1, 1), "1000"),
                tx("t2", "WITHDRAWAL", date(2024, 2, 1), "-500"),
            ]
        )
        assert repaid_date(loan, date(2025, 1, 1)) is None

    def test_notice_given_is_terminated(self, funded_loan):
        funded_loan.termination_type = TerminationType.NOTICE_PERIOD
        funded_loan.notice_period = 3
        funded_loan.termination_date = date(2024, 10, 1)
        assert is_terminated(funded_loan)
        assert loan_status(funded_loan, date(2025, 1, 1)) is LoanStatus.TERMINATED

    def test_repaid_wins_over_terminated(self, repaid_loan):
        repaid_loan.termination_type = TerminationType.NOTICE_PERIOD
        repaid_loan.termination_date = date(2024, 10, 1)
        assert loan_status(repaid_loan, date(2025, 6, 1)) is LoanStatus.REPAID

    def test_notice_period_without_notice_is_active(self, funded_loan):
        funded_loan.termination_type = TerminationType.NOTICE_PERIOD
        assert not is_terminated(funded_loan)
        assert loan_status(funded_loan, date(2025, 1, 1)) is LoanStatus.ACTIVE


class TestRepayDate:

    def test_end_date(self):
        loan = make_loan([], termination_type=TerminationType.END_DATE, end_date=date(2029, 5, 31))
        assert repay_date(loan) == date(2029, 5, 31)

    def test_fixed_duration_in_years(self):
        loan = make_loan(
            [],
            termination_type=TerminationType.FIXED_DURATION,
            end_date=None,
            sign_date=date(2020, 2, 29),
            duration=2,
            duration_unit=DurationUnit.YEARS,
        )
        assert repay_date(loan) == date(2022, 2, 28)

    def test_fixed_duration_in_months(self):
        loan = make_loan(
            [],
            termination_type=TerminationType.FIXED_DURATION,
            end_date=None,
            sign_date=date(2023, 8, 31),
            duration=18,
            duration_unit=DurationUnit.MONTHS,
        )
        assert repay_date(loan) == date(2025, 2, 28)

    def test_notice_period_runs_from_notice(self):
        loan = make_loan(
            [],
            termination_type=TerminationType.NOTICE_PERIOD,
            end_date=None,
            notice_period=1,
            notice_period_unit=DurationUnit.MONTHS,
            termination_date=date(2024, 1, 31),
        )
        assert repay_date(loan) == date(2024, 2, 29)

    def test_notice_period_without_notice_has_no_date(self):
        loan = make_loan(
            [], termination_type=TerminationType.NOTICE_PERIOD, end_date=None, notice_period=6
        )
        assert repay_date(loan) is None


class TestSortTransactions:

    def test_same_day_deposit_first_termination_last(self):
        when = date(2024, 5, 1)
        ordered = sort_transactions(
            [
                tx("a", "TERMINATION", when, "-100"),
                tx("b", "WITHDRAWAL", when, "-10"),
                tx("c", "DEPOSIT", when, "50"),
                tx("d", "INTEREST_PAYMENT", when, "-5"),
                tx("e", "DEPOSIT", date(2024, 4, 30), "100"),
            ]
        )
        assert [t.id for t in ordered] == ["e", "c", "b", "d", "a"]

    def test_input_is_not_modified(self):
        items = [tx("a", "TERMINATION", date(2024, 1, 1), "-1"), tx("b", "DEPOSIT", date(2024, 1, 1), "1")]
        sort_transactions(items)
        assert [t.id for t in items] == ["a", "b"]


RANK = {TransactionType.DEPOSIT: 0, TransactionType.TERMINATION: 2}

transaction_lists = st.lists(
    st.builds(
        Transaction,
        id=st.uuids().map(str),
        type=st.sampled_from([t for t in TransactionType if t is not TransactionType.INTEREST]),
        date=st.dates(min_value=date(2024, 1, 1), max_value=date(2024, 1, 5)),
        amount=st.just(Decimal("1")),
    ),
    max_size=25,
)


@given(transaction_lists)
def test_sort_is_a_stable_total_order(transactions):
    ordered = sort_transactions(transactions)

    assert sorted(t.id for t in ordered) == sorted(t.id for t in transactions)
    keys = [(t.date, RANK.get(t.type, 1)) for t in ordered]
    assert keys == sorted(keys)
    for key in set(keys):
        expected = [t.id for t in transactions if (t.date, RANK.get(t.type, 1)) == key]
        assert [t.id for t, k in zip(ordered, keys) if k == key] == expected
    assert sort_transactions(ordered) == ordered
