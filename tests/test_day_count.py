"""
test_day_count.py - Unit tests for day-count conventions

Tests:
- Calendar day counting for the ACT bases
- 30/360 month counting, including the year-boundary adjustment
- Base days per basis (fixed and actual year length)
- Unrounded interest amounts
"""

import pytest
from datetime import date
from decimal import Decimal

from loan_accrual import Compounding, DayCountBasis, InterestMethod, accrued_interest
from loan_accrual.day_count import base_days, interest_days

from tests.builders import ACT_365_NC, E30_360_NC


class TestThirty360:

    def test_whole_months_count_thirty_days_regardless_of_month_length(self):
        feb = accrued_interest(date(2024, 1, 15), date(2024, 2, 15), Decimal("10000"), Decimal("5"), E30_360_NC)
        apr = accrued_interest(date(2024, 3, 15), date(2024, 4, 15), Decimal("10000"), Decimal("5"), E30_360_NC)
        assert feb == apr
        assert interest_days(date(2024, 1, 15), date(2024, 2, 15), DayCountBasis.E30_360) == 30
        assert interest_days(date(2024, 3, 15), date(2024, 4, 15), DayCountBasis.E30_360) == 30

    def test_same_month_uses_calendar_difference(self):
        assert interest_days(date(2023, 3, 5), date(2023, 3, 20), DayCountBasis.E30_360) == 15

    def test_full_first_year_is_360_days(self):
        assert interest_days(date(2023, 1, 1), None, DayCountBasis.E30_360) == 360

    def test_year_to_date_range_drops_one_day(self):
        # Jan 1 .. Jun 30 counts 180 days, less the legacy adjustment.
        assert interest_days(None, date(2023, 6, 30), DayCountBasis.E30_360) == 179

    def test_explicit_range_spanning_months_drops_one_day(self):
        # 16 days in January, 30 in February, 1 in March.
        assert interest_days(date(2023, 1, 15), date(2023, 3, 1), DayCountBasis.E30_360) == 46

    def test_thirty_first_is_capped(self):
        assert interest_days(date(2023, 1, 31), date(2023, 3, 31), DayCountBasis.E30_360) == 59


class TestActual:

    def test_actual_365_counts_calendar_days(self):
        assert interest_days(date(2024, 1, 15), date(2024, 2, 15), DayCountBasis.ACT_365) == 31
        assert interest_days(date(2024, 2, 15), date(2024, 3, 15), DayCountBasis.ACT_365) == 29

    def test_actual_and_thirty_360_differ_over_february(self):
        act = accrued_interest(date(2024, 2, 1), date(2024, 3, 1), Decimal("10000"), Decimal("5"), ACT_365_NC)
        e30 = accrued_interest(date(2024, 2, 1), date(2024, 3, 1), Decimal("10000"), Decimal("5"), E30_360_NC)
        assert act != e30

    def test_open_end_runs_to_december_31(self):
        assert interest_days(date(2024, 1, 1), None, DayCountBasis.ACT_365) == 365
        assert interest_days(date(2023, 1, 1), None, DayCountBasis.ACT_365) == 364

    def test_open_start_runs_from_january_1(self):
        assert interest_days(None, date(2023, 3, 1), DayCountBasis.ACT_360) == 59

    def test_both_dates_missing_is_rejected(self):
        with pytest.raises(ValueError):
            interest_days(None, None, DayCountBasis.ACT_365)


class TestBaseDays:

    @pytest.mark.parametrize(
        "basis,expected",
        [
            (DayCountBasis.ACT_365, 365),
            (DayCountBasis.ACT_360, 360),
            (DayCountBasis.E30_360, 360),
        ],
    )
    def test_fixed_bases(self, basis, expected):
        assert base_days(basis, date(2024, 6, 1)) == expected

    def test_actual_actual_follows_year_length(self):
        assert base_days(DayCountBasis.ACT_ACT, date(2024, 6, 1)) == 366
        assert base_days(DayCountBasis.ACT_ACT, date(2023, 6, 1)) == 365


class TestAccruedInterest:

    def test_full_leap_year_at_actual_365(self):
        interest = accrued_interest(date(2024, 1, 1), None, Decimal("10000"), Decimal("5"), ACT_365_NC)
        assert interest == Decimal("500")

    def test_result_is_not_rounded(self):
        interest = accrued_interest(date(2024, 1, 1), date(2024, 1, 2), Decimal("100"), Decimal("1"), ACT_365_NC)
        assert interest == Decimal("100") * Decimal("1") / Decimal(100) * Decimal(1) / Decimal(365)
        assert interest.as_tuple().exponent < -2

    def test_actual_actual_uses_end_year(self):
        method = InterestMethod(DayCountBasis.ACT_ACT, Compounding.COMPOUND)
        interest = accrued_interest(None, date(2024, 12, 31), Decimal("36600"), Decimal("10"), method)
        assert interest == Decimal("3650")

    def test_negative_principal_gives_negative_interest(self):
        interest = accrued_interest(date(2023, 7, 1), None, Decimal("-1000"), Decimal("3"), E30_360_NC)
        assert interest < 0


class TestInterestMethodParsing:

    def test_round_trips_string_form(self):
        method = InterestMethod.parse("e30_360_compound")
        assert method == InterestMethod(DayCountBasis.E30_360, Compounding.COMPOUND)
        assert str(method) == "E30_360_COMPOUND"
        assert method.compound

    def test_rejects_unknown_method(self):
        with pytest.raises(ValueError):
            InterestMethod.parse("ACT_999_COMPOUND")
