"""
conftest.py - Shared pytest fixtures for loan accrual tests

Provides:
- The two reference loans (funded, and funded then terminated)
- A settings cache reset so environment changes are picked up per test
"""

import pytest
from datetime import date

from loan_accrual.config import get_settings

from tests.builders import make_loan, tx


@pytest.fixture
def funded_loan():
    """10,000 at 5%, ACT/365 without compounding, deposited 2024-01-01."""
    return make_loan([tx("t-dep", "DEPOSIT", date(2024, 1, 1), "10000")])


@pytest.fixture
def repaid_loan():
    """The funded loan, fully paid back on 2025-01-01."""
    return make_loan(
        [
            tx("t-dep", "DEPOSIT", date(2024, 1, 1), "10000"),
            tx("t-term", "TERMINATION", date(2025, 1, 1), "-10500.00"),
        ]
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
