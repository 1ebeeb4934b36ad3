"""Exceptions raised by the loan accrual engine."""


class AccrualError(Exception):
    """Base class for all errors raised by this package."""


class MissingInterestMethod(AccrualError):
    """Neither the loan nor the project defines an interest method."""

    def __init__(self, loan_id: str) -> None:
        super().__init__(f"No interest method configured for loan {loan_id}")
        self.loan_id = loan_id


class LoanDataError(AccrualError, ValueError):
    """An input document could not be turned into loan data."""
