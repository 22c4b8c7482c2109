"""Interest accrual package."""

from finledger.interest.accrual import (
    INTEREST_DESCRIPTION,
    InterestPosting,
    days_since,
    interest_for,
    plan_interest,
)

__all__ = [
    "INTEREST_DESCRIPTION",
    "InterestPosting",
    "days_since",
    "interest_for",
    "plan_interest",
]
