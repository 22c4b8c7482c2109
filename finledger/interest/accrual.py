"""
Daily Interest Accrual

Accounts with a positive daily interest rate earn simple interest for every
calendar day since interest was last accrued:

    interest = balance * (rate / 100) * days

The whole gap is paid in one posting computed on the balance as it stands
now. Compounding only happens across sessions: the posting raises the
balance, and the next accrual starts from that higher balance.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from finledger.models.ledger import Account

INTEREST_DESCRIPTION = "{days}-day interest ({account_name})"


class InterestPosting(BaseModel):
    """An income that accrual wants to post to an account."""

    account_id: str
    days: int
    amount: Decimal
    description: str


def days_since(last_date: date, today: date) -> int:
    """
    Whole days from last_date to today.

    Dates carry no time of day, so the difference is already whole and a
    partially elapsed day is never lost. A last date in the future counts
    as zero days.
    """
    return max((today - last_date).days, 0)


def interest_for(balance: Decimal, rate: Decimal, days: int) -> Decimal:
    return balance * (rate / Decimal(100)) * days


def plan_interest(account: Account, today: date) -> Optional[InterestPosting]:
    """
    Interest owed to one account, or None if nothing is due.

    Nothing is due when the rate is not positive, the account was never
    stamped, it was already stamped today, or the balance is not positive.
    """
    if account.interest_rate <= 0 or account.last_interest_date is None:
        return None
    if account.last_interest_date == today:
        return None

    days = days_since(account.last_interest_date, today)
    if days < 1 or account.balance <= 0:
        return None

    return InterestPosting(
        account_id=account.id,
        days=days,
        amount=interest_for(account.balance, account.interest_rate, days),
        description=INTEREST_DESCRIPTION.format(days=days, account_name=account.name),
    )
