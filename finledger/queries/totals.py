"""
Aggregate Calculations

DESIGN DECISION: Totals are DERIVED on demand from the records the engine
holds. Nothing here writes state.

Monthly totals cover the inclusive range [first day, last day] of the
calendar month, so a record on the 31st of January counts for January.
Assets and debt are sums of the stored running balances, not a replay of
transaction history.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Iterable, TypeVar

from finledger.models.ledger import Account, Card, Expense, Income, MonthlyTotals

Dated = TypeVar("Dated", Income, Expense)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_str(year: int, month: int) -> str:
    """Month key used by budget payments: YYYY-MM."""
    return f"{year:04d}-{month:02d}"


def in_month(records: Iterable[Dated], year: int, month: int) -> list[Dated]:
    """Records dated within the month, bounds included."""
    first, last = month_bounds(year, month)
    return [record for record in records if first <= record.date <= last]


def monthly_totals(
    incomes: Iterable[Income],
    expenses: Iterable[Expense],
    year: int,
    month: int,
) -> MonthlyTotals:
    """Sum of income and expense amounts dated within one month."""
    income_total = sum(
        (income.amount for income in in_month(incomes, year, month)),
        Decimal("0"),
    )
    expense_total = sum(
        (expense.amount for expense in in_month(expenses, year, month)),
        Decimal("0"),
    )
    return MonthlyTotals(
        year=year,
        month=month,
        income=income_total,
        expense=expense_total,
    )


def total_assets(accounts: Iterable[Account]) -> Decimal:
    return sum((account.balance for account in accounts), Decimal("0"))


def total_debt(cards: Iterable[Card]) -> Decimal:
    return sum((card.current_debt for card in cards), Decimal("0"))


def net_worth(accounts: Iterable[Account], cards: Iterable[Card]) -> Decimal:
    """Assets minus card debt."""
    return total_assets(accounts) - total_debt(cards)
