"""Aggregate query package."""

from finledger.queries.totals import (
    in_month,
    month_bounds,
    month_str,
    monthly_totals,
    net_worth,
    total_assets,
    total_debt,
)

__all__ = [
    "in_month",
    "month_bounds",
    "month_str",
    "monthly_totals",
    "net_worth",
    "total_assets",
    "total_debt",
]
