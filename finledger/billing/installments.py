"""
Installment Expansion

A purchase paid over N months is stored as N independent expense rows, one
per consecutive month starting at the purchase's effective date. Each row
carries an equal share and a "(current/count)" suffix on its description.

Amounts:
- entered as TOTAL:   per row = total / count (Decimal division, default
  context; rows may differ from the total by a rounding residue in the last
  digits, and total_of() re-derives exactly the same figure)
- entered as MONTHLY: total = per row * count
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from finledger.billing.cycle import add_months
from finledger.models.ledger import InstallmentInfo, InstallmentType


class PlannedRow(BaseModel):
    """One expense row of an installment plan, before it gets an id."""

    amount: Decimal
    date: date
    description: str
    installments: InstallmentInfo


class InstallmentPlan(BaseModel):
    """Everything needed to book one purchase."""

    total_amount: Decimal = Field(..., description="Amount the card debt grows by")
    per_installment_amount: Decimal
    rows: list[PlannedRow] = Field(default_factory=list)


def split_amount(
    amount: Decimal,
    count: int,
    installment_type: InstallmentType,
) -> tuple[Decimal, Decimal]:
    """Return (total, per_installment) for an amount entered as total or monthly."""
    if count <= 1:
        return amount, amount
    if installment_type == InstallmentType.TOTAL:
        return amount, amount / count
    return amount * count, amount


def total_of(per_installment_amount: Decimal, count: int) -> Decimal:
    """Sum of a plan's rows, using the same arithmetic the plan was built with."""
    return per_installment_amount * count


def installment_description(description: str, current: int, count: int) -> str:
    return f"{description} ({current}/{count})"


def plan_installments(
    amount: Decimal,
    description: str,
    effective_date: date,
    count: int = 1,
    installment_type: InstallmentType = InstallmentType.TOTAL,
) -> InstallmentPlan:
    """
    Expand a purchase into its expense rows.

    A single payment (count == 1) is one row with the full amount and the
    description unchanged.
    """
    total_amount, per_row = split_amount(amount, count, installment_type)

    if count <= 1:
        return InstallmentPlan(
            total_amount=total_amount,
            per_installment_amount=per_row,
            rows=[
                PlannedRow(
                    amount=total_amount,
                    date=effective_date,
                    description=description,
                    installments=InstallmentInfo(count=1, current=1),
                )
            ],
        )

    rows = [
        PlannedRow(
            amount=per_row,
            # always offset from the first row so a 31st stays the 31st where it exists
            date=add_months(effective_date, index),
            description=installment_description(description, index + 1, count),
            installments=InstallmentInfo(
                count=count,
                current=index + 1,
                type=installment_type,
            ),
        )
        for index in range(count)
    ]
    return InstallmentPlan(
        total_amount=total_amount,
        per_installment_amount=per_row,
        rows=rows,
    )
