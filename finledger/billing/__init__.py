"""Billing cycle and installment calculations."""

from finledger.billing.cycle import add_months, effective_billing_date
from finledger.billing.installments import (
    InstallmentPlan,
    PlannedRow,
    installment_description,
    plan_installments,
    split_amount,
    total_of,
)

__all__ = [
    "InstallmentPlan",
    "PlannedRow",
    "add_months",
    "effective_billing_date",
    "installment_description",
    "plan_installments",
    "split_amount",
    "total_of",
]
