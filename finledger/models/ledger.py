"""
Core Data Models for finledger

These models define the schemas for everything the ledger stores.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the snapshot kept in the key-value store

DESIGN DECISION: Snapshot keys are camelCase (lastInterestDate, cutoffDay,
budgetPayments, ...). This is the layout the store has always used, so
snapshots written by earlier versions load without a migration step.
Python code uses the snake_case attribute names.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseType(str, Enum):
    """
    Known expense types.

    Only CREDIT_CARD has behaviour attached (billing cycle shift and card
    debt). Any other value is stored as given and treated like cash.
    """
    CREDIT_CARD = "credit_card"
    CASH = "cash"


class InstallmentType(str, Enum):
    """How the amount of a multi-installment purchase was entered."""
    TOTAL = "total"      # amount is the whole purchase, split over the months
    MONTHLY = "monthly"  # amount is one month's share


class BudgetType(str, Enum):
    """Direction of a recurring budget item."""
    INCOME = "income"
    EXPENSE = "expense"


class LedgerModel(BaseModel):
    """Base for all stored entities: camelCase in the snapshot, snake_case in code."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class Account(LedgerModel):
    """
    A money account (cash, bank, savings).

    balance is a stored running total. It is changed by income postings,
    income deletions and interest accrual, never recomputed from history.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., description="Display name")
    balance: Decimal = Field(
        default=Decimal("0"),
        allow_inf_nan=False,
        description="Current balance (may be negative)"
    )
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        description="Interest in percent per day"
    )
    last_interest_date: Optional[date] = Field(
        default=None,
        description="Last calendar day interest was accrued up to"
    )


class Card(LedgerModel):
    """
    A credit card.

    current_debt is a stored running total maintained by credit-card
    expense postings and deletions.
    """

    id: str = Field(..., min_length=1)
    name: str
    credit_limit: Decimal = Field(
        default=Decimal("0"),
        alias="limit",
        allow_inf_nan=False,
        description="Credit limit"
    )
    current_debt: Decimal = Field(
        default=Decimal("0"),
        allow_inf_nan=False,
        description="Outstanding debt"
    )
    cutoff_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Statement cutoff day of month"
    )
    payment_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Payment due day of month, unset if unknown"
    )


class Income(LedgerModel):
    """Money received into an account."""

    id: str = Field(..., min_length=1)
    account_id: Optional[str] = Field(
        default=None,
        description="Account credited (reference, may dangle)"
    )
    amount: Decimal = Field(..., allow_inf_nan=False)
    description: str = ""
    date: Annotated[date, Field(description="Date the income was received")]


class InstallmentInfo(LedgerModel):
    """Position of one expense row inside its installment plan."""

    count: int = Field(default=1, ge=1)
    current: int = Field(default=1, ge=1)
    type: InstallmentType = InstallmentType.TOTAL


class Expense(LedgerModel):
    """
    One expense row.

    A purchase split into N installments is stored as N independent rows.
    There is no group identifier: once created, each row lives and dies on
    its own.
    """

    id: str = Field(..., min_length=1)
    type: str = Field(
        default=ExpenseType.CASH.value,
        description="'credit_card' or any other payment method"
    )
    card_id: Optional[str] = Field(
        default=None,
        description="Card charged (credit card expenses only, may dangle)"
    )
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Amount of this row (one installment)"
    )
    description: str = ""
    date: Annotated[date, Field(description="Effective date after billing cycle shift")]
    installments: InstallmentInfo = Field(default_factory=InstallmentInfo)

    @property
    def is_credit_card(self) -> bool:
        return self.type == ExpenseType.CREDIT_CARD.value


class Budget(LedgerModel):
    """A recurring planned income or expense, not an actual transaction."""

    id: str = Field(..., min_length=1)
    type: BudgetType
    amount: Decimal = Field(..., allow_inf_nan=False)
    description: str = ""
    day: int = Field(default=1, ge=1, le=31, description="Day of month it falls on")


class BudgetPayment(LedgerModel):
    """
    Marks a budget item as settled for one calendar month.

    Keyed by (budget_id, month_str). Only paid records are stored;
    marking a month unpaid removes the record.
    """

    budget_id: str
    month_str: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Calendar month, YYYY-MM"
    )
    is_paid: bool = True
    paid_date: Optional[datetime] = None


# =============================================================================
# SNAPSHOT - the whole persisted state
# =============================================================================

class LedgerSnapshot(LedgerModel):
    """
    The full ledger state as written to the store.

    Lists missing from older snapshots load as empty.
    """

    accounts: list[Account] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)
    incomes: list[Income] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    budget_payments: list[BudgetPayment] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize with the store's camelCase keys."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, payload: str) -> "LedgerSnapshot":
        return cls.model_validate_json(payload)


# =============================================================================
# QUERY RESULTS
# =============================================================================

class MonthlyTotals(BaseModel):
    """Income and expense posted within one calendar month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in input handed to the engine."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'not_a_number', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    value: Optional[str] = Field(
        default=None,
        description="The rejected input, as text"
    )
