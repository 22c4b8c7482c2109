"""
Data Models Package

This package contains all Pydantic models used by finledger.
All data the engine stores or returns conforms to these schemas.
"""

from finledger.models.ledger import (
    Account,
    Budget,
    BudgetPayment,
    BudgetType,
    Card,
    Expense,
    ExpenseType,
    Income,
    InstallmentInfo,
    InstallmentType,
    LedgerSnapshot,
    MonthlyTotals,
    ValidationIssue,
)
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "Budget",
    "BudgetPayment",
    "BudgetType",
    "Card",
    "Expense",
    "ExpenseType",
    "Income",
    "InstallmentInfo",
    "InstallmentType",
    "LedgerSnapshot",
    "MonthlyTotals",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
