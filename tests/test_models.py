"""
Tests for finledger models

Test strategy:
1. Unit tests for individual components (models, validators, calculations)
2. Engine tests against an in-memory store and a fixed clock
3. No real filesystem outside pytest's tmp_path
"""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

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


class TestLedgerModels:
    """Tests for the stored entity models."""

    def test_account_creation(self):
        """Test Account model creation."""
        account = Account(
            id="a1",
            name="Savings",
            balance=Decimal("1000.50"),
            interest_rate=Decimal("0.05"),
            last_interest_date=date(2024, 3, 1),
        )
        assert account.name == "Savings"
        assert account.balance == Decimal("1000.50")

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        account = Account(id="a1", name="  Savings  ")
        assert account.name == "Savings"

    def test_account_rejects_negative_rate(self):
        """Test that a negative interest rate is rejected."""
        with pytest.raises(ValueError):
            Account(id="a1", name="Bad", interest_rate=Decimal("-1"))

    def test_account_allows_negative_balance(self):
        """Test that balances may go below zero."""
        account = Account(id="a1", name="Overdrawn", balance=Decimal("-20"))
        assert account.balance == Decimal("-20")

    def test_amount_rejects_nan(self):
        """Test that NaN never gets into a stored amount."""
        with pytest.raises(ValueError):
            Income(id="i1", amount=Decimal("NaN"), date=date(2024, 1, 1))

    def test_card_defaults(self):
        """Test Card defaults: cutoff day 1, no payment day, no debt."""
        card = Card(id="c1", name="Visa")
        assert card.cutoff_day == 1
        assert card.payment_day is None
        assert card.current_debt == Decimal("0")

    def test_card_day_bounds(self):
        """Test that days outside 1-31 are rejected."""
        with pytest.raises(ValueError):
            Card(id="c1", name="Visa", cutoff_day=32)

    def test_expense_credit_card_flag(self):
        """Test Expense.is_credit_card."""
        card_expense = Expense(
            id="e1",
            type=ExpenseType.CREDIT_CARD.value,
            card_id="c1",
            amount=Decimal("10"),
            date=date(2024, 1, 1),
        )
        cash_expense = Expense(id="e2", type="transfer", amount=Decimal("10"), date=date(2024, 1, 1))
        assert card_expense.is_credit_card is True
        assert cash_expense.is_credit_card is False
        assert cash_expense.installments.count == 1

    def test_budget_payment_month_format(self):
        """Test that month_str must be YYYY-MM."""
        with pytest.raises(ValueError):
            BudgetPayment(budget_id="b1", month_str="2024-3")

    def test_monthly_totals_net(self):
        """Test MonthlyTotals.net."""
        totals = MonthlyTotals(year=2024, month=2, income=Decimal("100"), expense=Decimal("30"))
        assert totals.net == Decimal("70")


class TestSnapshotLayout:
    """Tests for the serialized snapshot."""

    def test_snapshot_uses_camel_case_keys(self):
        """Test the stored keys match the long-standing store layout."""
        snapshot = LedgerSnapshot(
            accounts=[Account(id="a1", name="Cash", last_interest_date=date(2024, 3, 1))],
            cards=[Card(id="c1", name="Visa", credit_limit=Decimal("500"), cutoff_day=25, payment_day=5)],
            budget_payments=[BudgetPayment(budget_id="b1", month_str="2024-03", paid_date=datetime(2024, 3, 2))],
        )
        data = json.loads(snapshot.to_json())

        assert data["accounts"][0]["lastInterestDate"] == "2024-03-01"
        assert data["accounts"][0]["interestRate"] == "0"
        assert data["cards"][0]["limit"] == "500"
        assert data["cards"][0]["cutoffDay"] == 25
        assert data["cards"][0]["paymentDay"] == 5
        assert data["budgetPayments"][0]["monthStr"] == "2024-03"
        assert data["budgetPayments"][0]["isPaid"] is True

    def test_snapshot_round_trip(self):
        """Test that a snapshot survives to_json/from_json unchanged."""
        snapshot = LedgerSnapshot(
            incomes=[Income(id="i1", account_id="a1", amount=Decimal("12.34"), date=date(2024, 1, 31))],
            expenses=[
                Expense(
                    id="e1",
                    type="credit_card",
                    card_id="c1",
                    amount=Decimal("200"),
                    description="TV (1/6)",
                    date=date(2024, 2, 1),
                    installments=InstallmentInfo(count=6, current=1, type=InstallmentType.TOTAL),
                )
            ],
            budgets=[Budget(id="b1", type=BudgetType.EXPENSE, amount=Decimal("900"), description="Rent", day=5)],
        )
        assert LedgerSnapshot.from_json(snapshot.to_json()) == snapshot

    def test_older_snapshot_missing_fields(self):
        """Test that lists and card days missing from older snapshots get defaults."""
        payload = json.dumps({
            "accounts": [{"id": "a1", "name": "Cash", "balance": 5}],
            "cards": [{"id": "c1", "name": "Visa", "limit": 1000, "currentDebt": 0}],
        })
        snapshot = LedgerSnapshot.from_json(payload)
        assert snapshot.cards[0].cutoff_day == 1
        assert snapshot.cards[0].credit_limit == Decimal("1000")
        assert snapshot.budget_payments == []
        assert snapshot.accounts[0].last_interest_date is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            description="Account created",
        )
        assert event.event_type == AuditEventType.ACCOUNT_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_type="expense",
            entity_id="e1",
            description="Expense created",
            details={"card_id": "c1", "amount": "1200"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_created"
        assert log_dict["details"]["card_id"] == "c1"

    def test_audit_event_builder_entity_created(self):
        """Test AuditEventBuilder.entity_created."""
        event = AuditEventBuilder.entity_created("card", "c1", "Visa")
        assert event.event_type == AuditEventType.CARD_CREATED
        assert event.entity_type == "card"
        assert event.entity_id == "c1"

    def test_audit_event_builder_dangling_reference(self):
        """Test that a skipped side effect is a warning."""
        event = AuditEventBuilder.dangling_reference("income", "i1", "account", "gone")
        assert event.event_type == AuditEventType.DANGLING_REFERENCE
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "i1"

    def test_audit_event_builder_save_failed(self):
        """Test AuditEventBuilder.save_failed."""
        event = AuditEventBuilder.save_failed("finance_app_data_v2", "disk full")
        assert event.event_type == AuditEventType.SAVE_FAILED
        assert event.error_message == "disk full"


class TestValidationIssue:
    """Tests for ValidationIssue model."""

    def test_validation_issue_defaults_to_error(self):
        """Test default severity."""
        issue = ValidationIssue(field="amount", issue_type="not_finite", message="amount must be finite")
        assert issue.severity == "error"

    def test_validation_issue_rejects_unknown_severity(self):
        """Test severity pattern."""
        with pytest.raises(ValueError):
            ValidationIssue(field="amount", issue_type="x", message="x", severity="fatal")


class TestEnums:
    """Tests for enum values stored in snapshots."""

    def test_enum_values(self):
        """Test string values."""
        assert ExpenseType.CREDIT_CARD.value == "credit_card"
        assert InstallmentType.TOTAL.value == "total"
        assert InstallmentType.MONTHLY.value == "monthly"
        assert BudgetType("income") is BudgetType.INCOME


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
