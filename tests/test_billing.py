"""Tests for the billing cycle shift and installment expansion."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.billing import (
    add_months,
    effective_billing_date,
    plan_installments,
    split_amount,
    total_of,
)
from finledger.models.ledger import Card, InstallmentType


def make_card(cutoff_day=25, payment_day=None):
    return Card(id="c1", name="Visa", cutoff_day=cutoff_day, payment_day=payment_day)


class TestAddMonths:
    """Tests for calendar month arithmetic."""

    def test_keeps_day(self):
        """Test a plain month step."""
        assert add_months(date(2024, 3, 15), 1) == date(2024, 4, 15)

    def test_crosses_year(self):
        """Test December to January."""
        assert add_months(date(2024, 12, 10), 2) == date(2025, 2, 10)

    def test_clamps_to_month_end(self):
        """Test that the 31st becomes the last day of a shorter month."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_replaces_day(self):
        """Test that an explicit day is used and clamped."""
        assert add_months(date(2024, 1, 10), 1, day=31) == date(2024, 2, 29)
        assert add_months(date(2024, 1, 10), 0, day=5) == date(2024, 1, 5)


class TestEffectiveBillingDate:
    """Tests for the credit card billing cycle shift."""

    def test_after_cutoff_moves_to_first_of_next_month(self):
        """Test cutoff 25, no payment day, purchase on the 27th."""
        assert effective_billing_date(date(2024, 3, 27), "credit_card", make_card()) == date(2024, 4, 1)

    def test_before_cutoff_keeps_date(self):
        """Test cutoff 25, no payment day, purchase on the 20th."""
        assert effective_billing_date(date(2024, 3, 20), "credit_card", make_card()) == date(2024, 3, 20)

    def test_on_cutoff_day_keeps_date(self):
        """Test that the cutoff day itself still belongs to the current cycle."""
        assert effective_billing_date(date(2024, 3, 25), "credit_card", make_card()) == date(2024, 3, 25)

    def test_payment_day_before_cutoff_adds_second_month(self):
        """Test cutoff 25, payment 5, purchase on the 27th: paid two months later on the 5th."""
        card = make_card(cutoff_day=25, payment_day=5)
        assert effective_billing_date(date(2024, 3, 27), "credit_card", card) == date(2024, 5, 5)

    def test_payment_day_before_cutoff_inside_cycle(self):
        """Test cutoff 25, payment 5, purchase on the 10th: paid next month on the 5th."""
        card = make_card(cutoff_day=25, payment_day=5)
        assert effective_billing_date(date(2024, 3, 10), "credit_card", card) == date(2024, 4, 5)

    def test_payment_day_after_cutoff(self):
        """Test cutoff 10, payment 20: purchase inside the cycle is paid the same month."""
        card = make_card(cutoff_day=10, payment_day=20)
        assert effective_billing_date(date(2024, 3, 5), "credit_card", card) == date(2024, 3, 20)
        assert effective_billing_date(date(2024, 3, 15), "credit_card", card) == date(2024, 4, 20)

    def test_payment_day_clamped(self):
        """Test a payment day of 31 in a 30-day month."""
        card = make_card(cutoff_day=31, payment_day=31)
        assert effective_billing_date(date(2024, 4, 10), "credit_card", card) == date(2024, 4, 30)

    def test_year_rollover(self):
        """Test a December purchase after the cutoff."""
        card = make_card(cutoff_day=25, payment_day=5)
        assert effective_billing_date(date(2024, 12, 28), "credit_card", card) == date(2025, 2, 5)

    def test_shift_never_overflows_into_later_month(self):
        """Test 30 Jan with cutoff 25, payment 5 lands on 5 Mar, not in April."""
        card = make_card(cutoff_day=25, payment_day=5)
        assert effective_billing_date(date(2024, 1, 30), "credit_card", card) == date(2024, 3, 5)

    def test_non_credit_card_unchanged(self):
        """Test that cash expenses are never shifted."""
        assert effective_billing_date(date(2024, 3, 27), "cash", make_card()) == date(2024, 3, 27)

    def test_missing_card_unchanged(self):
        """Test that a dangling card reference leaves the date alone."""
        assert effective_billing_date(date(2024, 3, 27), "credit_card", None) == date(2024, 3, 27)


class TestInstallments:
    """Tests for installment expansion."""

    def test_total_is_divided(self):
        """Test 1200 over 6 months entered as the total."""
        plan = plan_installments(Decimal("1200"), "TV", date(2024, 4, 1), 6, InstallmentType.TOTAL)

        assert plan.total_amount == Decimal("1200")
        assert [row.amount for row in plan.rows] == [Decimal("200")] * 6
        assert [row.description for row in plan.rows] == [f"TV ({i}/6)" for i in range(1, 7)]
        assert [row.installments.current for row in plan.rows] == list(range(1, 7))
        assert plan.rows[-1].date == date(2024, 9, 1)

    def test_monthly_is_multiplied(self):
        """Test 150 per month over 4 months."""
        plan = plan_installments(Decimal("150"), "Gym", date(2024, 1, 5), 4, InstallmentType.MONTHLY)

        assert plan.total_amount == Decimal("600")
        assert all(row.amount == Decimal("150") for row in plan.rows)
        assert all(row.installments.type == InstallmentType.MONTHLY for row in plan.rows)

    def test_single_payment(self):
        """Test that one installment keeps the description and full amount."""
        plan = plan_installments(Decimal("99.90"), "Shoes", date(2024, 1, 5))

        assert len(plan.rows) == 1
        assert plan.rows[0].amount == Decimal("99.90")
        assert plan.rows[0].description == "Shoes"
        assert plan.rows[0].installments.count == 1

    def test_rows_anchor_on_first_day(self):
        """Test that a 31st stays the 31st wherever the month allows it."""
        plan = plan_installments(Decimal("300"), "Laptop", date(2024, 1, 31), 3)
        assert [row.date for row in plan.rows] == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
        ]

    def test_uneven_division_sums_within_tolerance(self):
        """Test that rows re-add to the total up to the rounding residue."""
        amount = Decimal("100")
        plan = plan_installments(amount, "Split", date(2024, 1, 1), 3)

        assert total_of(plan.per_installment_amount, 3) == sum(row.amount for row in plan.rows)
        assert abs(sum(row.amount for row in plan.rows) - amount) < Decimal("1e-20")
        assert plan.total_amount == amount

    def test_split_amount_single(self):
        """Test that count 1 ignores the installment type."""
        assert split_amount(Decimal("50"), 1, InstallmentType.MONTHLY) == (Decimal("50"), Decimal("50"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
