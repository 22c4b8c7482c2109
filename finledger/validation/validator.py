"""
Input Validation at the Engine Boundary

DESIGN DECISION: Every number, day and date handed to the engine is parsed
here before any state is touched.

A value that is not a finite number is REJECTED with a
LedgerValidationError. It is never coerced into NaN: a single NaN added to
a balance or a card debt would poison every total derived from it, and
because balances are running totals the damage could not be undone by
deleting the offending record.

Day-of-month fields are the exception. A card's cutoff day and a budget's
day fall back to 1, and a card's payment day falls back to "unset", when
the input is not a usable day. Those defaults are part of the ledger's
contract, so they are applied rather than reported.

IMPORTANT: Validation never fixes an amount. It reports the problem and the
caller decides what to do.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from finledger.models.ledger import BudgetType, InstallmentType, ValidationIssue

_MONTH_KEY = re.compile(r"\d{4}-\d{2}")


class LedgerValidationError(ValueError):
    """Input rejected at the engine boundary. Carries the ValidationIssue."""

    def __init__(self, issue: ValidationIssue):
        super().__init__(issue.message)
        self.issue = issue

    @property
    def field(self) -> str:
        return self.issue.field


class LedgerInputValidator:
    """
    Parses raw user input into the types the engine stores.

    Every failure is logged to the audit trail (when a logger is given)
    and raised as LedgerValidationError.
    """

    def __init__(self, audit_logger=None):
        """
        Initialize validator.

        Args:
            audit_logger: AuditLogger receiving rejected inputs.
                          If None, rejections are only raised.
        """
        self._audit_logger = audit_logger

    def reject(
        self,
        field: str,
        issue_type: str,
        message: str,
        value: Any = None,
    ) -> LedgerValidationError:
        issue = ValidationIssue(
            field=field,
            issue_type=issue_type,
            message=message,
            severity="error",
            value=None if value is None else str(value),
        )
        if self._audit_logger is not None:
            self._audit_logger.log_validation_failed(
                field=field,
                issue_type=issue_type,
                message=message,
            )
        return LedgerValidationError(issue)

    def decimal(self, value: Any, field: str) -> Decimal:
        """Parse a finite decimal number (amounts, balances, limits)."""
        if isinstance(value, bool):
            raise self.reject(field, "not_a_number", f"{field} must be a number, got a boolean", value)

        if isinstance(value, Decimal):
            parsed = value
        elif isinstance(value, int):
            parsed = Decimal(value)
        elif isinstance(value, float):
            # str() first so 0.1 stays 0.1 instead of its binary expansion
            parsed = Decimal(str(value))
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                raise self.reject(field, "missing", f"{field} is required", value)
            try:
                parsed = Decimal(text)
            except InvalidOperation:
                raise self.reject(field, "not_a_number", f"{field} must be a number, got {value!r}", value)
        else:
            raise self.reject(field, "not_a_number", f"{field} must be a number, got {value!r}", value)

        if not parsed.is_finite():
            raise self.reject(field, "not_finite", f"{field} must be a finite number, got {value!r}", value)
        return parsed

    def rate(self, value: Any, field: str = "interest_rate") -> Decimal:
        """Parse a daily interest rate in percent. Must not be negative."""
        parsed = self.decimal(value, field)
        if parsed < 0:
            raise self.reject(field, "out_of_range", f"{field} cannot be negative", value)
        return parsed

    @staticmethod
    def day(value: Any, default: Optional[int]) -> Optional[int]:
        """
        Parse a day of month (1-31).

        Anything that is not a whole number in range yields the default.
        """
        if isinstance(value, bool) or value is None:
            return default
        if isinstance(value, int):
            parsed = value
        elif isinstance(value, (float, Decimal)):
            try:
                parsed = int(value)
            except (ValueError, OverflowError):
                return default
            if parsed != value:
                return default
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                return default
        else:
            return default
        if 1 <= parsed <= 31:
            return parsed
        return default

    def installment_count(self, value: Any, field: str = "installment_count") -> int:
        """Parse the number of installments. Must be a whole number >= 1."""
        if value is None:
            return 1
        if isinstance(value, bool):
            raise self.reject(field, "not_an_integer", f"{field} must be a whole number", value)
        if isinstance(value, int):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                raise self.reject(field, "not_an_integer", f"{field} must be a whole number, got {value!r}", value)
        else:
            raise self.reject(field, "not_an_integer", f"{field} must be a whole number, got {value!r}", value)

        if parsed < 1:
            raise self.reject(field, "out_of_range", f"{field} must be at least 1", value)
        return parsed

    def installment_type(self, value: Any, field: str = "installment_type") -> InstallmentType:
        """Parse 'total' or 'monthly'."""
        if value is None:
            return InstallmentType.TOTAL
        try:
            return InstallmentType(value)
        except ValueError:
            allowed = ", ".join(t.value for t in InstallmentType)
            raise self.reject(field, "invalid_choice", f"{field} must be one of: {allowed}", value)

    def budget_type(self, value: Any, field: str = "type") -> BudgetType:
        """Parse 'income' or 'expense'."""
        try:
            return BudgetType(value)
        except ValueError:
            allowed = ", ".join(t.value for t in BudgetType)
            raise self.reject(field, "invalid_choice", f"{field} must be one of: {allowed}", value)

    def calendar_date(self, value: Any, field: str = "date") -> date:
        """Parse a calendar date from a date, datetime or ISO string."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                raise self.reject(field, "invalid_date", f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}", value)
        raise self.reject(field, "invalid_date", f"{field} must be a date, got {value!r}", value)

    def month(self, year: Any, month: Any) -> tuple[int, int]:
        """Validate a (year, month) pair with month in 1-12."""
        if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
            raise self.reject("year", "out_of_range", f"year must be between 1 and 9999, got {year!r}", year)
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise self.reject("month", "out_of_range", f"month must be between 1 and 12, got {month!r}", month)
        return year, month

    def month_key(self, value: Any, field: str = "month_str") -> str:
        """Validate a YYYY-MM month key."""
        if isinstance(value, str):
            text = value.strip()
            if _MONTH_KEY.fullmatch(text) and 1 <= int(text[5:]) <= 12:
                return text
        raise self.reject(field, "invalid_month", f"{field} must look like YYYY-MM, got {value!r}", value)

    def text(self, value: Any, field: str) -> str:
        """Free text (names, descriptions). None becomes an empty string."""
        if value is None:
            return ""
        if not isinstance(value, str):
            raise self.reject(field, "not_text", f"{field} must be text, got {value!r}", value)
        return value.strip()

    def reference(self, value: Any, field: str) -> Optional[str]:
        """
        Id of another entity (account_id, card_id).

        The target is not looked up here; a missing target is a dangling
        reference, not an input error. Blank becomes None.
        """
        if value is None:
            return None
        if not isinstance(value, str):
            raise self.reject(field, "not_a_reference", f"{field} must be an id string, got {value!r}", value)
        return value.strip() or None

    def strict_day(self, value: Any, field: str, optional: bool = False) -> Optional[int]:
        """
        Parse a day of month for an update.

        Unlike day(), an unusable value is rejected instead of replaced:
        an edit should change the field to what was asked or not at all.
        """
        if value is None and optional:
            return None
        parsed = self.day(value, default=None)
        if parsed is None:
            raise self.reject(field, "out_of_range", f"{field} must be a day of month (1-31), got {value!r}", value)
        return parsed

    def from_validation_error(self, error: PydanticValidationError) -> LedgerValidationError:
        """Turn the first problem pydantic found into a LedgerValidationError."""
        first = error.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "record"
        return self.reject(field, first.get("type", "invalid"), first.get("msg", str(error)), first.get("input"))
