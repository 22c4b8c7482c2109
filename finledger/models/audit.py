"""
Audit Models for finledger

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance and debt change
2. Debugging information when totals look wrong
3. A record of side effects skipped because of dangling references

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every public engine operation has its own event type.
    """
    # Lifecycle
    LEDGER_BOOTSTRAPPED = "ledger_bootstrapped"
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_RELOADED = "ledger_reloaded"
    FACTORY_RESET = "factory_reset"

    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Cards
    CARD_CREATED = "card_created"
    CARD_UPDATED = "card_updated"
    CARD_DELETED = "card_deleted"

    # Incomes
    INCOME_CREATED = "income_created"
    INCOME_DELETED = "income_deleted"

    # Expenses
    EXPENSE_CREATED = "expense_created"
    EXPENSE_DELETED = "expense_deleted"

    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_PAYMENT_TOGGLED = "budget_payment_toggled"

    # Interest
    INTEREST_ACCRUED = "interest_accrued"

    # Problems
    DANGLING_REFERENCE = "dangling_reference"
    VALIDATION_FAILED = "validation_failed"
    SAVE_FAILED = "save_failed"
    NOTIFY_FAILED = "notify_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'expense')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("account", account.id, account.name)
        event = AuditEventBuilder.dangling_reference("income", income.id, "account", account_id)
    """

    _CREATED = {
        "account": AuditEventType.ACCOUNT_CREATED,
        "card": AuditEventType.CARD_CREATED,
        "income": AuditEventType.INCOME_CREATED,
        "expense": AuditEventType.EXPENSE_CREATED,
        "budget": AuditEventType.BUDGET_CREATED,
    }
    _UPDATED = {
        "account": AuditEventType.ACCOUNT_UPDATED,
        "card": AuditEventType.CARD_UPDATED,
        "budget": AuditEventType.BUDGET_UPDATED,
    }
    _DELETED = {
        "account": AuditEventType.ACCOUNT_DELETED,
        "card": AuditEventType.CARD_DELETED,
        "income": AuditEventType.INCOME_DELETED,
        "expense": AuditEventType.EXPENSE_DELETED,
        "budget": AuditEventType.BUDGET_DELETED,
    }

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: str,
        label: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._CREATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} created: {label[:200]}",
            details=details or {},
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._UPDATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def entity_deleted(
        entity_type: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
            details=details or {},
        )

    @staticmethod
    def budget_payment_toggled(
        budget_id: str,
        month_str: str,
        is_paid: bool,
    ) -> AuditEvent:
        state = "paid" if is_paid else "unpaid"
        return AuditEvent(
            event_type=AuditEventType.BUDGET_PAYMENT_TOGGLED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget marked {state} for {month_str}",
            details={
                "month_str": month_str,
                "is_paid": is_paid,
            },
        )

    @staticmethod
    def interest_accrued(
        account_id: str,
        days: int,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTEREST_ACCRUED,
            entity_type="account",
            entity_id=account_id,
            description=f"Interest accrued for {days} day(s): {amount}",
            details={
                "days": days,
                "amount": amount,
            },
        )

    @staticmethod
    def dangling_reference(
        entity_type: str,
        entity_id: str,
        target_type: str,
        target_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DANGLING_REFERENCE,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{target_type.capitalize()} {target_id} not found, side effect skipped",
            details={
                "target_type": target_type,
                "target_id": target_id,
            },
        )

    @staticmethod
    def validation_failed(
        field: str,
        issue_type: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Rejected input for {field}",
            error_message=message,
            details={
                "field": field,
                "issue_type": issue_type,
            },
        )

    @staticmethod
    def lifecycle(
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=(
                AuditSeverity.WARNING
                if event_type == AuditEventType.FACTORY_RESET
                else AuditSeverity.INFO
            ),
            entity_type="ledger",
            description=description,
            details=details or {},
        )

    @staticmethod
    def save_failed(
        storage_key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Saving the ledger snapshot failed; memory and store have diverged",
            error_message=error_message,
            details={
                "storage_key": storage_key,
            },
        )

    @staticmethod
    def notify_failed(
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFY_FAILED,
            severity=AuditSeverity.ERROR,
            description="Change notification hook raised",
            error_message=error_message,
        )
