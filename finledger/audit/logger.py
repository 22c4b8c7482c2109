"""
Audit Logger

DESIGN DECISION: Every mutation of the ledger is logged.
This provides:
1. Traceability of balance and debt changes
2. Debugging capability
3. Visibility of side effects skipped on dangling references

The audit logger:
- Writes structured JSON lines through structlog
- Keeps a bounded in-memory history of recent events
- Never raises: a logging failure must not break a ledger operation
"""

from collections import deque
from typing import Optional

import structlog

from finledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for the presentation layer and tests)
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
                          0 disables the history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("finledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the local log.
        """
        self._history.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Don't raise - audit logging should not break the main flow
            return False
        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns newest first.
        """
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def log_dangling_reference(
        self,
        entity_type: str,
        entity_id: str,
        target_type: str,
        target_id: Optional[str],
    ) -> None:
        """Log a side effect skipped because its target no longer exists."""
        self.log(AuditEventBuilder.dangling_reference(
            entity_type=entity_type,
            entity_id=entity_id,
            target_type=target_type,
            target_id=target_id,
        ))

    def log_validation_failed(
        self,
        field: str,
        issue_type: str,
        message: str,
    ) -> None:
        """Log rejected input."""
        self.log(AuditEventBuilder.validation_failed(
            field=field,
            issue_type=issue_type,
            message=message,
        ))

    def log_save_failed(
        self,
        storage_key: str,
        error_message: str,
    ) -> None:
        """Log a failed snapshot write."""
        self.log(AuditEventBuilder.save_failed(
            storage_key=storage_key,
            error_message=error_message,
        ))

    def log_not_found(self, entity_type: str, entity_id: str, operation: str) -> None:
        """Log an update/delete whose target does not exist (a silent no-op)."""
        self._logger.debug(
            "entity_not_found",
            entity_type=entity_type,
            entity_id=entity_id,
            operation=operation,
        )
