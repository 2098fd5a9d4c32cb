"""
Audit Logger

DESIGN DECISION: Every store mutation is logged.
This provides:
1. Complete traceability of changes to the books
2. Debugging capability when durable writes fail
3. A short in-memory history the UI can show

The audit logger:
- Is synchronous, like the stores that call it
- Emits structured events through structlog
- Keeps the most recent events in a bounded buffer
"""

from collections import deque
from typing import Optional

import structlog

from bizbook.models.audit import AuditEvent, AuditSeverity


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
        structlog.processors.JSONRenderer(ensure_ascii=False)
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
    2. An in-memory history (for display and tests)
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to retain.
                          0 disables the history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("bizbook.audit")

    def log(self, event: AuditEvent) -> None:
        """
        Log an audit event.

        Always logs locally and records the event in the history.
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            Up to `limit` events, newest first
        """
        if limit <= 0:
            return []
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def events_for_entity(
        self,
        entity_type: str,
        entity_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get retained events about one entity (or one entity type).

        Returns:
            Matching events in chronological order
        """
        return [
            event
            for event in self._history
            if event.entity_type == entity_type
            and (entity_id is None or event.entity_id == entity_id)
        ]

    def clear(self) -> None:
        self._history.clear()
