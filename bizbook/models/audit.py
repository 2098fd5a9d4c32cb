"""
Audit Models for bizbook

Every store mutation is logged for audit purposes.
This provides:
1. Traceability of every change to the books
2. Debugging information when a durable write fails
3. A visible record of ignored or risky operations

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STATE_LOADED = "state_loaded"
    STATE_SEEDED = "state_seeded"
    PERSIST_FAILED = "persist_failed"

    # Records (vendor / expense / revenue / task)
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    VENDOR_RENAMED = "vendor_renamed"
    TASK_COMPLETED = "task_completed"

    # Category lists
    CATEGORY_ADDED = "category_added"
    CATEGORY_DELETED = "category_deleted"

    # Tolerated no-ops (unknown id, duplicate category)
    MUTATION_IGNORED = "mutation_ignored"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every committed mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
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
    store: Optional[str] = Field(
        default=None,
        description="Snapshot key of the store that emitted the event"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'vendor', 'expense', 'task')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

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
            "store": self.store,
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
        event = AuditEventBuilder.record_added("finance-storage", "expense", expense.id)
        event = AuditEventBuilder.vendor_renamed("finance-storage", vendor_id, "ACME", 3)
    """

    @staticmethod
    def state_loaded(store: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            store=store,
            description=f"Snapshot loaded from '{store}'",
            details=dict(counts),
        )

    @staticmethod
    def state_seeded(store: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SEEDED,
            store=store,
            description=f"No snapshot under '{store}', starting from seed data",
            details=dict(counts),
        )

    @staticmethod
    def persist_failed(store: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            store=store,
            description=f"Durable write to '{store}' failed; memory is ahead of storage",
            error_message=error_message,
        )

    @staticmethod
    def record_added(store: str, entity_type: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            store=store,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} added",
        )

    @staticmethod
    def record_updated(
        store: str,
        entity_type: str,
        entity_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            store=store,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated: {', '.join(fields) or 'no fields'}",
            details={"fields": list(fields)},
        )

    @staticmethod
    def record_deleted(store: str, entity_type: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            store=store,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def vendor_renamed(
        store: str,
        vendor_id: str,
        new_name: str,
        expenses_updated: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VENDOR_RENAMED,
            store=store,
            entity_type="vendor",
            entity_id=vendor_id,
            description=f"Vendor renamed to '{new_name}', {expenses_updated} expenses refreshed",
            details={
                "new_name": new_name,
                "expenses_updated": expenses_updated,
            },
        )

    @staticmethod
    def task_completed(store: str, task_id: str, was_completed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASK_COMPLETED,
            store=store,
            entity_type="task",
            entity_id=task_id,
            description="Task marked completed",
            details={"was_completed": was_completed},
        )

    @staticmethod
    def category_added(store: str, kind: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            store=store,
            entity_type=f"{kind}_category",
            description=f"{kind.capitalize()} category added: {name}",
            details={"name": name},
        )

    @staticmethod
    def category_deleted(
        store: str,
        kind: str,
        name: str,
        *,
        reserved: bool = False,
        remaining: int,
    ) -> AuditEvent:
        # Removing the reserved or the last category is allowed at store
        # level but leaves the lists in a state the UI never produces.
        risky = reserved or remaining == 0
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_DELETED,
            severity=AuditSeverity.WARNING if risky else AuditSeverity.INFO,
            store=store,
            entity_type=f"{kind}_category",
            description=f"{kind.capitalize()} category deleted: {name}",
            details={
                "name": name,
                "reserved": reserved,
                "remaining": remaining,
            },
        )

    @staticmethod
    def mutation_ignored(
        store: str,
        operation: str,
        reason: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_IGNORED,
            severity=AuditSeverity.DEBUG,
            store=store,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} ignored: {reason}",
            details={"operation": operation, "reason": reason},
        )
