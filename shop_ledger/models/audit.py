"""
Audit Models for Shop Ledger

Every ledger mutation and every fallback decision produces an audit event.
This gives us:
1. A trace of what happened to the ledger and in which store
2. Debugging information when a remote store misbehaves
3. A record of entries the user deleted

DESIGN DECISION: Audit events are written to the structured local log only.
They are never stored alongside ledger entries.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    LEDGER_LOADED = "ledger_loaded"
    LOAD_FALLBACK_USED = "load_fallback_used"
    LOCAL_STATE_CORRUPT = "local_state_corrupt"

    # Appending
    VALIDATION_FAILED = "validation_failed"
    ENTRY_APPENDED = "entry_appended"
    APPEND_FAILED = "append_failed"

    # Deleting
    DELETE_DECLINED = "delete_declined"
    ENTRY_DELETED = "entry_deleted"
    DELETE_FAILED = "delete_failed"

    # Export
    EXPORT_GENERATED = "export_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which store the event concerns (remote, sheets, local)
    store: Optional[str] = Field(
        default=None,
        description="Store variant involved"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events from one user action"
    )

    # Unbounded: entry dates are free text and end up in here
    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "store": self.store,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_loaded("local", 12, correlation_id)
        event = AuditEventBuilder.entry_deleted("local", "2025-01-02", 3, correlation_id)
    """

    @staticmethod
    def ledger_loaded(
        store: str,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            store=store,
            correlation_id=correlation_id,
            description=f"Ledger loaded with {entry_count} entries",
            details={"entry_count": entry_count},
        )

    @staticmethod
    def load_fallback_used(
        failed_store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            store=failed_store,
            correlation_id=correlation_id,
            description=f"Read from {failed_store} store failed, using local store",
            error_message=error_message,
        )

    @staticmethod
    def local_state_corrupt(
        storage_key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOCAL_STATE_CORRUPT,
            severity=AuditSeverity.WARNING,
            store="local",
            description=f"Local ledger under '{storage_key}' is unreadable, treated as empty",
            details={"storage_key": storage_key},
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Entry rejected: {len(issues)} validation issue(s)",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def entry_appended(
        store: str,
        entry_date: str,
        entry_type: str,
        amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_APPENDED,
            store=store,
            correlation_id=correlation_id,
            description=f"{entry_type} entry of {amount} recorded for {entry_date}",
            details={
                "date": entry_date,
                "type": entry_type,
                "amount": amount,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def append_failed(
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.APPEND_FAILED,
            severity=AuditSeverity.ERROR,
            store=store,
            correlation_id=correlation_id,
            description="Entry could not be saved",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def delete_declined(
        index: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_DECLINED,
            store="local",
            correlation_id=correlation_id,
            description=f"User declined to delete entry at position {index}",
            details={"index": index},
            is_user_action=True,
        )

    @staticmethod
    def entry_deleted(
        entry_date: str,
        amount: str,
        remaining: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            store="local",
            correlation_id=correlation_id,
            description=f"Entry of {amount} dated {entry_date} deleted",
            details={
                "date": entry_date,
                "amount": amount,
                "remaining": remaining,
            },
            is_user_action=True,
        )

    @staticmethod
    def delete_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            store="local",
            correlation_id=correlation_id,
            description="Entry could not be deleted",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def export_generated(
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            correlation_id=correlation_id,
            description=f"CSV export generated with {row_count} rows",
            details={"row_count": row_count},
            is_user_action=True,
        )
