"""
Audit Logger

DESIGN DECISION: Every ledger mutation and every store fallback is logged.
This provides:
1. Traceability of appends and deletes
2. Visibility into silent read fallbacks (the user is never told about them)
3. Debugging capability when the remote store misbehaves

The audit logger:
- Is async so it can be awaited inline in the ledger flows
- Never raises (a logging failure must not break a ledger operation)
- Supports correlation IDs to trace events from one user action
"""

import logging
import sys
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from shop_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def configure_logging(debug: bool = False) -> None:
    """Route structlog output to stderr at INFO (or DEBUG) level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log. The optional in-memory history
    keeps the most recent events so callers (and tests) can inspect them.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("shop_ledger.audit")
        self._history_size = history_size
        self._history: list[AuditEvent] = []

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the structured log write failed.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Never let logging break the ledger flow
            logging.getLogger(__name__).warning("Failed to write audit event: %s", e)
            return False

        return True

    async def _record(self, build: Callable[..., AuditEvent], **fields) -> bool:
        """Build an event and log it. A builder failure is logged, not raised."""
        try:
            event = build(**fields)
        except Exception as e:
            logging.getLogger(__name__).warning("Failed to build audit event: %s", e)
            return False
        return await self.log(event)

    async def log_ledger_loaded(
        self,
        store: str,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a completed load."""
        await self._record(
            AuditEventBuilder.ledger_loaded,
            store=store,
            entry_count=entry_count,
            correlation_id=correlation_id,
        )

    async def log_load_fallback(
        self,
        failed_store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that a remote read failed and local storage was used."""
        await self._record(
            AuditEventBuilder.load_fallback_used,
            failed_store=failed_store,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected submission."""
        await self._record(
            AuditEventBuilder.validation_failed,
            issues=issues,
            correlation_id=correlation_id,
        )

    async def log_entry_appended(
        self,
        store: str,
        entry_date: str,
        entry_type: str,
        amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful append."""
        await self._record(
            AuditEventBuilder.entry_appended,
            store=store,
            entry_date=entry_date,
            entry_type=entry_type,
            amount=amount,
            balance=balance,
            correlation_id=correlation_id,
        )

    async def log_append_failed(
        self,
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed append."""
        await self._record(
            AuditEventBuilder.append_failed,
            store=store,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    async def log_delete_declined(
        self,
        index: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._record(
            AuditEventBuilder.delete_declined,
            index=index,
            correlation_id=correlation_id,
        )

    async def log_entry_deleted(
        self,
        entry_date: str,
        amount: str,
        remaining: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._record(
            AuditEventBuilder.entry_deleted,
            entry_date=entry_date,
            amount=amount,
            remaining=remaining,
            correlation_id=correlation_id,
        )

    async def log_delete_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._record(
            AuditEventBuilder.delete_failed,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    async def log_export_generated(
        self,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._record(
            AuditEventBuilder.export_generated,
            row_count=row_count,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (load, submit, delete, export).
    """
    return uuid4()
