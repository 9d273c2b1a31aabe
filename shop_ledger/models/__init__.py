"""
Data Models Package

This package contains the Pydantic models used by Shop Ledger.
Raw store records, typed ledger entries and audit events all live here.
"""

from shop_ledger.models.entry import (
    AnnotatedEntry,
    EntryForm,
    EntryType,
    LedgerEntry,
    LedgerSummary,
    RawEntry,
    coerce_amount,
    format_decimal,
    signed_amount,
)
from shop_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "AnnotatedEntry",
    "EntryForm",
    "EntryType",
    "LedgerEntry",
    "LedgerSummary",
    "RawEntry",
    "coerce_amount",
    "format_decimal",
    "signed_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
