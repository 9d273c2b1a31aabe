"""Entry validation package."""

from shop_ledger.validation.validator import (
    EntryValidationError,
    EntryValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "EntryValidationError",
    "EntryValidator",
    "ValidationIssue",
    "ValidationResult",
]
