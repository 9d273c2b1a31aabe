"""
Ledger Entry Models

These models define the shapes a ledger line takes as it moves through
the system:

1. RawEntry - whatever a store handed us (untyped, possibly malformed)
2. LedgerEntry - a typed line with a numeric amount
3. AnnotatedEntry - a typed line plus the running balance after it

DESIGN DECISION: RawEntry is deliberately loose. It only exists at the
store boundary. The normalizer converts it into LedgerEntry/AnnotatedEntry
exactly once, and nothing past that boundary ever re-parses an amount.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ZERO = Decimal("0")


# =============================================================================
# ENUMS
# =============================================================================

class EntryType(str, Enum):
    """
    Transaction direction.

    INOUT is a recognised value but is balance-neutral, as is any
    value we don't recognise.
    """
    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"

    @classmethod
    def parse(cls, value: Any) -> Optional["EntryType"]:
        """Case-insensitive lookup. Returns None for unknown values."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


# =============================================================================
# COERCION HELPERS
# =============================================================================

def coerce_amount(value: Any) -> Decimal:
    """
    Coerce a raw amount to a Decimal.

    Fails soft: anything that isn't a finite number (None, "", "abc",
    NaN, Infinity, lists...) becomes 0.
    """
    if isinstance(value, bool):
        return Decimal(int(value))

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not amount.is_finite():
        return ZERO
    return amount


def signed_amount(entry_type: Any, amount: Decimal) -> Decimal:
    """+amount for IN, -amount for OUT, 0 for everything else."""
    parsed = EntryType.parse(entry_type)
    if parsed is EntryType.IN:
        return amount
    if parsed is EntryType.OUT:
        return -amount
    return ZERO


def format_decimal(value: Decimal) -> str:
    """Plain number text without trailing zeros: 100, 12.5, -30."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def decimal_to_json(value: Decimal) -> Union[int, float]:
    """JSON-friendly number for a Decimal."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


# =============================================================================
# ENTRY MODELS
# =============================================================================

class RawEntry(BaseModel):
    """
    A ledger line exactly as a store returned it.

    Every field is optional and untyped. Unknown keys are kept so that
    nothing a store sends is silently dropped before normalization.
    """
    model_config = ConfigDict(extra="allow")

    date: Any = None
    name: Any = None
    description: Any = None
    type: Any = None
    amount: Any = None


class LedgerEntry(BaseModel):
    """
    A typed ledger line.

    Immutable: once persisted an entry can only be deleted, never edited.
    """
    model_config = ConfigDict(frozen=True)

    date: str = Field(
        ...,
        description="Entry date, stored in whatever format it was entered"
    )
    name: str = Field(
        default="",
        description="Counterparty or short label"
    )
    description: str = Field(
        default="",
        description="Free text description"
    )
    type: str = Field(
        default="",
        description="IN, OUT or INOUT (case-insensitive); kept as entered"
    )
    amount: Decimal = Field(
        default=ZERO,
        description="Coerced numeric amount"
    )

    @property
    def entry_type(self) -> Optional[EntryType]:
        return EntryType.parse(self.type)

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.type, self.amount)

    def to_record(self) -> dict[str, Any]:
        """Raw projection used when persisting (no balance)."""
        return {
            "date": self.date,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "amount": decimal_to_json(self.amount),
        }

    @classmethod
    def from_raw(cls, raw: RawEntry) -> "LedgerEntry":
        return cls(
            date=_text(raw.date),
            name=_text(raw.name),
            description=_text(raw.description),
            type=_text(raw.type),
            amount=coerce_amount(raw.amount),
        )


class AnnotatedEntry(LedgerEntry):
    """A ledger line plus the running balance after it was applied."""

    balance: Decimal = Field(
        ...,
        description="Running balance after this entry, in chronological order"
    )

    def to_form_fields(self) -> dict[str, str]:
        """Form-encoded payload for a remote write."""
        return {
            "date": self.date,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "amount": format_decimal(self.amount),
            "balance": format_decimal(self.balance),
        }


class EntryForm(BaseModel):
    """
    The pending input form for a new entry.

    The amount is whatever the user typed; it is only coerced when the
    engine accepts the form.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: str = ""
    name: str = ""
    description: str = ""
    type: str = EntryType.OUT.value
    amount: Any = ""


class LedgerSummary(BaseModel):
    """Totals shown above the ledger."""

    total_in: Decimal = ZERO
    total_out: Decimal = ZERO
    current_balance: Decimal = ZERO
    entry_count: int = Field(default=0, ge=0)
