"""
Balance Normalizer

Turns raw store records into balance-annotated entries.

The running balance is a pure fold over CHRONOLOGICAL order (oldest first):

    balance[i] = balance[i-1] + signed_amount(entry[i])

Display order is the reverse (newest first). The helpers below are the
only place the two orderings are converted, so the fold never runs over
the wrong one.
"""

from collections.abc import Mapping, Sequence
from typing import Union

from shop_ledger.models.entry import (
    ZERO,
    AnnotatedEntry,
    EntryType,
    LedgerEntry,
    LedgerSummary,
    RawEntry,
)


RawInput = Union[RawEntry, Mapping]


def _as_raw(item: RawInput) -> RawEntry:
    if isinstance(item, RawEntry):
        return item
    return RawEntry.model_validate(dict(item))


def normalize(raw_entries: Sequence[RawInput]) -> list[AnnotatedEntry]:
    """
    Fold chronological raw entries into annotated entries.

    Each output entry carries the coerced amount and the balance after it.
    Pure and deterministic: the same input always gives the same output.
    """
    balance = ZERO
    annotated = []

    for item in raw_entries:
        entry = LedgerEntry.from_raw(_as_raw(item))
        balance += entry.signed_amount
        annotated.append(
            AnnotatedEntry(**entry.model_dump(), balance=balance)
        )

    return annotated


def to_display_order(chronological: Sequence[AnnotatedEntry]) -> list[AnnotatedEntry]:
    """Oldest-first -> newest-first."""
    return list(reversed(chronological))


def to_storage_order(display: Sequence[AnnotatedEntry]) -> list[AnnotatedEntry]:
    """Newest-first -> oldest-first."""
    return list(reversed(display))


def strip_balances(entries: Sequence[LedgerEntry]) -> list[RawEntry]:
    """
    Project entries back to raw records.

    Stored balances are never trusted on the way back in, so they are
    dropped here and recomputed by normalize().
    """
    return [
        RawEntry(
            date=entry.date,
            name=entry.name,
            description=entry.description,
            type=entry.type,
            amount=entry.amount,
        )
        for entry in entries
    ]


def summarize(display: Sequence[AnnotatedEntry]) -> LedgerSummary:
    """Totals for a newest-first ledger."""
    total_in = sum(
        (e.amount for e in display if e.entry_type is EntryType.IN),
        ZERO,
    )
    total_out = sum(
        (e.amount for e in display if e.entry_type is EntryType.OUT),
        ZERO,
    )
    current = display[0].balance if display else ZERO

    return LedgerSummary(
        total_in=total_in,
        total_out=total_out,
        current_balance=current,
        entry_count=len(display),
    )
