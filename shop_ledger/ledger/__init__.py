"""Ledger computation package."""

from shop_ledger.ledger.normalizer import (
    normalize,
    strip_balances,
    summarize,
    to_display_order,
    to_storage_order,
)

__all__ = [
    "normalize",
    "strip_balances",
    "summarize",
    "to_display_order",
    "to_storage_order",
]
