"""
Shop Ledger - Source Package

A personal/shop ledger: dated income and expense entries with a running
balance, stored in a remote spreadsheet or in local durable storage.

DESIGN PRINCIPLES:
1. Balances are computed, never trusted from storage
2. Storage order is oldest first, display order is newest first
3. Nothing changes in memory until the store accepted the write
4. Reads fall back to local storage; writes never silently do
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Shop Ledger Team"
