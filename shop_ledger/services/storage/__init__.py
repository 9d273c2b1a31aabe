"""
Storage Services Package

Provides the ledger storage interface and its implementations:
an HTTP endpoint, a Google Sheets worksheet and local durable storage.
"""

from shop_ledger.services.storage.interface import (
    CorruptLocalStateError,
    LedgerStoreInterface,
    MutableLedgerStoreInterface,
    StorageError,
    TransportError,
)
from shop_ledger.services.storage.local import LocalKeyValueFile, LocalLedgerStore
from shop_ledger.services.storage.remote import RemoteLedgerStore
from shop_ledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
)

__all__ = [
    # Interfaces
    "LedgerStoreInterface",
    "MutableLedgerStoreInterface",
    # Exceptions
    "CorruptLocalStateError",
    "StorageError",
    "TransportError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "LocalKeyValueFile",
    "LocalLedgerStore",
    "RemoteLedgerStore",
]
