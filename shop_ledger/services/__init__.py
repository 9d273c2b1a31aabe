"""Services package."""

from shop_ledger.services.storage import (
    CorruptLocalStateError,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    LedgerStoreInterface,
    LocalKeyValueFile,
    LocalLedgerStore,
    MutableLedgerStoreInterface,
    RemoteLedgerStore,
    StorageError,
    TransportError,
)

__all__ = [
    # Storage services
    "CorruptLocalStateError",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "LedgerStoreInterface",
    "LocalKeyValueFile",
    "LocalLedgerStore",
    "MutableLedgerStoreInterface",
    "RemoteLedgerStore",
    "StorageError",
    "TransportError",
]
