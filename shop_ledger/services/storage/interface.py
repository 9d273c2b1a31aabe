"""
Abstract Storage Interface

DESIGN DECISION: The ledger engine talks to every store through the same
small interface. This allows us to:
1. Run against an HTTP endpoint, a spreadsheet or local storage
2. Fall back to local storage when a remote read fails
3. Use in-memory stores for testing

Stores are dumb. They never compute balances: they return raw records and
accept entries whose balance has already been computed by the engine.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

from shop_ledger.models.entry import AnnotatedEntry, RawEntry


class LedgerStoreInterface(ABC):
    """
    Abstract interface for ledger storage.

    Every store can list and append. Only mutable stores can delete.
    """

    #: Short name used in logs and audit events
    name: str = "store"

    @abstractmethod
    async def fetch_all(self) -> list[RawEntry]:
        """
        Return every stored entry in chronological order (oldest first).

        Raises:
            TransportError: If a remote store could not be read
        """
        pass

    @abstractmethod
    async def append(
        self,
        entry: AnnotatedEntry,
        history: Sequence[AnnotatedEntry],
    ) -> None:
        """
        Record a new entry.

        Args:
            entry: The new entry with its precomputed balance
            history: The current ledger in chronological order, without
                     the new entry. Remote stores ignore it; local storage
                     rewrites the whole collection from it.

        Raises:
            StorageError: If the entry was not recorded
        """
        pass


class MutableLedgerStoreInterface(LedgerStoreInterface):
    """
    A store whose whole collection can be rewritten.

    Appends and deletes are both expressed as a full overwrite.
    """

    @abstractmethod
    async def persist(self, entries: Sequence[AnnotatedEntry]) -> None:
        """
        Overwrite the stored collection.

        Args:
            entries: The full ledger in chronological order
        """
        pass

    async def append(
        self,
        entry: AnnotatedEntry,
        history: Sequence[AnnotatedEntry],
    ) -> None:
        await self.persist([*history, entry])


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class TransportError(StorageError):
    """A remote store could not be reached or answered with a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class CorruptLocalStateError(StorageError):
    """The locally persisted ledger could not be parsed."""
    pass
