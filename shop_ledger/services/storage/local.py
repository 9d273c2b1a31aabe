"""
Local Durable Storage

The local store keeps the whole ledger as ONE serialized JSON array under a
fixed, namespaced key in a small key-value file (the on-disk equivalent of
browser localStorage).

DESIGN DECISION: Every write is a full-collection overwrite. Appends and
deletes both rebuild the collection in memory and rewrite the key. This is
fine at personal-ledger scale and keeps the stored array trivially in
chronological order.

TRADEOFFS:
- No locking: a single writer (this process) is assumed
- The file is replaced atomically, but nothing guards against another
  process editing it concurrently
- An unreadable value is treated as an empty ledger, never as an error
"""

import json
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import structlog

from shop_ledger.config.settings import DEFAULT_STORAGE_KEY
from shop_ledger.models.audit import AuditEventBuilder
from shop_ledger.models.entry import AnnotatedEntry, RawEntry
from shop_ledger.services.storage.interface import (
    CorruptLocalStateError,
    MutableLedgerStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class LocalKeyValueFile:
    """
    A JSON object on disk mapping keys to string values.

    Values are opaque strings, exactly like localStorage.
    """

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CorruptLocalStateError(f"Cannot read {self._path}: {e}")
        if not isinstance(data, dict):
            raise CorruptLocalStateError(
                f"{self._path} does not hold a key-value object"
            )
        return data

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise CorruptLocalStateError(f"Value under '{key}' is not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing the file atomically."""
        try:
            data = self._read_all()
        except CorruptLocalStateError as e:
            logger.warning("local_storage_reset", path=str(self._path), error=str(e))
            data = {}

        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class LocalLedgerStore(MutableLedgerStoreInterface):
    """
    Ledger store backed by local durable storage.

    Also used as the read fallback when a remote store cannot be reached.
    """

    name = "local"

    def __init__(
        self,
        storage: LocalKeyValueFile,
        key: str = DEFAULT_STORAGE_KEY,
    ):
        self._storage = storage
        self._key = key

    @classmethod
    def from_path(cls, path: Path, key: str = DEFAULT_STORAGE_KEY) -> "LocalLedgerStore":
        return cls(LocalKeyValueFile(path), key)

    @property
    def key(self) -> str:
        return self._key

    def _decode(self, raw: Optional[str]) -> list[RawEntry]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptLocalStateError(f"Stored ledger is not valid JSON: {e}")
        if not isinstance(data, list):
            raise CorruptLocalStateError("Stored ledger is not a JSON array")

        return [
            RawEntry.model_validate(item)
            for item in data
            if isinstance(item, dict)
        ]

    async def fetch_all(self) -> list[RawEntry]:
        """Read the stored ledger. Corrupt or missing state reads as empty."""
        try:
            return self._decode(self._storage.get_item(self._key))
        except CorruptLocalStateError as e:
            event = AuditEventBuilder.local_state_corrupt(
                storage_key=self._key,
                error_message=str(e),
            )
            logger.warning("audit_event", **event.to_log_dict())
            return []

    async def persist(self, entries: Sequence[AnnotatedEntry]) -> None:
        """Overwrite the stored ledger with the raw entries, oldest first."""
        payload = json.dumps(
            [entry.to_record() for entry in entries],
            ensure_ascii=False,
        )
        try:
            self._storage.set_item(self._key, payload)
        except OSError as e:
            raise StorageError(f"Failed to write local ledger: {e}")

        logger.debug("local_ledger_written", entry_count=len(entries))
