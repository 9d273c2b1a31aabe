"""
Ledger Orchestrator

This module ties the stores, the normalizer and the user-facing
capabilities together into the ledger flows:
1. Load (store -> normalize -> newest-first state)
2. Append (validate -> compute balance -> write through -> prepend)
3. Delete (confirm -> remove -> recompute -> rewrite local storage)
4. Export (state -> CSV)

DESIGN DECISION: The reconciler holds the ONE canonical in-memory ledger,
always newest first. Balances are only ever computed by folding over the
chronological order, never over what is on screen.

Boundaries the reconciler enforces:
- Nothing is written if validation fails
- State only changes after the store accepted the write
- A failed remote read falls back to local storage; a failed remote write
  does not (the entry is reported as not saved)
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

import httpx
import structlog

from shop_ledger.audit import AuditLogger, create_correlation_id
from shop_ledger.audit.logger import configure_logging
from shop_ledger.config import (
    LocalStoreConfig,
    RemoteStoreConfig,
    Settings,
    SheetsStoreConfig,
    UnsupportedOperationError,
    get_settings,
)
from shop_ledger.config.settings import RemoteSettings
from shop_ledger.export import (
    DEFAULT_EXPORT_FILENAME,
    export_csv,
    format_display_date,
    write_export,
)
from shop_ledger.ledger import (
    normalize,
    strip_balances,
    summarize,
    to_display_order,
    to_storage_order,
)
from shop_ledger.models.entry import (
    ZERO,
    AnnotatedEntry,
    EntryForm,
    LedgerSummary,
    format_decimal,
    signed_amount,
)
from shop_ledger.notifications import (
    Confirmer,
    LoggingNotifier,
    Notifier,
    Severity,
    StaticConfirmer,
)
from shop_ledger.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    LedgerStoreInterface,
    LocalLedgerStore,
    MutableLedgerStoreInterface,
    RemoteLedgerStore,
    StorageError,
    TransportError,
)
from shop_ledger.validation import EntryValidationError, EntryValidator


logger = structlog.get_logger(__name__)


AnyStoreConfig = Union[RemoteStoreConfig, SheetsStoreConfig, LocalStoreConfig]


class LedgerReconciler:
    """
    Owns the in-memory ledger and keeps it consistent with the active store.

    Single writer: callers are expected to run one operation at a time.
    Nothing here guards against overlapping calls; two overlapping appends
    would both read the same last balance.
    """

    def __init__(
        self,
        store_config: AnyStoreConfig,
        store: LedgerStoreInterface,
        local_store: LocalLedgerStore,
        validator: Optional[EntryValidator] = None,
        notifier: Optional[Notifier] = None,
        confirmer: Optional[Confirmer] = None,
        audit_logger: Optional[AuditLogger] = None,
        currency_symbol: str = "₹",
        export_filename: str = DEFAULT_EXPORT_FILENAME,
    ):
        """
        Args:
            store_config: Which store variant is active
            store: The active store (the local store itself in local mode)
            local_store: Local storage, used as the read fallback
            validator: Form validator
            notifier: Where user-visible outcomes are reported
            confirmer: Asked before every delete. Defaults to declining.
            audit_logger: Structured audit log
        """
        self._config = store_config
        self._store = store
        self._local_store = local_store
        self._validator = validator or EntryValidator()
        self._notifier = notifier or LoggingNotifier()
        self._confirmer = confirmer or StaticConfirmer(answer=False)
        self._audit_logger = audit_logger or AuditLogger()
        self._currency_symbol = currency_symbol
        self._export_filename = export_filename

        self._entries: list[AnnotatedEntry] = []
        self._form = EntryForm()

    # =========================================================================
    # STATE ACCESSORS
    # =========================================================================

    @property
    def mode(self) -> str:
        """Active store variant: remote, sheets or local."""
        return self._config.kind

    @property
    def store(self) -> LedgerStoreInterface:
        return self._store

    @property
    def supports_delete(self) -> bool:
        return isinstance(self._store, MutableLedgerStoreInterface)

    @property
    def entries(self) -> list[AnnotatedEntry]:
        """The ledger, newest first."""
        return list(self._entries)

    def chronological(self) -> list[AnnotatedEntry]:
        """The ledger, oldest first."""
        return to_storage_order(self._entries)

    @property
    def last_balance(self) -> Decimal:
        """Balance after the newest entry, 0 for an empty ledger."""
        if not self._entries:
            return ZERO
        return self._entries[0].balance

    def summary(self) -> LedgerSummary:
        return summarize(self._entries)

    @property
    def form(self) -> EntryForm:
        """The pending input form."""
        return self._form

    def set_form(self, form: EntryForm) -> None:
        self._form = form

    def describe(self, entry: AnnotatedEntry) -> str:
        """One-line summary shown when asking to delete an entry."""
        return (
            f"{format_display_date(entry.date)} · {entry.description} · "
            f"{self._currency_symbol}{format_decimal(entry.amount)}"
        )

    def _notify(self, title: str, message: str, severity: Severity) -> None:
        # Notifications are fire-and-forget
        try:
            self._notifier.notify(title, message, severity)
        except Exception as e:
            logger.warning("notification_failed", title=title, error=str(e))

    # =========================================================================
    # FLOWS
    # =========================================================================

    async def load(self) -> list[AnnotatedEntry]:
        """
        Re-read the ledger from the active store.

        A failed remote read silently falls back to local storage.
        Safe to call repeatedly; the in-memory ledger is replaced each time.
        """
        correlation_id = create_correlation_id()
        source = self._store

        try:
            raw = await self._store.fetch_all()
        except TransportError as e:
            await self._audit_logger.log_load_fallback(
                failed_store=self._store.name,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            source = self._local_store
            raw = await self._local_store.fetch_all()

        self._entries = to_display_order(normalize(raw))

        await self._audit_logger.log_ledger_loaded(
            store=source.name,
            entry_count=len(self._entries),
            correlation_id=correlation_id,
        )
        return self.entries

    async def append(self, form: Optional[EntryForm] = None) -> AnnotatedEntry:
        """
        Validate a submission and write it through to the active store.

        Args:
            form: The submitted form. Defaults to the pending form.

        Returns:
            The recorded entry with its balance

        Raises:
            EntryValidationError: Required fields missing (nothing written)
            StorageError: The store did not record the entry (state unchanged)
        """
        correlation_id = create_correlation_id()
        form = form if form is not None else self._form

        result = self._validator.validate(form)
        if not result.is_valid:
            await self._audit_logger.log_validation_failed(
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.errors
                ],
                correlation_id=correlation_id,
            )
            self._notify("Required", "Date & amount are required", Severity.WARNING)
            raise EntryValidationError(result)

        amount = result.amount
        new_balance = self.last_balance + signed_amount(form.type, amount)

        entry = AnnotatedEntry(
            date=form.date,
            name=form.name,
            description=form.description,
            type=form.type,
            amount=amount,
            balance=new_balance,
        )

        try:
            await self._store.append(entry, self.chronological())
        except StorageError as e:
            await self._audit_logger.log_append_failed(
                store=self._store.name,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            self._notify("Error", "Failed to save data", Severity.ERROR)
            raise

        self._entries = [entry, *self._entries]
        self._form = EntryForm()

        await self._audit_logger.log_entry_appended(
            store=self._store.name,
            entry_date=entry.date,
            entry_type=entry.type,
            amount=format_decimal(entry.amount),
            balance=format_decimal(entry.balance),
            correlation_id=correlation_id,
        )

        if self.supports_delete:
            self._notify("Saved", "Transaction added (local)", Severity.SUCCESS)
        else:
            self._notify("Saved", "Transaction added", Severity.SUCCESS)

        return entry

    async def delete(self, index: int) -> bool:
        """
        Delete the entry at a display (newest-first) position.

        Local storage only. The user is asked first; the remaining entries'
        balances are recomputed immediately.

        Returns:
            True if deleted, False if the user declined

        Raises:
            UnsupportedOperationError: The active store is remote
            IndexError: No entry at that position
            StorageError: Local storage could not be rewritten (state unchanged)
        """
        if not self.supports_delete:
            raise UnsupportedOperationError(
                f"Entries cannot be deleted from the {self.mode} store"
            )
        if index < 0 or index >= len(self._entries):
            raise IndexError(f"No entry at position {index}")

        correlation_id = create_correlation_id()
        target = self._entries[index]

        confirmed = await self._confirmer.confirm("Delete entry?", self.describe(target))
        if not confirmed:
            await self._audit_logger.log_delete_declined(
                index=index,
                correlation_id=correlation_id,
            )
            return False

        remaining = self._entries[:index] + self._entries[index + 1:]
        recomputed = normalize(strip_balances(to_storage_order(remaining)))

        try:
            await self._store.persist(recomputed)
        except StorageError as e:
            await self._audit_logger.log_delete_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            self._notify("Error", "Failed to delete entry", Severity.ERROR)
            raise

        self._entries = to_display_order(recomputed)

        await self._audit_logger.log_entry_deleted(
            entry_date=target.date,
            amount=format_decimal(target.amount),
            remaining=len(self._entries),
            correlation_id=correlation_id,
        )
        self._notify("Deleted", "Entry removed (local)", Severity.SUCCESS)
        return True

    async def export(self) -> str:
        """CSV text of the ledger as displayed (newest first)."""
        text = export_csv(self._entries)
        await self._audit_logger.log_export_generated(row_count=len(self._entries))
        self._notify("Exported", f"{len(self._entries)} entries exported", Severity.SUCCESS)
        return text

    async def export_to(self, directory: Path) -> Path:
        """Write the CSV export into a directory and return its path."""
        text = await self.export()
        return write_export(text, Path(directory) / self._export_filename)


# =============================================================================
# FACTORY
# =============================================================================

def build_store(
    store_config: AnyStoreConfig,
    local_store: LocalLedgerStore,
    remote_settings: Optional[RemoteSettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> LedgerStoreInterface:
    """Instantiate the store a StoreConfig selects."""
    if isinstance(store_config, RemoteStoreConfig):
        remote_settings = remote_settings or RemoteSettings()
        return RemoteLedgerStore(
            endpoint=store_config.endpoint,
            client=http_client,
            timeout=remote_settings.timeout_seconds,
            fetch_attempts=remote_settings.fetch_attempts,
        )

    if isinstance(store_config, SheetsStoreConfig):
        return GoogleSheetsLedgerStore(GoogleSheetsClient(
            spreadsheet_id=store_config.spreadsheet_id,
            credentials_path=store_config.credentials_path,
            worksheet_name=store_config.worksheet_name,
        ))

    return local_store


def create_app_components(
    settings: Optional[Settings] = None,
    store_config: Optional[AnyStoreConfig] = None,
    notifier: Optional[Notifier] = None,
    confirmer: Optional[Confirmer] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> LedgerReconciler:
    """
    Factory function to create a ready-to-load ledger.

    Args:
        settings: Settings to build from. Defaults to get_settings().
        store_config: Overrides the store chosen from settings.
        notifier: Front-end notification capability
        confirmer: Front-end confirmation capability
        http_client: Shared httpx client for the remote store

    Returns:
        A LedgerReconciler; call load() before use
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(debug=app_settings.debug_mode)

    store_config = store_config or settings.resolve_store_config()

    local_settings = settings.local
    local_store = LocalLedgerStore.from_path(
        local_settings.storage_path,
        key=local_settings.storage_key,
    )
    store = build_store(store_config, local_store, settings.remote, http_client)

    return LedgerReconciler(
        store_config=store_config,
        store=store,
        local_store=local_store,
        notifier=notifier,
        confirmer=confirmer,
        currency_symbol=app_settings.currency_symbol,
        export_filename=app_settings.export_filename,
    )
