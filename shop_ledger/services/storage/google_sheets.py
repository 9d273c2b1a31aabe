"""
Google Sheets Storage Implementation

DESIGN DECISION: A spreadsheet is the natural remote home for a shop ledger:
1. The owner can read the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

This store talks to the worksheet directly with a service account, as an
alternative to going through a web-app endpoint. It follows the same
contract as the HTTP store: list rows, append one row, no delete.

TRADEOFFS:
- Balances written to the sheet are informational only; they are always
  recomputed on load
- Not suitable for high-volume data (fine for a personal/shop ledger)
"""

from collections.abc import Sequence
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from shop_ledger.models.entry import AnnotatedEntry, RawEntry, decimal_to_json
from shop_ledger.services.storage.interface import (
    LedgerStoreInterface,
    TransportError,
)


logger = structlog.get_logger(__name__)


LEDGER_COLUMNS = [
    "date",
    "name",
    "description",
    "type",
    "amount",
    "balance",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_path: str,
        worksheet_name: str = "Ledger",
    ):
        self._spreadsheet_id = spreadsheet_id
        self._credentials_path = credentials_path
        self._worksheet_name = worksheet_name
        self._client: Optional[gspread.Client] = None
        self._worksheet: Optional[gspread.Worksheet] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._credentials_path,
                    scopes=["https://www.googleapis.com/auth/spreadsheets"],
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise TransportError(
                    f"Google credentials file not found: {self._credentials_path}"
                )
            except Exception as e:
                raise TransportError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_ledger_sheet(self) -> gspread.Worksheet:
        """Get or create the ledger worksheet."""
        if self._worksheet is not None:
            return self._worksheet

        client = self.connect()
        try:
            spreadsheet = client.open_by_key(self._spreadsheet_id)
        except gspread.SpreadsheetNotFound:
            raise TransportError(f"Spreadsheet not found: {self._spreadsheet_id}")

        try:
            sheet = spreadsheet.worksheet(self._worksheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._worksheet_name,
                rows=1000,
                cols=len(LEDGER_COLUMNS),
            )
            sheet.append_row(LEDGER_COLUMNS)

        self._worksheet = sheet
        return sheet


class GoogleSheetsLedgerStore(LedgerStoreInterface):
    """
    Google Sheets implementation of ledger storage.

    One entry per row, oldest first, header row on top.
    """

    name = "sheets"

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    @staticmethod
    def _entry_to_row(entry: AnnotatedEntry) -> list:
        """Convert an entry to a spreadsheet row."""
        return [
            entry.date,
            entry.name,
            entry.description,
            entry.type,
            decimal_to_json(entry.amount),
            decimal_to_json(entry.balance),
        ]

    async def fetch_all(self) -> list[RawEntry]:
        """Read every row below the header."""
        try:
            sheet = self._client.get_ledger_sheet()
            records = sheet.get_all_records(expected_headers=LEDGER_COLUMNS)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to read ledger sheet: {e}")

        entries = []
        for record in records:
            # Skip blank rows
            if not any(str(value).strip() for value in record.values()):
                continue
            entries.append(RawEntry.model_validate(record))

        logger.debug("sheet_ledger_read", entry_count=len(entries))
        return entries

    async def append(
        self,
        entry: AnnotatedEntry,
        history: Sequence[AnnotatedEntry],
    ) -> None:
        """Append one row. Never retried, to avoid duplicate rows."""
        try:
            sheet = self._client.get_ledger_sheet()
            sheet.append_row(self._entry_to_row(entry), value_input_option="RAW")
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to save entry to sheet: {e}")
