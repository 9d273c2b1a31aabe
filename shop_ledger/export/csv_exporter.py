"""
CSV Export

Serializes the ledger as it is currently displayed (newest first) into a
comma-separated text blob:

    Date,Name,Description,Type,Amount,Balance
    "02 Jan 2025","","milk","OUT",30,70

Text fields are always quoted with embedded quotes doubled. Numbers are
never quoted.
"""

from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from shop_ledger.models.entry import AnnotatedEntry, format_decimal


CSV_HEADER = ["Date", "Name", "Description", "Type", "Amount", "Balance"]
DEFAULT_EXPORT_FILENAME = "finance-tracker.csv"

_DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%d %b %Y"]


def _parse_date(value: str) -> Optional[date]:
    text = value.strip()
    if not text:
        return None
    try:
        # Spreadsheet endpoints send full ISO timestamps in UTC
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    else:
        if parsed.tzinfo is not None:
            # Shown as a calendar day in the local timezone
            parsed = parsed.astimezone()
        return parsed.date()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_display_date(value: str) -> str:
    """18 Jan 2026 style date; unparsable dates are returned as given."""
    parsed = _parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d %b %Y")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def export_csv(entries: Sequence[AnnotatedEntry]) -> str:
    """Render entries, in the order given, as CSV text."""
    lines = [",".join(CSV_HEADER)]
    for entry in entries:
        lines.append(",".join([
            _quote(format_display_date(entry.date)),
            _quote(entry.name),
            _quote(entry.description),
            _quote(entry.type),
            format_decimal(entry.amount),
            format_decimal(entry.balance),
        ]))
    return "\n".join(lines)


def write_export(text: str, path: Path) -> Path:
    """Save an export as UTF-8 and return the path written."""
    path = Path(path)
    path.write_text(text, encoding="utf-8")
    return path
