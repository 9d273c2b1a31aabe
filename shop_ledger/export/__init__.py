"""Ledger export package."""

from shop_ledger.export.csv_exporter import (
    CSV_HEADER,
    DEFAULT_EXPORT_FILENAME,
    export_csv,
    format_display_date,
    write_export,
)

__all__ = [
    "CSV_HEADER",
    "DEFAULT_EXPORT_FILENAME",
    "export_csv",
    "format_display_date",
    "write_export",
]
