"""CSV export, JSON backup and display formatting."""

from facturier.infrastructure.export.backup import (
    BACKUP_VERSION,
    BackupData,
    RestoreSummary,
    export_backup,
    parse_backup,
    restore_backup,
)
from facturier.infrastructure.export.csv_export import CSV_HEADERS, invoices_to_csv
from facturier.infrastructure.export.formatting import (
    format_amount,
    format_date,
    format_decimal,
    format_rate,
    unit_label,
)

__all__ = [
    "BACKUP_VERSION",
    "BackupData",
    "RestoreSummary",
    "export_backup",
    "parse_backup",
    "restore_backup",
    "CSV_HEADERS",
    "invoices_to_csv",
    "format_amount",
    "format_date",
    "format_decimal",
    "format_rate",
    "unit_label",
]
