"""Application use cases."""

from facturier.application.use_cases.backup_data import ExportBackupUseCase, RestoreBackupUseCase
from facturier.application.use_cases.export_invoices_csv import (
    CsvExportResult,
    ExportInvoicesCsvUseCase,
)
from facturier.application.use_cases.generate_document_pdf import (
    DocumentPdfResult,
    GenerateInvoicePdfUseCase,
    GenerateQuotePdfUseCase,
)

__all__ = [
    "GenerateInvoicePdfUseCase",
    "GenerateQuotePdfUseCase",
    "DocumentPdfResult",
    "ExportInvoicesCsvUseCase",
    "CsvExportResult",
    "ExportBackupUseCase",
    "RestoreBackupUseCase",
]
