"""
Export Invoices CSV Use Case.

Writes the invoice list in the spreadsheet format expected by French
accounting tools.
"""

from dataclasses import dataclass
from datetime import date

from facturier.config import get_logger
from facturier.core.entities.invoice import InvoiceStatus
from facturier.core.interfaces.storage import IStorage
from facturier.infrastructure.export.csv_export import invoices_to_csv

logger = get_logger(__name__)


@dataclass
class CsvExportResult:
    """Result of a CSV export."""

    content: str
    filename: str
    row_count: int


class ExportInvoicesCsvUseCase:
    """Export invoices, optionally filtered by status."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def execute(self, status: InvoiceStatus | None = None) -> CsvExportResult:
        invoices = await self._storage.invoices.list_invoices()
        if status is not None:
            invoices = [inv for inv in invoices if inv.status == status]
        # Oldest first, as in a sales ledger
        invoices.sort(key=lambda inv: (inv.issue_date, inv.invoice_number))

        result = CsvExportResult(
            content=invoices_to_csv(invoices),
            filename=f"factures_{date.today().isoformat()}.csv",
            row_count=len(invoices),
        )
        logger.info(
            "invoices_csv_exported",
            rows=result.row_count,
            status=status.value if status else None,
        )
        return result
