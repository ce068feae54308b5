"""
Invoice list export to CSV.

Targets French spreadsheet software: ``;`` separator, decimal comma,
dd/mm/yyyy dates, CRLF line endings and a UTF-8 byte-order mark.
"""

import csv
import io

from facturier.core.entities.invoice import Invoice, InvoiceStatus
from facturier.core.entities.status import invoice_status_label
from facturier.infrastructure.export.formatting import format_date, format_decimal

CSV_HEADERS = (
    "Numero",
    "Date emission",
    "Date echeance",
    "Client",
    "SIRET client",
    "Total HT",
    "TVA",
    "Total TTC",
    "Statut",
    "Date paiement",
)

BOM = "\ufeff"


def invoice_row(invoice: Invoice) -> list[str]:
    # Paid invoices carry no payment date; the last status change is it
    paid_on = invoice.updated_at if invoice.status == InvoiceStatus.PAID else None
    return [
        invoice.invoice_number,
        format_date(invoice.issue_date),
        format_date(invoice.due_date),
        invoice.buyer_name,
        invoice.buyer_siret or "",
        format_decimal(invoice.total_ht),
        format_decimal(invoice.total_vat),
        format_decimal(invoice.total_ttc),
        invoice_status_label(invoice.status),
        format_date(paid_on),
    ]


def invoices_to_csv(invoices: list[Invoice]) -> str:
    """Render invoice headers as CSV text, BOM included."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";", lineterminator="\r\n")
    writer.writerow(CSV_HEADERS)
    for invoice in invoices:
        writer.writerow(invoice_row(invoice))
    return BOM + buffer.getvalue()
