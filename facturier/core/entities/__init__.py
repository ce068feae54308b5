"""Core domain entities."""

from facturier.core.entities.client import UNNAMED_CLIENT, Client, ClientData
from facturier.core.entities.document import DocumentContent, PartySnapshot
from facturier.core.entities.drafts import InvoiceDraft, LineDraft, QuoteDraft
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.entities.issuer import DEFAULT_VAT_EXEMPTION_TEXT, IssuerProfile
from facturier.core.entities.line_item import VAT_RATES, LineItem, LineUnit
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus
from facturier.core.entities.status import (
    invoice_status_label,
    quote_status_label,
    status_label,
)

__all__ = [
    # Clients
    "Client",
    "ClientData",
    "UNNAMED_CLIENT",
    # Documents
    "DocumentContent",
    "PartySnapshot",
    "LineItem",
    "LineUnit",
    "VAT_RATES",
    "Invoice",
    "InvoiceData",
    "InvoiceStatus",
    "Quote",
    "QuoteData",
    "QuoteStatus",
    # Input
    "LineDraft",
    "InvoiceDraft",
    "QuoteDraft",
    # Issuer
    "IssuerProfile",
    "DEFAULT_VAT_EXEMPTION_TEXT",
    # Labels
    "invoice_status_label",
    "quote_status_label",
    "status_label",
]
