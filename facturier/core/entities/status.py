"""Human-readable status labels.

Exhaustive over the status enums: adding a status without a label fails
type checking at ``assert_never``.
"""

from typing import assert_never

from facturier.core.entities.invoice import InvoiceStatus
from facturier.core.entities.quote import QuoteStatus


def invoice_status_label(status: InvoiceStatus) -> str:
    match status:
        case InvoiceStatus.DRAFT:
            return "Brouillon"
        case InvoiceStatus.SENT:
            return "Envoyée"
        case InvoiceStatus.PAID:
            return "Payée"
        case InvoiceStatus.CANCELLED:
            return "Annulée"
        case _:
            assert_never(status)


def quote_status_label(status: QuoteStatus) -> str:
    match status:
        case QuoteStatus.DRAFT:
            return "Brouillon"
        case QuoteStatus.SENT:
            return "Envoyé"
        case QuoteStatus.ACCEPTED:
            return "Accepté"
        case QuoteStatus.REJECTED:
            return "Refusé"
        case QuoteStatus.EXPIRED:
            return "Expiré"
        case _:
            assert_never(status)


def status_label(status: InvoiceStatus | QuoteStatus) -> str:
    """Label for either kind of document status."""
    if isinstance(status, InvoiceStatus):
        return invoice_status_label(status)
    return quote_status_label(status)
