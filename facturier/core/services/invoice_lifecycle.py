"""
Invoice lifecycle.

    draft --finalize--> sent --mark_paid--> paid
    draft --cancel----> cancelled
    sent  --cancel----> cancelled

Finalization is one-way: it stamps ``finalized_at`` and freezes the content.
Only status changes remain possible afterwards, and finalizing again is a
no-op. This module and the quote lifecycle are the only places these rules
live; storage backends merely persist.
"""

from collections.abc import Callable
from datetime import date, timedelta

from facturier.config import get_logger
from facturier.config.settings import DocumentSettings
from facturier.core.entities.client import Client
from facturier.core.entities.drafts import InvoiceDraft
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.exceptions import (
    FinalizedDocumentError,
    InvalidTransitionError,
    InvoiceNotFoundError,
)
from facturier.core.interfaces.storage import IStorage
from facturier.core.services.document_builder import build_content, load_parties
from facturier.core.services.numbering import DocumentKind, NumberingService

logger = get_logger(__name__)

# action -> (statuses it is allowed from, resulting status)
INVOICE_TRANSITIONS: dict[str, tuple[frozenset[InvoiceStatus], InvoiceStatus]] = {
    "finalize": (frozenset({InvoiceStatus.DRAFT}), InvoiceStatus.SENT),
    "mark_paid": (frozenset({InvoiceStatus.SENT}), InvoiceStatus.PAID),
    "cancel": (
        frozenset({InvoiceStatus.DRAFT, InvoiceStatus.SENT}),
        InvoiceStatus.CANCELLED,
    ),
}


def invoice_terms(
    issuer: IssuerProfile,
    documents: DocumentSettings,
    issue_date: date,
    payment_terms_days: int | None = None,
) -> dict:
    """Payment terms and legal mentions an invoice copies from the issuer."""
    terms = (
        payment_terms_days
        if payment_terms_days is not None
        else issuer.default_payment_terms_days
    )
    return {
        "due_date": issue_date + timedelta(days=terms),
        "payment_terms_days": terms,
        "late_penalty_rate": issuer.default_late_penalty_rate,
        "late_penalty_text": issuer.late_penalty_text(documents.late_penalty_template),
        "recovery_costs_text": documents.recovery_costs_text,
    }


class InvoiceLifecycle:
    """Creates, edits and moves invoices through their states."""

    def __init__(
        self,
        storage: IStorage,
        documents: DocumentSettings | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._storage = storage
        self._documents = documents or DocumentSettings()
        self._today = today
        self._numbering = NumberingService(storage)

    async def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = await self._storage.invoices.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def list_invoices(self) -> list[Invoice]:
        return await self._storage.invoices.list_invoices()

    def _build_data(
        self,
        draft: InvoiceDraft,
        issuer: IssuerProfile,
        client: Client,
        invoice_number: str,
    ) -> InvoiceData:
        content = build_content(draft.lines, issuer, client)
        return InvoiceData(
            **content.snapshot.model_dump(),
            invoice_number=invoice_number,
            client_id=client.id,
            issue_date=draft.issue_date,
            service_date=draft.service_date,
            total_ht=content.totals.total_ht,
            total_vat=content.totals.total_vat,
            total_ttc=content.totals.total_ttc,
            vat_exempt=content.vat_exempt,
            vat_exemption_text=content.vat_exemption_text,
            notes=draft.notes,
            lines=content.lines,
            **invoice_terms(
                issuer, self._documents, draft.issue_date, draft.payment_terms_days
            ),
        )

    async def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """
        Create a draft invoice from form input.

        Validates lines, computes totals, snapshots seller and buyer, and
        allocates the next number in the current year's sequence. A
        backdated issue date is kept as typed but never reopens the series
        of an earlier year.

        Raises:
            IssuerNotConfiguredError: No issuer profile saved.
            ClientNotFoundError: Unknown or deleted client.
            ValidationError: A line's VAT rate is not allowed.
        """
        issuer, client = await load_parties(self._storage, draft.client_id)
        data = self._build_data(draft, issuer, client, invoice_number="")

        async with self._storage.atomic():
            number = await self._numbering.next_number(
                issuer.invoice_prefix, DocumentKind.INVOICE, self._today().year
            )
            invoice = await self._storage.invoices.create_invoice(
                data.model_copy(update={"invoice_number": number})
            )

        logger.info(
            "invoice_created",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            total_ttc=invoice.total_ttc,
        )
        return invoice

    async def update_invoice(self, invoice_id: int, draft: InvoiceDraft) -> Invoice:
        """
        Replace a draft invoice's content, keeping its number.

        Raises:
            FinalizedDocumentError: The invoice is finalized.
            InvalidTransitionError: The invoice is no longer a draft.
        """
        current = await self.get_invoice(invoice_id)
        if not current.is_editable:
            if current.is_finalized:
                raise FinalizedDocumentError("invoice", invoice_id)
            raise InvalidTransitionError(
                "invoice", invoice_id, current.status.value, "edit"
            )

        issuer, client = await load_parties(self._storage, draft.client_id)
        data = self._build_data(draft, issuer, client, current.invoice_number)
        invoice = await self._storage.invoices.update_invoice(invoice_id, data)

        logger.info(
            "invoice_updated",
            invoice_id=invoice_id,
            line_count=len(invoice.lines),
            total_ttc=invoice.total_ttc,
        )
        return invoice

    def _check_transition(self, invoice: Invoice, action: str) -> InvoiceStatus:
        allowed_from, target = INVOICE_TRANSITIONS[action]
        if invoice.status not in allowed_from:
            raise InvalidTransitionError(
                "invoice", invoice.id, invoice.status.value, action
            )
        return target

    async def finalize(self, invoice_id: int) -> Invoice:
        """
        Lock the invoice and mark it sent.

        Finalizing an already-finalized invoice returns it unchanged.
        """
        invoice = await self.get_invoice(invoice_id)
        if invoice.is_finalized:
            logger.debug("invoice_already_finalized", invoice_id=invoice_id)
            return invoice

        self._check_transition(invoice, "finalize")
        await self._storage.invoices.finalize_invoice(invoice_id)
        invoice = await self.get_invoice(invoice_id)

        logger.info(
            "invoice_finalized",
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
        )
        return invoice

    async def _apply(self, invoice_id: int, action: str) -> Invoice:
        invoice = await self.get_invoice(invoice_id)
        target = self._check_transition(invoice, action)
        await self._storage.invoices.update_invoice_status(invoice_id, target)

        logger.info(
            "invoice_status_changed",
            invoice_id=invoice_id,
            action=action,
            from_status=invoice.status.value,
            to_status=target.value,
        )
        return await self.get_invoice(invoice_id)

    async def mark_paid(self, invoice_id: int) -> Invoice:
        return await self._apply(invoice_id, "mark_paid")

    async def cancel(self, invoice_id: int) -> Invoice:
        return await self._apply(invoice_id, "cancel")
