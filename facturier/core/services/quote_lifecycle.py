"""
Quote lifecycle and quote-to-invoice conversion.

    draft --mark_sent--> sent --accept--> accepted --convert--> (new invoice)
    sent  --reject-----> rejected
    sent  --expire-----> expired

Expiry is an explicit action; nothing expires quotes on a timer. An accepted
quote can be converted once: the invoice is created and the quote stamped
with its id in the same transaction.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

from facturier.config import get_logger
from facturier.config.settings import DocumentSettings
from facturier.core.entities.client import Client
from facturier.core.entities.drafts import QuoteDraft
from facturier.core.entities.invoice import Invoice, InvoiceData
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus
from facturier.core.exceptions import (
    ConversionIneligibleError,
    FinalizedDocumentError,
    InvalidTransitionError,
    QuoteNotFoundError,
)
from facturier.core.interfaces.storage import IStorage
from facturier.core.services.document_builder import (
    build_content,
    load_parties,
    require_issuer,
)
from facturier.core.services.invoice_lifecycle import invoice_terms
from facturier.core.services.numbering import DocumentKind, NumberingService

logger = get_logger(__name__)

QUOTE_TRANSITIONS: dict[str, tuple[frozenset[QuoteStatus], QuoteStatus]] = {
    "mark_sent": (frozenset({QuoteStatus.DRAFT}), QuoteStatus.SENT),
    "accept": (frozenset({QuoteStatus.SENT}), QuoteStatus.ACCEPTED),
    "reject": (frozenset({QuoteStatus.SENT}), QuoteStatus.REJECTED),
    "expire": (frozenset({QuoteStatus.SENT}), QuoteStatus.EXPIRED),
}


@dataclass
class ConversionResult:
    """The stamped quote and the invoice created from it."""

    quote: Quote
    invoice: Invoice


class QuoteLifecycle:
    """Creates, edits, moves and converts quotes."""

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

    async def get_quote(self, quote_id: int) -> Quote:
        quote = await self._storage.quotes.get_quote(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return quote

    async def list_quotes(self) -> list[Quote]:
        return await self._storage.quotes.list_quotes()

    def _build_data(
        self,
        draft: QuoteDraft,
        issuer: IssuerProfile,
        client: Client,
        quote_number: str,
    ) -> QuoteData:
        content = build_content(draft.lines, issuer, client)
        validity_date = draft.validity_date or draft.issue_date + timedelta(
            days=issuer.default_quote_validity_days
        )
        return QuoteData(
            **content.snapshot.model_dump(),
            quote_number=quote_number,
            client_id=client.id,
            issue_date=draft.issue_date,
            validity_date=validity_date,
            total_ht=content.totals.total_ht,
            total_vat=content.totals.total_vat,
            total_ttc=content.totals.total_ttc,
            vat_exempt=content.vat_exempt,
            vat_exemption_text=content.vat_exemption_text,
            notes=draft.notes,
            lines=content.lines,
        )

    async def create_quote(self, draft: QuoteDraft) -> Quote:
        """
        Create a draft quote from form input.

        Raises:
            IssuerNotConfiguredError: No issuer profile saved.
            ClientNotFoundError: Unknown or deleted client.
            ValidationError: A line's VAT rate is not allowed.
        """
        issuer, client = await load_parties(self._storage, draft.client_id)
        data = self._build_data(draft, issuer, client, quote_number="")

        async with self._storage.atomic():
            number = await self._numbering.next_number(
                issuer.quote_prefix, DocumentKind.QUOTE, self._today().year
            )
            quote = await self._storage.quotes.create_quote(
                data.model_copy(update={"quote_number": number})
            )

        logger.info(
            "quote_created",
            quote_id=quote.id,
            quote_number=quote.quote_number,
            client_id=quote.client_id,
            total_ttc=quote.total_ttc,
        )
        return quote

    async def update_quote(self, quote_id: int, draft: QuoteDraft) -> Quote:
        """
        Replace a draft quote's content, keeping its number.

        Raises:
            FinalizedDocumentError: The quote was already converted.
            InvalidTransitionError: The quote is no longer a draft.
        """
        current = await self.get_quote(quote_id)
        if current.is_converted:
            raise FinalizedDocumentError("quote", quote_id)
        if current.status != QuoteStatus.DRAFT:
            raise InvalidTransitionError("quote", quote_id, current.status.value, "edit")

        issuer, client = await load_parties(self._storage, draft.client_id)
        data = self._build_data(draft, issuer, client, current.quote_number)
        quote = await self._storage.quotes.update_quote(quote_id, data)

        logger.info("quote_updated", quote_id=quote_id, total_ttc=quote.total_ttc)
        return quote

    async def _apply(self, quote_id: int, action: str) -> Quote:
        quote = await self.get_quote(quote_id)
        allowed_from, target = QUOTE_TRANSITIONS[action]
        if quote.status not in allowed_from:
            raise InvalidTransitionError("quote", quote_id, quote.status.value, action)

        await self._storage.quotes.update_quote_status(quote_id, target)
        logger.info(
            "quote_status_changed",
            quote_id=quote_id,
            action=action,
            from_status=quote.status.value,
            to_status=target.value,
        )
        return await self.get_quote(quote_id)

    async def mark_sent(self, quote_id: int) -> Quote:
        return await self._apply(quote_id, "mark_sent")

    async def accept(self, quote_id: int) -> Quote:
        return await self._apply(quote_id, "accept")

    async def reject(self, quote_id: int) -> Quote:
        return await self._apply(quote_id, "reject")

    async def expire(self, quote_id: int) -> Quote:
        return await self._apply(quote_id, "expire")

    async def convert_to_invoice(self, quote_id: int) -> ConversionResult:
        """
        Create a draft invoice from an accepted quote.

        Snapshot, VAT regime, lines and totals are copied verbatim from the
        quote; only dates, number and payment terms come from today and the
        current issuer profile.

        Raises:
            ConversionIneligibleError: The quote is not accepted or was
                already converted. Checked before any number is allocated.
        """
        quote = await self.get_quote(quote_id)
        if quote.is_converted:
            raise ConversionIneligibleError(quote_id, "already converted")
        if not quote.can_convert:
            raise ConversionIneligibleError(
                quote_id, f"status is '{quote.status.value}', expected 'accepted'"
            )

        issuer = await require_issuer(self._storage)
        today = self._today()

        async with self._storage.atomic():
            number = await self._numbering.next_number(
                issuer.invoice_prefix, DocumentKind.INVOICE, today.year
            )
            data = InvoiceData(
                **quote.snapshot().model_dump(),
                invoice_number=number,
                client_id=quote.client_id,
                issue_date=today,
                total_ht=quote.total_ht,
                total_vat=quote.total_vat,
                total_ttc=quote.total_ttc,
                vat_exempt=quote.vat_exempt,
                vat_exemption_text=quote.vat_exemption_text,
                notes=quote.notes,
                lines=[line.copy_content() for line in quote.lines],
                **invoice_terms(issuer, self._documents, today),
            )
            invoice = await self._storage.invoices.create_invoice(data)
            await self._storage.quotes.mark_quote_converted(quote_id, invoice.id)

        logger.info(
            "quote_converted",
            quote_id=quote_id,
            quote_number=quote.quote_number,
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
        )
        return ConversionResult(quote=await self.get_quote(quote_id), invoice=invoice)
