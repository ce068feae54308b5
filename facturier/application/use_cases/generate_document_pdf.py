"""
Generate Document PDF Use Cases.

Render a stored invoice or quote to PDF bytes.
"""

from dataclasses import dataclass

from facturier.config import get_logger
from facturier.core.interfaces.renderer import IDocumentRenderer
from facturier.core.interfaces.storage import IStorage
from facturier.core.services.calculator import vat_breakdown
from facturier.core.services.document_builder import require_issuer
from facturier.core.services.invoice_lifecycle import InvoiceLifecycle
from facturier.core.services.quote_lifecycle import QuoteLifecycle
from facturier.infrastructure.pdf import Fpdf2DocumentRenderer

logger = get_logger(__name__)


@dataclass
class DocumentPdfResult:
    """Result of document PDF generation."""

    pdf_bytes: bytes
    document_id: int
    number: str
    filename: str

    @property
    def file_size(self) -> int:
        return len(self.pdf_bytes)


class GenerateInvoicePdfUseCase:
    """
    Use case for generating invoice PDFs.

    Flow:
    1. Load the invoice and the issuer profile
    2. Group stored line totals by VAT rate
    3. Render PDF via the document renderer
    """

    def __init__(self, storage: IStorage, renderer: IDocumentRenderer | None = None):
        self._storage = storage
        self._invoices = InvoiceLifecycle(storage)
        self._renderer = renderer or Fpdf2DocumentRenderer()

    async def execute(self, invoice_id: int) -> DocumentPdfResult:
        """
        Generate an invoice PDF.

        Raises:
            InvoiceNotFoundError: Unknown invoice id.
            IssuerNotConfiguredError: No issuer profile saved.
            RenderError: PDF generation failed.
        """
        logger.info("generate_invoice_pdf_started", invoice_id=invoice_id)

        invoice = await self._invoices.get_invoice(invoice_id)
        issuer = await require_issuer(self._storage)
        pdf_bytes = self._renderer.render_invoice(invoice, vat_breakdown(invoice.lines), issuer)

        result = DocumentPdfResult(
            pdf_bytes=pdf_bytes,
            document_id=invoice_id,
            number=invoice.invoice_number,
            filename=f"facture_{invoice.invoice_number}.pdf",
        )
        logger.info(
            "generate_invoice_pdf_complete",
            invoice_id=invoice_id,
            file_size=result.file_size,
        )
        return result


class GenerateQuotePdfUseCase:
    """Use case for generating quote PDFs."""

    def __init__(self, storage: IStorage, renderer: IDocumentRenderer | None = None):
        self._storage = storage
        self._quotes = QuoteLifecycle(storage)
        self._renderer = renderer or Fpdf2DocumentRenderer()

    async def execute(self, quote_id: int) -> DocumentPdfResult:
        logger.info("generate_quote_pdf_started", quote_id=quote_id)

        quote = await self._quotes.get_quote(quote_id)
        issuer = await require_issuer(self._storage)
        pdf_bytes = self._renderer.render_quote(quote, vat_breakdown(quote.lines), issuer)

        result = DocumentPdfResult(
            pdf_bytes=pdf_bytes,
            document_id=quote_id,
            number=quote.quote_number,
            filename=f"devis_{quote.quote_number}.pdf",
        )
        logger.info("generate_quote_pdf_complete", quote_id=quote_id, file_size=result.file_size)
        return result
