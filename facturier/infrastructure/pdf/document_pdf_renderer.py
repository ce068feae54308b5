"""
Invoice and quote PDF renderer using fpdf2.

Prints the stored document as-is: amounts come from the document and the
VAT breakdown handed in by the caller, never from a new calculation. Legal
mentions (VAT exemption, payment terms, late penalties, recovery costs,
bank details) are printed at the bottom of invoices.
"""

import os
from datetime import UTC, datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from facturier.config import get_logger
from facturier.config.settings import PdfSettings, get_settings
from facturier.core.entities.document import DocumentContent
from facturier.core.entities.invoice import Invoice
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.quote import Quote
from facturier.core.exceptions import RenderError
from facturier.core.interfaces.renderer import IDocumentRenderer
from facturier.core.services.calculator import VatGroup
from facturier.infrastructure.export.formatting import (
    format_amount,
    format_date,
    format_rate,
    unit_label,
)

logger = get_logger(__name__)

ACCENT = (30, 64, 175)
MUTED = (107, 114, 128)

CORE_FAMILY = "Helvetica"
UNICODE_FAMILY = "DocumentFont"


def _eur(value: float) -> str:
    return f"{format_amount(value)} EUR"


def _safe_text(text: str) -> str:
    """Return *text* printable with the latin-1 core fonts."""
    text = text.replace("’", "'").replace("€", "EUR")
    return text.encode("latin-1", errors="replace").decode("latin-1")


# ---------------------------------------------------------------------------
# Custom FPDF subclass with page-number footer
# ---------------------------------------------------------------------------


class _DocumentPdf(FPDF):
    """
    FPDF subclass that renders a footer on every page.

    Text goes through ``set_doc_font``/``doc_text``: with a TTF configured in
    ``PDF_FONT_PATH`` it is embedded and any character prints as typed,
    otherwise the latin-1 core font is used.
    """

    def __init__(self, pdf_settings: PdfSettings, document_number: str) -> None:
        super().__init__()
        self._pdf_settings = pdf_settings
        self._document_number = document_number
        self._generation_date = datetime.now(UTC).strftime("%d/%m/%Y")
        self._doc_family = CORE_FAMILY
        if pdf_settings.font_path:
            self._load_unicode_font(pdf_settings.font_path)

    @property
    def has_unicode_font(self) -> bool:
        return self._doc_family == UNICODE_FAMILY

    def _load_unicode_font(self, font_path: str) -> None:
        if not os.path.isfile(font_path):
            logger.warning("pdf_font_missing", font_path=font_path)
            return
        try:
            # One file serves every style; fpdf2 keys fonts by family and style
            for style in ("", "B", "I"):
                self.add_font(UNICODE_FAMILY, style, font_path)
        except Exception as e:
            logger.warning("pdf_font_unusable", font_path=font_path, error=str(e))
            return
        self._doc_family = UNICODE_FAMILY

    def set_doc_font(self, style: str, size: float) -> None:
        self.set_font(self._doc_family, style, size)

    def doc_text(self, text: str) -> str:
        """Return *text* printable with the active document font."""
        return text if self.has_unicode_font else _safe_text(text)

    def footer(self) -> None:
        self.set_y(-15)
        self.set_doc_font("I", 7)
        self.set_text_color(*MUTED)
        self.cell(0, 5, self.doc_text(self._pdf_settings.footer_text), align="L")
        self.set_x(-70)
        self.cell(
            0,
            5,
            f"{self._document_number} - Page {self.page_no()}/{{nb}} - {self._generation_date}",
            align="R",
        )
        self.set_text_color(0, 0, 0)


# ---------------------------------------------------------------------------
# Concrete renderer
# ---------------------------------------------------------------------------


class Fpdf2DocumentRenderer(IDocumentRenderer):
    """Renders invoices and quotes with fpdf2."""

    def __init__(self, pdf_settings: PdfSettings | None = None) -> None:
        if pdf_settings is None:
            pdf_settings = get_settings().pdf
        self._settings = pdf_settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_invoice(
        self,
        invoice: Invoice,
        vat_groups: list[VatGroup],
        issuer: IssuerProfile,
    ) -> bytes:
        dates = [("Date d'émission", format_date(invoice.issue_date))]
        if invoice.service_date:
            dates.append(("Date de prestation", format_date(invoice.service_date)))
        dates.append(("Échéance", format_date(invoice.due_date)))

        return self._render(
            title="FACTURE",
            number=invoice.invoice_number,
            document=invoice,
            dates=dates,
            vat_groups=vat_groups,
            issuer=issuer,
            mentions=self._invoice_mentions(invoice, issuer),
        )

    def render_quote(
        self,
        quote: Quote,
        vat_groups: list[VatGroup],
        issuer: IssuerProfile,
    ) -> bytes:
        dates = [
            ("Date d'émission", format_date(quote.issue_date)),
            ("Valable jusqu'au", format_date(quote.validity_date)),
        ]
        mentions = [
            f"Devis valable jusqu'au {format_date(quote.validity_date)}.",
            "Bon pour accord (date et signature du client) :",
        ]
        return self._render(
            title="DEVIS",
            number=quote.quote_number,
            document=quote,
            dates=dates,
            vat_groups=vat_groups,
            issuer=issuer,
            mentions=mentions,
        )

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _render(
        self,
        title: str,
        number: str,
        document: DocumentContent,
        dates: list[tuple[str, str]],
        vat_groups: list[VatGroup],
        issuer: IssuerProfile,
        mentions: list[str],
    ) -> bytes:
        try:
            pdf = _DocumentPdf(self._settings, number)
            pdf.alias_nb_pages()
            pdf.set_auto_page_break(auto=True, margin=20)
            pdf.add_page()

            self._render_header(pdf, title, number, document, issuer)
            self._render_parties(pdf, document, dates)
            self._render_lines_table(pdf, document)
            self._render_totals(pdf, document, vat_groups)
            self._render_notes(pdf, document)
            self._render_mentions(pdf, mentions)

            data = bytes(pdf.output())
        except FPDFException as e:
            logger.error("pdf_render_failed", number=number, error=str(e))
            raise RenderError(number, str(e)) from e

        logger.debug("pdf_rendered", number=number, size_bytes=len(data))
        return data

    def _render_header(
        self,
        pdf: _DocumentPdf,
        title: str,
        number: str,
        document: DocumentContent,
        issuer: IssuerProfile,
    ) -> None:
        """Seller identity on the left, title and number on the right."""
        logo_path = self._settings.logo_path
        if logo_path and os.path.isfile(logo_path):
            pdf.image(logo_path, x=10, y=10, h=18)
            pdf.set_y(30)

        top = pdf.get_y()
        seller_line = document.seller_name
        if issuer.legal_form:
            seller_line += f" - {issuer.legal_form}"
            if issuer.share_capital:
                seller_line += f" au capital de {_eur(issuer.share_capital)}"

        pdf.set_doc_font("B", 13)
        pdf.set_text_color(*ACCENT)
        pdf.multi_cell(110, 6, pdf.doc_text(seller_line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*MUTED)
        pdf.set_doc_font("", 9)
        seller_info = [f"SIRET : {document.seller_siret}"]
        if issuer.rcs_number:
            seller_info.append(issuer.rcs_number)
        seller_info.append(document.seller_address)
        if document.seller_vat_number:
            seller_info.append(f"TVA : {document.seller_vat_number}")
        for text in seller_info:
            pdf.cell(110, 5, pdf.doc_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        bottom = pdf.get_y()

        pdf.set_xy(120, top)
        pdf.set_doc_font("B", 20)
        pdf.set_text_color(*ACCENT)
        pdf.cell(80, 10, title, align="R", new_x=XPos.LEFT, new_y=YPos.NEXT)
        pdf.set_doc_font("", 11)
        pdf.set_text_color(*MUTED)
        pdf.cell(80, 6, number, align="R")
        pdf.set_text_color(0, 0, 0)

        pdf.set_y(max(bottom, pdf.get_y() + 6) + 8)

    @staticmethod
    def _render_parties(
        pdf: _DocumentPdf,
        document: DocumentContent,
        dates: list[tuple[str, str]],
    ) -> None:
        """Dates on the left, addressee block on the right."""
        top = pdf.get_y()
        pdf.set_doc_font("", 9)
        for label, value in dates:
            pdf.cell(90, 5, pdf.doc_text(f"{label} : {value}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        left_bottom = pdf.get_y()

        pdf.set_xy(120, top)
        pdf.set_doc_font("B", 8)
        pdf.set_text_color(*MUTED)
        pdf.cell(80, 5, "Destinataire", new_x=XPos.LEFT, new_y=YPos.NEXT)
        pdf.set_text_color(0, 0, 0)
        pdf.set_doc_font("B", 10)
        pdf.multi_cell(80, 5, pdf.doc_text(document.buyer_name), new_x=XPos.LEFT, new_y=YPos.NEXT)
        pdf.set_doc_font("", 9)
        pdf.multi_cell(80, 5, pdf.doc_text(document.buyer_address), new_x=XPos.LEFT, new_y=YPos.NEXT)
        if document.buyer_siret:
            pdf.cell(80, 5, f"SIRET : {document.buyer_siret}", new_x=XPos.LEFT, new_y=YPos.NEXT)

        pdf.set_y(max(left_bottom, pdf.get_y()) + 8)

    @staticmethod
    def _render_lines_table(pdf: _DocumentPdf, document: DocumentContent) -> None:
        """Lines in stored order, alternating row shading."""
        col_widths = [76, 16, 20, 28, 18, 32]
        headers = ["Description", "Qté", "Unité", "P.U. HT", "TVA", "Total HT"]
        aligns = ["L", "R", "L", "R", "R", "R"]

        pdf.set_doc_font("B", 9)
        pdf.set_fill_color(243, 244, 246)
        for width, header, align in zip(col_widths, headers, aligns):
            pdf.cell(width, 7, pdf.doc_text(header), border="B", fill=True, align=align)
        pdf.ln()

        pdf.set_doc_font("", 8)
        for idx, line in enumerate(document.lines, 1):
            fill = idx % 2 == 0
            if fill:
                pdf.set_fill_color(249, 250, 251)
            values = [
                pdf.doc_text(line.description[:60]),
                f"{line.quantity:g}".replace(".", ","),
                pdf.doc_text(unit_label(line.unit)),
                _eur(line.unit_price_ht),
                format_rate(line.vat_rate),
                _eur(line.total_ht),
            ]
            for width, value, align in zip(col_widths, values, aligns):
                pdf.cell(width, 6, value, fill=fill, align=align)
            pdf.ln()

        pdf.ln(4)

    @staticmethod
    def _render_totals(
        pdf: _DocumentPdf,
        document: DocumentContent,
        vat_groups: list[VatGroup],
    ) -> None:
        """Totals block; per-rate VAT only when VAT applies."""
        rows: list[tuple[str, str, bool]] = [("Total HT", _eur(document.total_ht), False)]
        if not document.vat_exempt:
            for group in vat_groups:
                rows.append(
                    (
                        f"TVA {format_rate(group.rate)} sur {_eur(group.base_ht)}",
                        _eur(group.vat_amount),
                        False,
                    )
                )
            rows.append(("Total TVA", _eur(document.total_vat), False))
        rows.append(("Total TTC", _eur(document.total_ttc), True))

        for label, value, bold in rows:
            pdf.set_doc_font("B" if bold else "", 11 if bold else 9)
            pdf.set_x(100)
            pdf.cell(65, 6, label, align="R")
            pdf.cell(35, 6, value, align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if document.vat_exempt and document.vat_exemption_text:
            pdf.ln(3)
            pdf.set_doc_font("I", 8)
            pdf.set_text_color(*MUTED)
            pdf.cell(0, 5, pdf.doc_text(document.vat_exemption_text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.set_text_color(0, 0, 0)
        pdf.ln(4)

    @staticmethod
    def _render_notes(pdf: _DocumentPdf, document: DocumentContent) -> None:
        if not document.notes:
            return
        pdf.set_doc_font("B", 8)
        pdf.set_text_color(*MUTED)
        pdf.cell(0, 5, "Notes", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(0, 0, 0)
        pdf.set_doc_font("", 9)
        pdf.multi_cell(0, 5, pdf.doc_text(document.notes), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

    @staticmethod
    def _render_mentions(pdf: _DocumentPdf, mentions: list[str]) -> None:
        pdf.ln(6)
        pdf.set_doc_font("", 7)
        pdf.set_text_color(*MUTED)
        for text in mentions:
            pdf.multi_cell(0, 4, pdf.doc_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(0, 0, 0)

    @staticmethod
    def _invoice_mentions(invoice: Invoice, issuer: IssuerProfile) -> list[str]:
        """Legal mentions required on French invoices."""
        mentions = [f"Mode de règlement : {issuer.payment_methods}."]
        if issuer.iban:
            bank = f"IBAN : {issuer.iban}"
            if issuer.bic:
                bank += f" - BIC : {issuer.bic}"
            mentions.append(bank)
        mentions.append(
            f"Conditions de paiement : {invoice.payment_terms_days} jours. "
            f"Échéance : {format_date(invoice.due_date)}."
        )
        mentions.append("Pas d'escompte pour paiement anticipé.")
        if invoice.late_penalty_text:
            mentions.append(invoice.late_penalty_text)
        if invoice.buyer_is_professional and invoice.recovery_costs_text:
            mentions.append(invoice.recovery_costs_text)
        return mentions
