"""PDF generation infrastructure."""

from facturier.infrastructure.pdf.document_pdf_renderer import Fpdf2DocumentRenderer

__all__ = [
    "Fpdf2DocumentRenderer",
]
