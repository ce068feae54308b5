"""Abstract interface for document renderers."""

from abc import ABC, abstractmethod

from facturier.core.entities.invoice import Invoice
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.quote import Quote
from facturier.core.services.calculator import VatGroup


class IDocumentRenderer(ABC):
    """
    Turns a stored document into printable bytes.

    Implementations print the stored totals and the supplied VAT breakdown;
    they never recompute amounts.
    """

    @abstractmethod
    def render_invoice(
        self,
        invoice: Invoice,
        vat_groups: list[VatGroup],
        issuer: IssuerProfile,
    ) -> bytes:
        """Render an invoice."""
        ...

    @abstractmethod
    def render_quote(
        self,
        quote: Quote,
        vat_groups: list[VatGroup],
        issuer: IssuerProfile,
    ) -> bytes:
        """Render a quote."""
        ...
