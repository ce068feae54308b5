"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
Document responses extend the stored entities with computed display fields.
"""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from facturier.core.entities.client import Client
from facturier.core.entities.invoice import Invoice
from facturier.core.entities.line_item import LineItem
from facturier.core.entities.quote import Quote
from facturier.core.entities.status import invoice_status_label, quote_status_label
from facturier.core.services.calculator import vat_breakdown


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    storage_backend: str


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Clients ---


class ClientResponse(Client):
    """Client record with its resolved display name."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_name(self) -> str:
        return super().display_name

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponse":
        return cls.model_validate(client.model_dump())


class ClientListResponse(BaseModel):
    clients: list[ClientResponse]
    total: int


# --- Documents ---


class VatGroupResponse(BaseModel):
    """VAT due for one rate."""

    rate: float
    base_ht: float
    vat_amount: float


def _breakdown(lines: list[LineItem]) -> list[VatGroupResponse]:
    return [
        VatGroupResponse(rate=g.rate, base_ht=g.base_ht, vat_amount=g.vat_amount)
        for g in vat_breakdown(lines)
    ]


class InvoiceResponse(Invoice):
    """Invoice with status label and VAT breakdown."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return invoice_status_label(self.status)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def vat_breakdown(self) -> list[VatGroupResponse]:
        return _breakdown(self.lines)

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls.model_validate(invoice.model_dump())


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse]
    total: int


class QuoteResponse(Quote):
    """Quote with status label and VAT breakdown."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return quote_status_label(self.status)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def vat_breakdown(self) -> list[VatGroupResponse]:
        return _breakdown(self.lines)

    @classmethod
    def from_entity(cls, quote: Quote) -> "QuoteResponse":
        return cls.model_validate(quote.model_dump())


class QuoteListResponse(BaseModel):
    quotes: list[QuoteResponse]
    total: int


class ConversionResponse(BaseModel):
    """Outcome of a quote-to-invoice conversion."""

    quote: QuoteResponse
    invoice: InvoiceResponse


# --- Backup ---


class RestoreResponse(BaseModel):
    """Counts of records written by a restore."""

    settings: bool
    clients: int
    invoices: int
    quotes: int
