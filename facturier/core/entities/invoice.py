"""Invoice domain entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import Field

from facturier.core.entities.document import DocumentContent


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class InvoiceData(DocumentContent):
    """Everything an invoice stores besides its identity, status and timestamps."""

    invoice_number: str
    due_date: date
    service_date: date | None = None
    payment_terms_days: int = 30
    late_penalty_rate: float = 3.0
    late_penalty_text: str = ""
    recovery_costs_text: str = ""


class Invoice(InvoiceData):
    """
    A stored invoice.

    Once ``finalized_at`` is set the content is legally frozen; only the
    status (paid/cancelled) and ``updated_at`` may still change.
    """

    id: int | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finalized_at: datetime | None = None

    @property
    def is_finalized(self) -> bool:
        return self.finalized_at is not None

    @property
    def is_editable(self) -> bool:
        return self.status == InvoiceStatus.DRAFT and not self.is_finalized

    def to_data(self) -> InvoiceData:
        return InvoiceData.model_validate(
            self.model_dump(include=set(InvoiceData.model_fields))
        )
