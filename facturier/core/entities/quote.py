"""Quote domain entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import Field

from facturier.core.entities.document import DocumentContent


class QuoteStatus(str, Enum):
    """Quote lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class QuoteData(DocumentContent):
    """Everything a quote stores besides its identity, status and timestamps."""

    quote_number: str
    validity_date: date


class Quote(QuoteData):
    """A stored quote; ``converted_invoice_id`` is set once and never cleared."""

    id: int | None = None
    status: QuoteStatus = QuoteStatus.DRAFT
    converted_invoice_id: int | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_converted(self) -> bool:
        return self.converted_invoice_id is not None

    @property
    def can_convert(self) -> bool:
        return self.status == QuoteStatus.ACCEPTED and not self.is_converted

    def to_data(self) -> QuoteData:
        return QuoteData.model_validate(
            self.model_dump(include=set(QuoteData.model_fields))
        )
