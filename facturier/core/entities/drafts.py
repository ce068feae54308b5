"""Caller input for creating or editing documents.

Drafts carry what the user typed; totals, numbering and the party snapshot
are filled in by the lifecycle services.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from facturier.core.entities.line_item import MAX_LINE_VALUE, VAT_RATES, LineUnit


class LineDraft(BaseModel):
    """A line as entered in the document form."""

    model_config = ConfigDict(allow_inf_nan=False)

    description: str = Field(..., min_length=1)
    quantity: float = Field(default=1.0, ge=0, le=MAX_LINE_VALUE)
    unit: LineUnit = LineUnit.UNIT
    unit_price_ht: float = Field(default=0.0, ge=0, le=MAX_LINE_VALUE)
    vat_rate: float = 0.0

    @field_validator("vat_rate")
    @classmethod
    def check_vat_rate(cls, v: float) -> float:
        if v not in VAT_RATES:
            allowed = ", ".join(f"{r:g}" for r in VAT_RATES)
            raise ValueError(f"VAT rate must be one of {allowed}")
        return v


class InvoiceDraft(BaseModel):
    """Invoice form content."""

    client_id: int
    issue_date: date = Field(default_factory=date.today)
    service_date: date | None = None
    payment_terms_days: int | None = Field(default=None, ge=0)
    notes: str | None = None
    lines: list[LineDraft] = Field(default_factory=list)


class QuoteDraft(BaseModel):
    """Quote form content."""

    client_id: int
    issue_date: date = Field(default_factory=date.today)
    validity_date: date | None = None
    notes: str | None = None
    lines: list[LineDraft] = Field(default_factory=list)
