"""Document line items shared by invoices and quotes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# French VAT rates offered on a line (percent)
VAT_RATES: tuple[float, ...] = (0.0, 5.5, 10.0, 20.0)

# Largest accepted line quantity or unit price
MAX_LINE_VALUE = 1_000_000_000


class LineUnit(str, Enum):
    """Unit a line quantity is expressed in."""

    UNIT = "unit"
    HOUR = "hour"
    DAY = "day"
    FLAT_FEE = "flat_fee"


class LineItem(BaseModel):
    """
    One priced line of an invoice or a quote.

    Totals are stored rounded to the cent and are never recomputed once the
    owning document is persisted; renderers print them as-is.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    id: int | None = None
    description: str
    quantity: float = Field(default=1.0, ge=0)
    unit: LineUnit = LineUnit.UNIT
    unit_price_ht: float = Field(default=0.0, ge=0)
    vat_rate: float = 0.0
    total_ht: float = 0.0
    total_vat: float = 0.0
    total_ttc: float = 0.0
    sort_order: int = 0

    def copy_content(self) -> "LineItem":
        """Copy the line without its identity, keeping totals and order."""
        return self.model_copy(update={"id": None})
