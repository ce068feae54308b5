"""French display formatting for amounts, dates and units."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import assert_never

from facturier.core.entities.line_item import LineUnit


def _cents(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_amount(value: float) -> str:
    """``1234.5`` -> ``"1 234,50"`` (plain spaces, printable by core PDF fonts)."""
    grouped = f"{_cents(value):,.2f}"
    return grouped.replace(",", " ").replace(".", ",")


def format_decimal(value: float) -> str:
    """Spreadsheet-friendly French decimal: ``1234.5`` -> ``"1234,50"``."""
    return f"{_cents(value):.2f}".replace(".", ",")


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_rate(rate: float) -> str:
    """``5.5`` -> ``"5,5 %"``, ``20.0`` -> ``"20 %"``."""
    return f"{rate:g}".replace(".", ",") + " %"


def unit_label(unit: LineUnit) -> str:
    match unit:
        case LineUnit.UNIT:
            return "unité"
        case LineUnit.HOUR:
            return "heure"
        case LineUnit.DAY:
            return "jour"
        case LineUnit.FLAT_FEE:
            return "forfait"
        case _:
            assert_never(unit)
