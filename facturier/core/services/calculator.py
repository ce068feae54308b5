"""
Monetary calculator.

Pure functions computing line and document totals. Amounts are rounded
half-up to the cent at each stage: a line's HT, then its VAT from the rounded
HT, then its TTC from the two rounded values. Document totals sum the
already-rounded line totals, so they may differ by a cent from rounding a
grand total computed on raw amounts.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from facturier.core.entities.line_item import LineItem

CENT = Decimal("0.01")


def _dec(value: float | int | Decimal) -> Decimal:
    # str() keeps the decimal literal the float was typed from (0.1, not 0.1000000000000000055...)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round2(value: float | int | Decimal) -> float:
    """Round half-up to two decimals."""
    return float(_quantize(_dec(value)))


@dataclass(frozen=True)
class Totals:
    """HT / VAT / TTC amounts, each rounded to the cent."""

    total_ht: float = 0.0
    total_vat: float = 0.0
    total_ttc: float = 0.0


@dataclass(frozen=True)
class VatGroup:
    """Aggregated base and VAT for one rate."""

    rate: float
    base_ht: float
    vat_amount: float


def line_total(quantity: float, unit_price_ht: float, vat_rate: float) -> Totals:
    """Compute a line's totals, rounding each stage independently."""
    total_ht = _quantize(_dec(quantity) * _dec(unit_price_ht))
    total_vat = _quantize(total_ht * _dec(vat_rate) / 100)
    total_ttc = _quantize(total_ht + total_vat)
    return Totals(
        total_ht=float(total_ht),
        total_vat=float(total_vat),
        total_ttc=float(total_ttc),
    )


def document_totals(lines: Iterable[LineItem]) -> Totals:
    """Sum rounded line totals. An empty document totals zero."""
    ht = vat = ttc = Decimal("0")
    for line in lines:
        ht += _dec(line.total_ht)
        vat += _dec(line.total_vat)
        ttc += _dec(line.total_ttc)
    return Totals(
        total_ht=float(_quantize(ht)),
        total_vat=float(_quantize(vat)),
        total_ttc=float(_quantize(ttc)),
    )


def vat_breakdown(lines: Iterable[LineItem]) -> list[VatGroup]:
    """Group lines by VAT rate, ascending by rate, one entry per distinct rate."""
    bases: dict[Decimal, Decimal] = {}
    amounts: dict[Decimal, Decimal] = {}
    for line in lines:
        rate = _dec(line.vat_rate)
        bases[rate] = bases.get(rate, Decimal("0")) + _dec(line.total_ht)
        amounts[rate] = amounts.get(rate, Decimal("0")) + _dec(line.total_vat)

    return [
        VatGroup(
            rate=float(rate),
            base_ht=float(_quantize(bases[rate])),
            vat_amount=float(_quantize(amounts[rate])),
        )
        for rate in sorted(bases)
    ]
