"""Tests for invoice and quote entities."""

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from facturier.core.entities import (
    Invoice,
    InvoiceData,
    InvoiceStatus,
    LineDraft,
    LineItem,
    Quote,
    QuoteStatus,
)

PARTIES = {
    "seller_name": "Atelier Martin",
    "seller_siret": "73282932000074",
    "seller_address": "4 quai des Chartrons, 33000 Bordeaux",
    "buyer_name": "Boulangerie Dupont",
    "buyer_address": "12 rue des Lilas, 75011 Paris",
    "client_id": 1,
    "issue_date": date(2026, 3, 15),
}


def _invoice(**kwargs) -> Invoice:
    return Invoice(**PARTIES, invoice_number="F-2026-0001", due_date=date(2026, 4, 14), **kwargs)


def _quote(**kwargs) -> Quote:
    return Quote(**PARTIES, quote_number="D-2026-0001", validity_date=date(2026, 4, 14), **kwargs)


class TestInvoice:
    def test_new_invoice_is_editable(self):
        invoice = _invoice()
        assert invoice.status == InvoiceStatus.DRAFT
        assert not invoice.is_finalized
        assert invoice.is_editable

    def test_finalized_invoice_is_locked(self):
        invoice = _invoice(status=InvoiceStatus.SENT, finalized_at=datetime.now(UTC))
        assert invoice.is_finalized
        assert not invoice.is_editable

    def test_cancelled_draft_not_editable(self):
        assert not _invoice(status=InvoiceStatus.CANCELLED).is_editable

    def test_to_data_drops_identity_and_status(self):
        invoice = _invoice(id=7, status=InvoiceStatus.PAID, notes="Merci")
        data = invoice.to_data()

        assert isinstance(data, InvoiceData)
        assert data.notes == "Merci"
        assert "id" not in data.model_dump()
        assert "status" not in data.model_dump()

    def test_snapshot(self):
        snapshot = _invoice(buyer_siret="73282932000074").snapshot()
        assert snapshot.seller_name == "Atelier Martin"
        assert snapshot.buyer_siret == "73282932000074"
        assert snapshot.buyer_is_professional is True


class TestQuote:
    @pytest.mark.parametrize(
        ("status", "converted_id", "expected"),
        [
            (QuoteStatus.ACCEPTED, None, True),
            (QuoteStatus.ACCEPTED, 3, False),
            (QuoteStatus.SENT, None, False),
            (QuoteStatus.REJECTED, None, False),
        ],
    )
    def test_can_convert(self, status, converted_id, expected):
        quote = _quote(status=status, converted_invoice_id=converted_id)
        assert quote.can_convert is expected
        assert quote.is_converted is (converted_id is not None)


class TestLineItem:
    def test_copy_content_drops_id(self):
        line = LineItem(
            id=12,
            description="Audit",
            quantity=2,
            unit_price_ht=100,
            vat_rate=20,
            total_ht=200,
            total_vat=40,
            total_ttc=240,
            sort_order=1,
        )
        copy = line.copy_content()

        assert copy.id is None
        assert copy.model_dump(exclude={"id"}) == line.model_dump(exclude={"id"})

    @pytest.mark.parametrize("field", ["quantity", "unit_price_ht", "total_ttc"])
    def test_non_finite_amounts_rejected(self, field):
        with pytest.raises(ValidationError):
            LineItem(description="Audit", **{field: float("inf")})


class TestLineDraft:
    @pytest.mark.parametrize(
        "values",
        [
            {"quantity": float("inf")},
            {"quantity": float("nan")},
            {"unit_price_ht": float("-inf")},
            {"unit_price_ht": 1e30},
        ],
    )
    def test_unusable_numbers_rejected(self, values):
        with pytest.raises(ValidationError):
            LineDraft(description="Audit", vat_rate=20.0, **values)

    def test_large_finite_values_accepted(self):
        line = LineDraft(description="Audit", quantity=1_000_000, unit_price_ht=999_999.99)
        assert line.quantity == 1_000_000
