"""Tests for the quote lifecycle and quote-to-invoice conversion."""

from datetime import date, timedelta

import pytest

from facturier.core.entities import InvoiceStatus, LineDraft, QuoteStatus
from facturier.core.exceptions import (
    ConversionIneligibleError,
    FinalizedDocumentError,
    InvalidTransitionError,
    QuoteNotFoundError,
)
from facturier.core.services.invoice_lifecycle import InvoiceLifecycle
from facturier.core.services.quote_lifecycle import QuoteLifecycle

CONVERSION_DAY = date(2026, 5, 4)


@pytest.fixture
def lifecycle(storage) -> QuoteLifecycle:
    return QuoteLifecycle(storage, today=lambda: CONVERSION_DAY)


@pytest.fixture
def hundred_euro_lines() -> list[LineDraft]:
    """Two lines totalling 100.00 HT / 20.00 VAT / 120.00 TTC."""
    return [
        LineDraft(description="Maquette", quantity=1, unit_price_ht=60, vat_rate=20),
        LineDraft(description="Intégration", quantity=2, unit_price_ht=20, vat_rate=20),
    ]


async def _accepted_quote(lifecycle: QuoteLifecycle, draft):
    quote = await lifecycle.create_quote(draft)
    await lifecycle.mark_sent(quote.id)
    return await lifecycle.accept(quote.id)


class TestCreateQuote:
    async def test_number_and_validity(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))

        assert quote.quote_number == "D-2026-0001"
        assert quote.status == QuoteStatus.DRAFT
        assert quote.validity_date == date(2026, 3, 1) + timedelta(days=30)
        assert quote.converted_invoice_id is None
        assert quote.total_ttc == 1662.18

    async def test_explicit_validity_date(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(
            quote_draft_factory(seeded, validity_date=date(2026, 6, 30))
        )
        assert quote.validity_date == date(2026, 6, 30)

    async def test_backdated_quote_numbered_in_current_year(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(
            quote_draft_factory(seeded, issue_date=date(2025, 11, 3))
        )

        assert quote.quote_number == "D-2026-0001"
        assert quote.issue_date == date(2025, 11, 3)

    async def test_quote_sequence_is_separate(self, storage, lifecycle, seeded, quote_draft_factory, invoice_draft_factory):
        await InvoiceLifecycle(storage).create_invoice(invoice_draft_factory(seeded))
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        assert quote.quote_number == "D-2026-0001"


class TestUpdateQuote:
    async def test_draft_is_editable(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        updated = await lifecycle.update_quote(
            quote.id, quote_draft_factory(seeded, notes="Valable 60 jours")
        )
        assert updated.quote_number == quote.quote_number
        assert updated.notes == "Valable 60 jours"

    async def test_sent_quote_is_not_editable(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        await lifecycle.mark_sent(quote.id)

        with pytest.raises(InvalidTransitionError):
            await lifecycle.update_quote(quote.id, quote_draft_factory(seeded))

    async def test_converted_quote_is_locked(self, lifecycle, seeded, quote_draft_factory):
        quote = await _accepted_quote(lifecycle, quote_draft_factory(seeded))
        await lifecycle.convert_to_invoice(quote.id)

        with pytest.raises(FinalizedDocumentError):
            await lifecycle.update_quote(quote.id, quote_draft_factory(seeded))

    async def test_unknown_quote(self, lifecycle, seeded, quote_draft_factory):
        with pytest.raises(QuoteNotFoundError):
            await lifecycle.update_quote(999, quote_draft_factory(seeded))


class TestTransitions:
    async def test_happy_path(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        assert (await lifecycle.mark_sent(quote.id)).status == QuoteStatus.SENT
        assert (await lifecycle.accept(quote.id)).status == QuoteStatus.ACCEPTED

    @pytest.mark.parametrize(
        ("action", "status"),
        [("reject", QuoteStatus.REJECTED), ("expire", QuoteStatus.EXPIRED)],
    )
    async def test_sent_quote_can_end(self, lifecycle, seeded, quote_draft_factory, action, status):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        await lifecycle.mark_sent(quote.id)
        assert (await getattr(lifecycle, action)(quote.id)).status == status

    @pytest.mark.parametrize("action", ["accept", "reject", "expire"])
    async def test_draft_must_be_sent_first(self, lifecycle, seeded, quote_draft_factory, action):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        with pytest.raises(InvalidTransitionError):
            await getattr(lifecycle, action)(quote.id)

    async def test_rejected_is_terminal(self, lifecycle, seeded, quote_draft_factory):
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        await lifecycle.mark_sent(quote.id)
        await lifecycle.reject(quote.id)

        for action in ("mark_sent", "accept", "expire"):
            with pytest.raises(InvalidTransitionError):
                await getattr(lifecycle, action)(quote.id)


class TestConversion:
    async def test_copies_content_verbatim(self, lifecycle, seeded, quote_draft_factory, hundred_euro_lines):
        quote = await _accepted_quote(
            lifecycle, quote_draft_factory(seeded, lines=hundred_euro_lines)
        )

        result = await lifecycle.convert_to_invoice(quote.id)
        invoice = result.invoice

        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.finalized_at is None
        assert (invoice.total_ht, invoice.total_vat, invoice.total_ttc) == (100.0, 20.0, 120.0)
        assert invoice.issue_date == CONVERSION_DAY
        assert invoice.due_date == CONVERSION_DAY + timedelta(days=30)
        assert invoice.invoice_number == "F-2026-0001"
        assert invoice.snapshot() == quote.snapshot()
        assert invoice.vat_exempt == quote.vat_exempt

        def content(line):
            return line.model_dump(exclude={"id"})

        assert [content(line) for line in invoice.lines] == [content(line) for line in quote.lines]

    async def test_stamps_quote(self, lifecycle, seeded, quote_draft_factory):
        quote = await _accepted_quote(lifecycle, quote_draft_factory(seeded))
        result = await lifecycle.convert_to_invoice(quote.id)

        assert result.quote.converted_invoice_id == result.invoice.id
        assert result.quote.status == QuoteStatus.ACCEPTED
        assert not result.quote.can_convert

    async def test_frozen_totals_not_recomputed(self, storage, lifecycle, seeded, quote_draft_factory):
        """Stored line totals are carried over even if they disagree with a fresh computation."""
        quote = await _accepted_quote(lifecycle, quote_draft_factory(seeded))
        tampered = quote.model_copy(
            update={
                "lines": [
                    line.model_copy(update={"total_ht": 1.0, "total_vat": 0.2, "total_ttc": 1.2})
                    for line in quote.lines
                ],
                "total_ht": 2.0,
                "total_vat": 0.4,
                "total_ttc": 2.4,
            }
        )
        await storage.quotes.restore_quote(tampered)

        invoice = (await lifecycle.convert_to_invoice(quote.id)).invoice
        assert invoice.total_ttc == 2.4
        assert [line.total_ttc for line in invoice.lines] == [1.2, 1.2]

    async def test_second_conversion_fails(self, lifecycle, seeded, quote_draft_factory):
        quote = await _accepted_quote(lifecycle, quote_draft_factory(seeded))
        await lifecycle.convert_to_invoice(quote.id)

        with pytest.raises(ConversionIneligibleError) as exc_info:
            await lifecycle.convert_to_invoice(quote.id)
        assert exc_info.value.details["reason"] == "already converted"

    @pytest.mark.parametrize("steps", [[], ["mark_sent"], ["mark_sent", "reject"]])
    async def test_only_accepted_quotes(self, storage, lifecycle, seeded, quote_draft_factory, steps):
        """Ineligible quotes are rejected before a number is consumed."""
        quote = await lifecycle.create_quote(quote_draft_factory(seeded))
        for step in steps:
            await getattr(lifecycle, step)(quote.id)

        with pytest.raises(ConversionIneligibleError):
            await lifecycle.convert_to_invoice(quote.id)

        assert await storage.invoices.list_invoices() == []
        assert await storage.invoices.list_numbers("F", CONVERSION_DAY.year) == []

    async def test_failed_stamp_rolls_back_invoice(self, storage, lifecycle, seeded, quote_draft_factory, monkeypatch):
        quote = await _accepted_quote(lifecycle, quote_draft_factory(seeded))

        async def broken_stamp(quote_id, invoice_id):
            raise ConversionIneligibleError(quote_id, "already converted")

        monkeypatch.setattr(storage.quotes, "mark_quote_converted", broken_stamp)

        with pytest.raises(ConversionIneligibleError):
            await lifecycle.convert_to_invoice(quote.id)

        assert await storage.invoices.list_invoices() == []
        assert (await lifecycle.get_quote(quote.id)).converted_invoice_id is None
