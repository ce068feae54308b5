"""
Storage contract tests.

Every test runs against both backends through the parametrized ``storage``
fixture; the two must be interchangeable.
"""

from datetime import UTC, date, datetime

import pytest

from facturier.core.entities import (
    Client,
    InvoiceData,
    InvoiceStatus,
    LineItem,
    LineUnit,
    QuoteData,
    QuoteStatus,
)
from facturier.core.exceptions import (
    ClientNotFoundError,
    ConversionIneligibleError,
    DuplicateNumberError,
    FinalizedDocumentError,
    InvoiceNotFoundError,
    QuoteNotFoundError,
)

PARTIES = {
    "seller_name": "Atelier Martin",
    "seller_siret": "73282932000074",
    "seller_address": "4 quai des Chartrons, 33000 Bordeaux",
    "buyer_name": "Boulangerie Dupont",
    "buyer_address": "12 rue des Lilas, 75011 Paris",
}


def _lines(*descriptions: str) -> list[LineItem]:
    return [
        LineItem(
            description=d,
            quantity=1,
            unit=LineUnit.HOUR,
            unit_price_ht=10,
            vat_rate=20,
            total_ht=10,
            total_vat=2,
            total_ttc=12,
            # Callers' ordering is overwritten by position
            sort_order=99,
        )
        for d in descriptions
    ]


def invoice_data(number: str = "F-2026-0001", issue_date: date = date(2026, 3, 15), **kwargs) -> InvoiceData:
    values = {
        **PARTIES,
        "invoice_number": number,
        "client_id": 1,
        "issue_date": issue_date,
        "due_date": issue_date,
        "lines": _lines("a", "b", "c"),
        **kwargs,
    }
    return InvoiceData(**values)


def quote_data(number: str = "D-2026-0001", issue_date: date = date(2026, 3, 1), **kwargs) -> QuoteData:
    values = {
        **PARTIES,
        "quote_number": number,
        "client_id": 1,
        "issue_date": issue_date,
        "validity_date": issue_date,
        "lines": _lines("a", "b"),
        **kwargs,
    }
    return QuoteData(**values)


class TestClientStore:
    async def test_create_assigns_identity(self, storage, client_data):
        client = await storage.clients.create_client(client_data)
        assert client.id is not None
        assert client.created_at == client.updated_at
        assert client.deleted_at is None

    async def test_round_trip(self, storage, client_data):
        created = await storage.clients.create_client(client_data)
        fetched = await storage.clients.get_client(created.id)
        assert fetched.to_data() == client_data

    async def test_get_missing(self, storage):
        assert await storage.clients.get_client(404) is None

    async def test_list_include_deleted(self, storage, client_data):
        a = await storage.clients.create_client(client_data)
        b = await storage.clients.create_client(client_data)
        await storage.clients.soft_delete_client(b.id)

        assert [c.id for c in await storage.clients.list_clients()] == [a.id]
        assert {c.id for c in await storage.clients.list_clients(include_deleted=True)} == {a.id, b.id}

    async def test_ids_not_reused_after_hard_delete(self, storage, client_data):
        first = await storage.clients.create_client(client_data)
        await storage.clients.hard_delete_client(first.id)
        second = await storage.clients.create_client(client_data)
        assert second.id > first.id

    @pytest.mark.parametrize("method", ["soft_delete_client", "hard_delete_client"])
    async def test_delete_missing(self, storage, method):
        with pytest.raises(ClientNotFoundError):
            await getattr(storage.clients, method)(404)

    async def test_restore_keeps_id_and_timestamps(self, storage, client_data):
        stamp = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)
        client = Client(**client_data.model_dump(), id=41, created_at=stamp, updated_at=stamp)

        await storage.clients.restore_client(client)
        restored = await storage.clients.get_client(41)

        assert restored.created_at == stamp
        assert (await storage.clients.create_client(client_data)).id == 42


class TestInvoiceStore:
    async def test_create_defaults(self, storage):
        invoice = await storage.invoices.create_invoice(invoice_data())

        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.finalized_at is None
        assert invoice.created_at == invoice.updated_at
        assert [line.sort_order for line in invoice.lines] == [0, 1, 2]
        assert all(line.id is not None for line in invoice.lines)

    async def test_lines_returned_in_order(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())
        fetched = await storage.invoices.get_invoice(created.id)
        assert [line.description for line in fetched.lines] == ["a", "b", "c"]
        assert fetched.lines[0].unit == LineUnit.HOUR

    async def test_get_missing(self, storage):
        assert await storage.invoices.get_invoice(404) is None

    async def test_list_headers_most_recent_first(self, storage):
        old = await storage.invoices.create_invoice(invoice_data("F-2026-0001", date(2026, 1, 5)))
        tie_a = await storage.invoices.create_invoice(invoice_data("F-2026-0002", date(2026, 2, 1)))
        tie_b = await storage.invoices.create_invoice(invoice_data("F-2026-0003", date(2026, 2, 1)))

        listed = await storage.invoices.list_invoices()

        assert [i.id for i in listed] == [tie_b.id, tie_a.id, old.id]
        assert all(i.lines == [] for i in listed)

    async def test_duplicate_number(self, storage):
        await storage.invoices.create_invoice(invoice_data("F-2026-0001"))
        with pytest.raises(DuplicateNumberError):
            await storage.invoices.create_invoice(invoice_data("F-2026-0001"))

    async def test_update_replaces_lines(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())
        updated = await storage.invoices.update_invoice(
            created.id, invoice_data(notes="v2", lines=_lines("z"))
        )

        assert updated.notes == "v2"
        assert [line.description for line in updated.lines] == ["z"]
        assert updated.lines[0].sort_order == 0
        assert updated.created_at == created.created_at

    async def test_update_missing(self, storage):
        with pytest.raises(InvoiceNotFoundError):
            await storage.invoices.update_invoice(404, invoice_data())

    async def test_finalize_stamps_once(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())

        await storage.invoices.finalize_invoice(created.id)
        first = await storage.invoices.get_invoice(created.id)
        await storage.invoices.finalize_invoice(created.id)
        second = await storage.invoices.get_invoice(created.id)

        assert first.status == InvoiceStatus.SENT
        assert first.finalized_at is not None
        assert second.finalized_at == first.finalized_at

    async def test_finalized_content_is_frozen(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())
        await storage.invoices.finalize_invoice(created.id)
        before = await storage.invoices.get_invoice(created.id)

        with pytest.raises(FinalizedDocumentError):
            await storage.invoices.update_invoice(created.id, invoice_data(lines=[]))

        assert await storage.invoices.get_invoice(created.id) == before

    async def test_status_update(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())
        await storage.invoices.finalize_invoice(created.id)
        await storage.invoices.update_invoice_status(created.id, InvoiceStatus.PAID)

        invoice = await storage.invoices.get_invoice(created.id)
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.is_finalized

    @pytest.mark.parametrize("method", ["finalize_invoice", "update_invoice_status"])
    async def test_status_writes_on_missing(self, storage, method):
        args = (404,) if method == "finalize_invoice" else (404, InvoiceStatus.PAID)
        with pytest.raises(InvoiceNotFoundError):
            await getattr(storage.invoices, method)(*args)

    async def test_list_numbers(self, storage):
        for number in ("F-2026-0001", "F-2026-0002", "F-2025-0009", "FA-2026-0001"):
            await storage.invoices.create_invoice(invoice_data(number))

        assert sorted(await storage.invoices.list_numbers("F", 2026)) == ["F-2026-0001", "F-2026-0002"]

    async def test_restore_keeps_status_and_finalization(self, storage):
        created = await storage.invoices.create_invoice(invoice_data())
        await storage.invoices.finalize_invoice(created.id)
        snapshot = await storage.invoices.get_invoice(created.id)

        await storage.invoices.restore_invoice(snapshot.model_copy(update={"status": InvoiceStatus.PAID}))
        restored = await storage.invoices.get_invoice(created.id)

        assert restored.status == InvoiceStatus.PAID
        assert restored.finalized_at == snapshot.finalized_at
        assert len(restored.lines) == 3


class TestQuoteStore:
    async def test_create_and_get(self, storage):
        created = await storage.quotes.create_quote(quote_data())
        fetched = await storage.quotes.get_quote(created.id)

        assert fetched.status == QuoteStatus.DRAFT
        assert fetched.converted_invoice_id is None
        assert [line.sort_order for line in fetched.lines] == [0, 1]

    async def test_get_missing(self, storage):
        assert await storage.quotes.get_quote(404) is None

    async def test_list_order(self, storage):
        a = await storage.quotes.create_quote(quote_data("D-2026-0001", date(2026, 3, 1)))
        b = await storage.quotes.create_quote(quote_data("D-2026-0002", date(2026, 4, 1)))
        assert [q.id for q in await storage.quotes.list_quotes()] == [b.id, a.id]

    async def test_duplicate_number(self, storage):
        await storage.quotes.create_quote(quote_data())
        with pytest.raises(DuplicateNumberError):
            await storage.quotes.create_quote(quote_data())

    async def test_status_update(self, storage):
        created = await storage.quotes.create_quote(quote_data())
        await storage.quotes.update_quote_status(created.id, QuoteStatus.SENT)
        assert (await storage.quotes.get_quote(created.id)).status == QuoteStatus.SENT

    async def test_status_update_missing(self, storage):
        with pytest.raises(QuoteNotFoundError):
            await storage.quotes.update_quote_status(404, QuoteStatus.SENT)

    async def test_conversion_stamp_written_once(self, storage):
        created = await storage.quotes.create_quote(quote_data())
        invoice = await storage.invoices.create_invoice(invoice_data())

        await storage.quotes.mark_quote_converted(created.id, invoice.id)
        with pytest.raises(ConversionIneligibleError):
            await storage.quotes.mark_quote_converted(created.id, invoice.id)

        assert (await storage.quotes.get_quote(created.id)).converted_invoice_id == invoice.id

    async def test_converted_quote_rejects_update(self, storage):
        created = await storage.quotes.create_quote(quote_data())
        invoice = await storage.invoices.create_invoice(invoice_data())
        await storage.quotes.mark_quote_converted(created.id, invoice.id)

        with pytest.raises(FinalizedDocumentError):
            await storage.quotes.update_quote(created.id, quote_data(notes="late edit"))


class TestIssuerStore:
    async def test_empty(self, storage):
        assert await storage.issuer.get_profile() is None

    async def test_save_and_replace(self, storage, issuer):
        await storage.issuer.save_profile(issuer)
        assert await storage.issuer.get_profile() == issuer

        changed = issuer.model_copy(update={"invoice_prefix": "FAC", "share_capital": 1000.0})
        await storage.issuer.save_profile(changed)
        assert await storage.issuer.get_profile() == changed


class TestAtomic:
    async def test_rollback_discards_all_writes(self, storage, client_data):
        with pytest.raises(RuntimeError):
            async with storage.atomic():
                await storage.clients.create_client(client_data)
                await storage.invoices.create_invoice(invoice_data())
                raise RuntimeError("boom")

        assert await storage.clients.list_clients() == []
        assert await storage.invoices.list_invoices() == []

    async def test_commit(self, storage, client_data):
        async with storage.atomic():
            await storage.clients.create_client(client_data)
            async with storage.atomic():
                await storage.invoices.create_invoice(invoice_data())

        assert len(await storage.clients.list_clients()) == 1
        assert len(await storage.invoices.list_invoices()) == 1
