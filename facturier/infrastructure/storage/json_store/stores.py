"""
JSON-file implementations of the stores.

Documents are stored with their lines inline, so header and lines are always
written together. Records are the entities' JSON dumps.
"""

from datetime import UTC, datetime

from facturier.config import get_logger
from facturier.core.entities.client import Client, ClientData
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.line_item import LineItem
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus
from facturier.core.exceptions import (
    ClientNotFoundError,
    ConversionIneligibleError,
    DuplicateNumberError,
    FinalizedDocumentError,
    InvoiceNotFoundError,
    QuoteNotFoundError,
)
from facturier.core.interfaces.storage import (
    IClientStore,
    IInvoiceStore,
    IIssuerStore,
    IQuoteStore,
)
from facturier.infrastructure.storage.json_store.kv import (
    JsonCollection,
    JsonKeyValueStore,
)

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def _numbered_lines(collection: JsonCollection, lines: list[LineItem]) -> list[LineItem]:
    """Fresh line ids, sort_order set to position."""
    return [
        line.model_copy(
            update={"id": collection.allocate("line"), "sort_order": position}
        )
        for position, line in enumerate(lines)
    ]


def _check_number_free(
    collection: JsonCollection, field: str, number: str, own_id: int | None = None
) -> None:
    for record in collection.all():
        if record[field] == number and record["id"] != own_id:
            raise DuplicateNumberError(number)


def _numbers_with_prefix(collection: JsonCollection, field: str, prefix: str, year: int) -> list[str]:
    head = f"{prefix}-{year}-"
    return [r[field] for r in collection.all() if r[field].startswith(head)]


class JsonClientStore(IClientStore):
    """Clients in ``clients.json``."""

    def __init__(self, kv: JsonKeyValueStore):
        self._kv = kv
        self._clients = JsonCollection(kv, "clients")

    async def list_clients(self, include_deleted: bool = False) -> list[Client]:
        clients = [Client.model_validate(r) for r in self._clients.all()]
        if not include_deleted:
            clients = [c for c in clients if not c.is_deleted]
        return sorted(clients, key=lambda c: c.id)

    async def get_client(self, client_id: int) -> Client | None:
        record = self._clients.get(client_id)
        return Client.model_validate(record) if record else None

    async def create_client(self, data: ClientData) -> Client:
        async with self._kv.atomic():
            now = _now()
            client = Client(
                **data.model_dump(),
                id=self._clients.allocate(),
                created_at=now,
                updated_at=now,
            )
            self._clients.put(client.model_dump(mode="json"))
        logger.debug("client_stored", client_id=client.id)
        return client

    async def update_client(self, client_id: int, data: ClientData) -> Client:
        async with self._kv.atomic():
            current = await self.get_client(client_id)
            if current is None:
                raise ClientNotFoundError(client_id)
            client = current.model_copy(update={**data.model_dump(), "updated_at": _now()})
            self._clients.put(client.model_dump(mode="json"))
        return client

    async def soft_delete_client(self, client_id: int) -> None:
        async with self._kv.atomic():
            current = await self.get_client(client_id)
            if current is None:
                raise ClientNotFoundError(client_id)
            now = _now()
            client = current.model_copy(update={"deleted_at": now, "updated_at": now})
            self._clients.put(client.model_dump(mode="json"))

    async def hard_delete_client(self, client_id: int) -> None:
        async with self._kv.atomic():
            if not self._clients.delete(client_id):
                raise ClientNotFoundError(client_id)

    async def restore_client(self, client: Client) -> Client:
        async with self._kv.atomic():
            self._clients.bump(client.id)
            self._clients.put(client.model_dump(mode="json"))
        return client


class JsonInvoiceStore(IInvoiceStore):
    """Invoices (with lines inline) in ``invoices.json``."""

    def __init__(self, kv: JsonKeyValueStore):
        self._kv = kv
        self._invoices = JsonCollection(kv, "invoices")

    async def create_invoice(self, data: InvoiceData) -> Invoice:
        async with self._kv.atomic():
            _check_number_free(self._invoices, "invoice_number", data.invoice_number)
            now = _now()
            invoice = Invoice(
                **data.model_dump(exclude={"lines"}),
                lines=_numbered_lines(self._invoices, data.lines),
                id=self._invoices.allocate(),
                status=InvoiceStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            self._invoices.put(invoice.model_dump(mode="json"))
        logger.debug("invoice_stored", invoice_id=invoice.id, lines=len(invoice.lines))
        return invoice

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        record = self._invoices.get(invoice_id)
        return Invoice.model_validate(record) if record else None

    async def list_invoices(self) -> list[Invoice]:
        invoices = [
            Invoice.model_validate({**r, "lines": []}) for r in self._invoices.all()
        ]
        return sorted(invoices, key=lambda i: (i.issue_date, i.id), reverse=True)

    async def _require(self, invoice_id: int) -> Invoice:
        invoice = await self.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def update_invoice(self, invoice_id: int, data: InvoiceData) -> Invoice:
        async with self._kv.atomic():
            current = await self._require(invoice_id)
            if current.is_finalized:
                raise FinalizedDocumentError("invoice", invoice_id)
            _check_number_free(
                self._invoices, "invoice_number", data.invoice_number, invoice_id
            )
            invoice = current.model_copy(
                update={
                    **data.model_dump(exclude={"lines"}),
                    "lines": _numbered_lines(self._invoices, data.lines),
                    "updated_at": _now(),
                }
            )
            self._invoices.put(invoice.model_dump(mode="json"))
        return invoice

    async def update_invoice_status(
        self, invoice_id: int, status: InvoiceStatus
    ) -> None:
        async with self._kv.atomic():
            current = await self._require(invoice_id)
            invoice = current.model_copy(update={"status": status, "updated_at": _now()})
            self._invoices.put(invoice.model_dump(mode="json"))

    async def finalize_invoice(self, invoice_id: int) -> None:
        async with self._kv.atomic():
            current = await self._require(invoice_id)
            if current.is_finalized:
                return
            now = _now()
            invoice = current.model_copy(
                update={
                    "status": InvoiceStatus.SENT,
                    "finalized_at": now,
                    "updated_at": now,
                }
            )
            self._invoices.put(invoice.model_dump(mode="json"))

    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        return _numbers_with_prefix(self._invoices, "invoice_number", prefix, year)

    async def restore_invoice(self, invoice: Invoice) -> Invoice:
        async with self._kv.atomic():
            _check_number_free(
                self._invoices, "invoice_number", invoice.invoice_number, invoice.id
            )
            self._invoices.bump(invoice.id)
            for line in invoice.lines:
                if line.id is not None:
                    self._invoices.bump(line.id, "line")
            self._invoices.put(invoice.model_dump(mode="json"))
        return invoice


class JsonQuoteStore(IQuoteStore):
    """Quotes (with lines inline) in ``quotes.json``."""

    def __init__(self, kv: JsonKeyValueStore):
        self._kv = kv
        self._quotes = JsonCollection(kv, "quotes")

    async def create_quote(self, data: QuoteData) -> Quote:
        async with self._kv.atomic():
            _check_number_free(self._quotes, "quote_number", data.quote_number)
            now = _now()
            quote = Quote(
                **data.model_dump(exclude={"lines"}),
                lines=_numbered_lines(self._quotes, data.lines),
                id=self._quotes.allocate(),
                status=QuoteStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            self._quotes.put(quote.model_dump(mode="json"))
        logger.debug("quote_stored", quote_id=quote.id, lines=len(quote.lines))
        return quote

    async def get_quote(self, quote_id: int) -> Quote | None:
        record = self._quotes.get(quote_id)
        return Quote.model_validate(record) if record else None

    async def list_quotes(self) -> list[Quote]:
        quotes = [Quote.model_validate({**r, "lines": []}) for r in self._quotes.all()]
        return sorted(quotes, key=lambda q: (q.issue_date, q.id), reverse=True)

    async def _require(self, quote_id: int) -> Quote:
        quote = await self.get_quote(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return quote

    async def update_quote(self, quote_id: int, data: QuoteData) -> Quote:
        async with self._kv.atomic():
            current = await self._require(quote_id)
            if current.is_converted:
                raise FinalizedDocumentError("quote", quote_id)
            _check_number_free(self._quotes, "quote_number", data.quote_number, quote_id)
            quote = current.model_copy(
                update={
                    **data.model_dump(exclude={"lines"}),
                    "lines": _numbered_lines(self._quotes, data.lines),
                    "updated_at": _now(),
                }
            )
            self._quotes.put(quote.model_dump(mode="json"))
        return quote

    async def update_quote_status(self, quote_id: int, status: QuoteStatus) -> None:
        async with self._kv.atomic():
            current = await self._require(quote_id)
            quote = current.model_copy(update={"status": status, "updated_at": _now()})
            self._quotes.put(quote.model_dump(mode="json"))

    async def mark_quote_converted(self, quote_id: int, invoice_id: int) -> None:
        async with self._kv.atomic():
            current = await self._require(quote_id)
            if current.is_converted:
                raise ConversionIneligibleError(quote_id, "already converted")
            quote = current.model_copy(
                update={"converted_invoice_id": invoice_id, "updated_at": _now()}
            )
            self._quotes.put(quote.model_dump(mode="json"))

    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        return _numbers_with_prefix(self._quotes, "quote_number", prefix, year)

    async def restore_quote(self, quote: Quote) -> Quote:
        async with self._kv.atomic():
            _check_number_free(self._quotes, "quote_number", quote.quote_number, quote.id)
            self._quotes.bump(quote.id)
            for line in quote.lines:
                if line.id is not None:
                    self._quotes.bump(line.id, "line")
            self._quotes.put(quote.model_dump(mode="json"))
        return quote


class JsonIssuerStore(IIssuerStore):
    """Issuer profile as the single record of ``settings.json``."""

    def __init__(self, kv: JsonKeyValueStore):
        self._kv = kv
        self._settings = JsonCollection(kv, "settings")

    async def get_profile(self) -> IssuerProfile | None:
        record = self._settings.get(1)
        if record is None:
            return None
        record.pop("id")
        return IssuerProfile.model_validate(record)

    async def save_profile(self, profile: IssuerProfile) -> IssuerProfile:
        async with self._kv.atomic():
            self._settings.put({"id": 1, **profile.model_dump(mode="json")})
        logger.info("issuer_profile_saved", siret=profile.siret)
        return profile
