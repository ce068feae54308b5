"""
Abstract interfaces for storage providers.

Defines the persistence contract every backend (SQLite, JSON files)
implements. Lifecycle rules are not part of it: backends only guarantee the
storage-level invariants (finalized invoices and converted quotes reject
content updates, finalize and conversion stamps are written once).
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from facturier.core.entities.client import Client, ClientData
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus


class IClientStore(ABC):
    """Abstract interface for client storage."""

    @abstractmethod
    async def list_clients(self, include_deleted: bool = False) -> list[Client]:
        """List clients, soft-deleted ones excluded unless asked for."""
        pass

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None:
        """Get client by ID, soft-deleted or not."""
        pass

    @abstractmethod
    async def create_client(self, data: ClientData) -> Client:
        """Create a client record."""
        pass

    @abstractmethod
    async def update_client(self, client_id: int, data: ClientData) -> Client:
        """Overwrite a client's editable fields."""
        pass

    @abstractmethod
    async def soft_delete_client(self, client_id: int) -> None:
        """Flag a client as deleted, keeping the row."""
        pass

    @abstractmethod
    async def hard_delete_client(self, client_id: int) -> None:
        """Physically remove a client."""
        pass

    @abstractmethod
    async def restore_client(self, client: Client) -> Client:
        """Insert or replace a client with its own ID and timestamps."""
        pass


class IInvoiceStore(ABC):
    """Abstract interface for invoice storage (header + lines as a unit)."""

    @abstractmethod
    async def create_invoice(self, data: InvoiceData) -> Invoice:
        """Create a draft invoice with its lines."""
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get invoice with lines ordered by sort_order."""
        pass

    @abstractmethod
    async def list_invoices(self) -> list[Invoice]:
        """List invoice headers (no lines), most recent first."""
        pass

    @abstractmethod
    async def update_invoice(self, invoice_id: int, data: InvoiceData) -> Invoice:
        """Replace header content and lines; rejected once finalized."""
        pass

    @abstractmethod
    async def update_invoice_status(
        self, invoice_id: int, status: InvoiceStatus
    ) -> None:
        """Overwrite status and touch updated_at."""
        pass

    @abstractmethod
    async def finalize_invoice(self, invoice_id: int) -> None:
        """Set status sent and finalized_at, only if not finalized yet."""
        pass

    @abstractmethod
    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        """Invoice numbers starting with ``{prefix}-{year}-``."""
        pass

    @abstractmethod
    async def restore_invoice(self, invoice: Invoice) -> Invoice:
        """Insert or replace an invoice with its own ID, status and timestamps."""
        pass


class IQuoteStore(ABC):
    """Abstract interface for quote storage (header + lines as a unit)."""

    @abstractmethod
    async def create_quote(self, data: QuoteData) -> Quote:
        """Create a draft quote with its lines."""
        pass

    @abstractmethod
    async def get_quote(self, quote_id: int) -> Quote | None:
        """Get quote with lines ordered by sort_order."""
        pass

    @abstractmethod
    async def list_quotes(self) -> list[Quote]:
        """List quote headers (no lines), most recent first."""
        pass

    @abstractmethod
    async def update_quote(self, quote_id: int, data: QuoteData) -> Quote:
        """Replace header content and lines; rejected once converted."""
        pass

    @abstractmethod
    async def update_quote_status(self, quote_id: int, status: QuoteStatus) -> None:
        """Overwrite status and touch updated_at."""
        pass

    @abstractmethod
    async def mark_quote_converted(self, quote_id: int, invoice_id: int) -> None:
        """Set converted_invoice_id; raises if it is already set."""
        pass

    @abstractmethod
    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        """Quote numbers starting with ``{prefix}-{year}-``."""
        pass

    @abstractmethod
    async def restore_quote(self, quote: Quote) -> Quote:
        """Insert or replace a quote with its own ID, status and timestamps."""
        pass


class IIssuerStore(ABC):
    """Abstract interface for the issuer profile (single record)."""

    @abstractmethod
    async def get_profile(self) -> IssuerProfile | None:
        """Get the saved issuer profile, if any."""
        pass

    @abstractmethod
    async def save_profile(self, profile: IssuerProfile) -> IssuerProfile:
        """Create or replace the issuer profile."""
        pass


class IStorage(ABC):
    """
    A storage backend: the stores plus their shared lifecycle.

    Constructed explicitly at startup, initialized once, closed at shutdown.
    ``atomic()`` groups store calls into one all-or-nothing unit.
    """

    clients: IClientStore
    invoices: IInvoiceStore
    quotes: IQuoteStore
    issuer: IIssuerStore

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (schema, directories, connections)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Run the enclosed store calls in a single transaction."""
        pass
