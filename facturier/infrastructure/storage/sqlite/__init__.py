"""SQLite storage backend implementations."""

from facturier.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from facturier.infrastructure.storage.sqlite.connection import ConnectionPool
from facturier.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from facturier.infrastructure.storage.sqlite.issuer_store import SQLiteIssuerStore
from facturier.infrastructure.storage.sqlite.quote_store import SQLiteQuoteStore
from facturier.infrastructure.storage.sqlite.storage import SQLiteStorage

__all__ = [
    # Backend
    "SQLiteStorage",
    "ConnectionPool",
    # Stores
    "SQLiteClientStore",
    "SQLiteInvoiceStore",
    "SQLiteQuoteStore",
    "SQLiteIssuerStore",
]
