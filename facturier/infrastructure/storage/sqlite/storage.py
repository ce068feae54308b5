"""SQLite storage backend."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from facturier.config import get_logger
from facturier.core.exceptions import DatabaseError
from facturier.core.interfaces.storage import IStorage
from facturier.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from facturier.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    sqlite_errors,
)
from facturier.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from facturier.infrastructure.storage.sqlite.issuer_store import SQLiteIssuerStore
from facturier.infrastructure.storage.sqlite.migrations import initialize_database
from facturier.infrastructure.storage.sqlite.quote_store import SQLiteQuoteStore

logger = get_logger(__name__)


class SQLiteStorage(IStorage):
    """
    Stores backed by one SQLite file.

    Owns the connection pool: ``initialize()`` applies pending migrations and
    opens the pool, ``close()`` releases it.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 2,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool = ConnectionPool(db_path, pool_size=pool_size, busy_timeout=busy_timeout)
        self.clients = SQLiteClientStore(self.pool)
        self.invoices = SQLiteInvoiceStore(self.pool)
        self.quotes = SQLiteQuoteStore(self.pool)
        self.issuer = SQLiteIssuerStore(self.pool)

    async def initialize(self) -> None:
        with sqlite_errors("migrate"):
            results = await initialize_database(self.db_path)
        failed = [r for r in results if not r.success]
        if failed:
            raise DatabaseError(f"migration {failed[0].version}", failed[0].error or "failed")
        await self.pool.initialize()
        logger.info("storage_initialized", backend="sqlite", db_path=str(self.db_path))

    async def close(self) -> None:
        await self.pool.close()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        with sqlite_errors("atomic"):
            async with self.pool.transaction():
                yield
