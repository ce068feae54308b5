"""JSON-directory storage backend."""

from contextlib import AbstractAsyncContextManager
from pathlib import Path

from facturier.config import get_logger
from facturier.core.interfaces.storage import IStorage
from facturier.infrastructure.storage.json_store.kv import JsonKeyValueStore
from facturier.infrastructure.storage.json_store.stores import (
    JsonClientStore,
    JsonInvoiceStore,
    JsonIssuerStore,
    JsonQuoteStore,
)

logger = get_logger(__name__)


class JsonStorage(IStorage):
    """Stores backed by a directory of JSON files."""

    def __init__(self, directory: Path):
        self.directory = directory
        self.kv = JsonKeyValueStore(directory)
        self.clients = JsonClientStore(self.kv)
        self.invoices = JsonInvoiceStore(self.kv)
        self.quotes = JsonQuoteStore(self.kv)
        self.issuer = JsonIssuerStore(self.kv)

    async def initialize(self) -> None:
        self.kv.initialize()
        logger.info("storage_initialized", backend="json", directory=str(self.directory))

    async def close(self) -> None:
        # Every save is already on disk outside atomic blocks
        logger.debug("storage_closed", backend="json")

    def atomic(self) -> AbstractAsyncContextManager[None]:
        return self.kv.atomic()
