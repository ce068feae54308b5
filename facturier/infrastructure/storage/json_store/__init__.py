"""JSON key-value storage backend."""

from facturier.infrastructure.storage.json_store.kv import (
    JsonCollection,
    JsonKeyValueStore,
)
from facturier.infrastructure.storage.json_store.storage import JsonStorage
from facturier.infrastructure.storage.json_store.stores import (
    JsonClientStore,
    JsonInvoiceStore,
    JsonIssuerStore,
    JsonQuoteStore,
)

__all__ = [
    "JsonStorage",
    "JsonKeyValueStore",
    "JsonCollection",
    "JsonClientStore",
    "JsonInvoiceStore",
    "JsonQuoteStore",
    "JsonIssuerStore",
]
