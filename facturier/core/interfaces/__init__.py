"""Core interfaces (ports) for dependency injection."""

from facturier.core.interfaces.renderer import IDocumentRenderer
from facturier.core.interfaces.storage import (
    IClientStore,
    IInvoiceStore,
    IIssuerStore,
    IQuoteStore,
    IStorage,
)

__all__ = [
    # Storage interfaces
    "IClientStore",
    "IInvoiceStore",
    "IQuoteStore",
    "IIssuerStore",
    "IStorage",
    # Rendering
    "IDocumentRenderer",
]
