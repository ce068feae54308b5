"""
Core business logic services.

Layer-pure services that depend only on:
- facturier/core/entities/*
- facturier/core/interfaces/*
- facturier/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from facturier.core.services.calculator import (
    Totals,
    VatGroup,
    document_totals,
    line_total,
    round2,
    vat_breakdown,
)
from facturier.core.services.client_registry import ClientRegistry
from facturier.core.services.invoice_lifecycle import InvoiceLifecycle
from facturier.core.services.numbering import (
    DocumentKind,
    NumberingService,
    is_valid_number,
)
from facturier.core.services.quote_lifecycle import ConversionResult, QuoteLifecycle

__all__ = [
    # Calculator
    "Totals",
    "VatGroup",
    "line_total",
    "document_totals",
    "vat_breakdown",
    "round2",
    # Numbering
    "DocumentKind",
    "NumberingService",
    "is_valid_number",
    # Clients
    "ClientRegistry",
    # Lifecycle
    "InvoiceLifecycle",
    "QuoteLifecycle",
    "ConversionResult",
]
