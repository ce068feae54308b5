"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services and infrastructure

Lifecycle operations are called directly from the core services; use cases
cover the flows that also need rendering or export.
"""

from facturier.application.dto import (
    ClientRequest,
    ClientResponse,
    ErrorResponse,
    InvoiceResponse,
    IssuerProfileRequest,
    QuoteResponse,
)
from facturier.application.use_cases import (
    ExportBackupUseCase,
    ExportInvoicesCsvUseCase,
    GenerateInvoicePdfUseCase,
    GenerateQuotePdfUseCase,
    RestoreBackupUseCase,
)

__all__ = [
    # DTOs
    "ClientRequest",
    "IssuerProfileRequest",
    "ClientResponse",
    "InvoiceResponse",
    "QuoteResponse",
    "ErrorResponse",
    # Use Cases
    "GenerateInvoicePdfUseCase",
    "GenerateQuotePdfUseCase",
    "ExportInvoicesCsvUseCase",
    "ExportBackupUseCase",
    "RestoreBackupUseCase",
]
