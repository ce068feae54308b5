"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
"""

from facturier.application.dto.requests import (
    ClientRequest,
    InvoiceRequest,
    IssuerProfileRequest,
    LineRequest,
    QuoteRequest,
)
from facturier.application.dto.responses import (
    ClientListResponse,
    ClientResponse,
    ConversionResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    QuoteListResponse,
    QuoteResponse,
    RestoreResponse,
    VatGroupResponse,
)

__all__ = [
    # Requests
    "ClientRequest",
    "IssuerProfileRequest",
    "InvoiceRequest",
    "QuoteRequest",
    "LineRequest",
    # Responses
    "ClientResponse",
    "ClientListResponse",
    "ConversionResponse",
    "ErrorResponse",
    "HealthResponse",
    "InvoiceResponse",
    "InvoiceListResponse",
    "QuoteResponse",
    "QuoteListResponse",
    "RestoreResponse",
    "VatGroupResponse",
]
