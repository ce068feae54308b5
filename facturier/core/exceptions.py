"""
Domain exceptions for the Facturier application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class FacturierError(Exception):
    """Base exception for all Facturier errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(FacturierError):
    """Requested record does not exist."""

    def __init__(self, entity: str, entity_id: int, code: str | None = None):
        super().__init__(
            f"{entity.capitalize()} not found: {entity_id}",
            code=code or "NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class ClientNotFoundError(NotFoundError):
    """Client not found in storage."""

    def __init__(self, client_id: int):
        super().__init__("client", client_id, code="CLIENT_NOT_FOUND")


class InvoiceNotFoundError(NotFoundError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__("invoice", invoice_id, code="INVOICE_NOT_FOUND")


class QuoteNotFoundError(NotFoundError):
    """Quote not found in storage."""

    def __init__(self, quote_id: int):
        super().__init__("quote", quote_id, code="QUOTE_NOT_FOUND")


# Lifecycle Exceptions
class LifecycleError(FacturierError):
    """Base exception for rejected document state changes."""

    pass


class FinalizedDocumentError(LifecycleError):
    """Attempted to modify the content of a locked document."""

    def __init__(self, kind: str, document_id: int):
        super().__init__(
            f"Cannot modify {kind} {document_id}: it is finalized",
            code="DOCUMENT_FINALIZED",
            details={"kind": kind, "document_id": document_id},
        )


class ConversionIneligibleError(LifecycleError):
    """Quote cannot be converted into an invoice."""

    def __init__(self, quote_id: int, reason: str):
        super().__init__(
            f"Quote {quote_id} cannot be converted: {reason}",
            code="CONVERSION_INELIGIBLE",
            details={"quote_id": quote_id, "reason": reason},
        )


class NumberingExhaustedError(LifecycleError):
    """The yearly sequence has no 4-digit number left."""

    def __init__(self, prefix: str, year: int):
        super().__init__(
            f"No document number left for {prefix}-{year}",
            code="NUMBERING_EXHAUSTED",
            details={"prefix": prefix, "year": year},
        )


class InvalidTransitionError(LifecycleError):
    """Requested action is not allowed from the document's current status."""

    def __init__(self, kind: str, document_id: int, status: str, action: str):
        super().__init__(
            f"Cannot {action} {kind} {document_id} with status '{status}'",
            code="INVALID_TRANSITION",
            details={
                "kind": kind,
                "document_id": document_id,
                "status": status,
                "action": action,
            },
        )


# Storage Exceptions
class StorageError(FacturierError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class DuplicateNumberError(StorageError):
    """Document number already used."""

    def __init__(self, number: str):
        super().__init__(
            f"Document number already exists: {number}",
            code="DUPLICATE_NUMBER",
            details={"number": number},
        )


class BackupFormatError(StorageError):
    """Backup payload cannot be restored."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid backup file: {reason}",
            code="INVALID_BACKUP",
            details={"reason": reason},
        )


# Validation Exceptions
class ValidationError(FacturierError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidSiretError(ValidationError):
    """SIRET number fails the format or checksum test."""

    def __init__(self, siret: str, field: str = "siret"):
        super().__init__(
            field=field,
            message="SIRET must be 14 digits with a valid checksum",
            value=siret,
        )


# Configuration Exceptions
class ConfigurationError(FacturierError):
    """Configuration error."""

    pass


class IssuerNotConfiguredError(ConfigurationError):
    """No issuer profile has been saved yet."""

    def __init__(self) -> None:
        super().__init__(
            "Issuer profile is not configured",
            code="ISSUER_NOT_CONFIGURED",
        )


# Rendering Exceptions
class RenderError(FacturierError):
    """Document rendering failed."""

    def __init__(self, document_number: str, reason: str):
        super().__init__(
            f"Failed to render '{document_number}': {reason}",
            code="RENDER_FAILED",
            details={"document_number": document_number, "reason": reason},
        )
