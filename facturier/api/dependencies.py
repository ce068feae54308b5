"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. The storage backend is opened
by the application lifespan and kept on ``app.state``.
"""

from fastapi import Depends, Request

from facturier.application.use_cases import (
    ExportBackupUseCase,
    ExportInvoicesCsvUseCase,
    GenerateInvoicePdfUseCase,
    GenerateQuotePdfUseCase,
    RestoreBackupUseCase,
)
from facturier.config import Settings, get_settings
from facturier.core.interfaces import IDocumentRenderer, IStorage
from facturier.core.services import ClientRegistry, InvoiceLifecycle, QuoteLifecycle
from facturier.infrastructure.pdf import Fpdf2DocumentRenderer


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


def get_storage(request: Request) -> IStorage:
    """Get the storage opened at startup."""
    return request.app.state.storage


# Service dependencies
def get_client_registry(storage: IStorage = Depends(get_storage)) -> ClientRegistry:
    return ClientRegistry(storage)


def get_invoice_lifecycle(
    storage: IStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> InvoiceLifecycle:
    return InvoiceLifecycle(storage, settings.documents)


def get_quote_lifecycle(
    storage: IStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> QuoteLifecycle:
    return QuoteLifecycle(storage, settings.documents)


def get_renderer(settings: Settings = Depends(get_app_settings)) -> IDocumentRenderer:
    return Fpdf2DocumentRenderer(settings.pdf)


# Use case dependencies
def get_invoice_pdf_use_case(
    storage: IStorage = Depends(get_storage),
    renderer: IDocumentRenderer = Depends(get_renderer),
) -> GenerateInvoicePdfUseCase:
    return GenerateInvoicePdfUseCase(storage, renderer)


def get_quote_pdf_use_case(
    storage: IStorage = Depends(get_storage),
    renderer: IDocumentRenderer = Depends(get_renderer),
) -> GenerateQuotePdfUseCase:
    return GenerateQuotePdfUseCase(storage, renderer)


def get_export_csv_use_case(storage: IStorage = Depends(get_storage)) -> ExportInvoicesCsvUseCase:
    return ExportInvoicesCsvUseCase(storage)


def get_export_backup_use_case(storage: IStorage = Depends(get_storage)) -> ExportBackupUseCase:
    return ExportBackupUseCase(storage)


def get_restore_backup_use_case(storage: IStorage = Depends(get_storage)) -> RestoreBackupUseCase:
    return RestoreBackupUseCase(storage)
