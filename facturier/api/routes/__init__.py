"""API route modules."""

from facturier.api.routes.backup import router as backup_router
from facturier.api.routes.clients import router as clients_router
from facturier.api.routes.health import router as health_router
from facturier.api.routes.invoices import router as invoices_router
from facturier.api.routes.issuer import router as issuer_router
from facturier.api.routes.quotes import router as quotes_router

__all__ = [
    "health_router",
    "issuer_router",
    "clients_router",
    "invoices_router",
    "quotes_router",
    "backup_router",
]
