"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facturier import __version__
from facturier.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from facturier.api.middleware.error_handler import setup_exception_handlers
from facturier.api.routes import (
    backup_router,
    clients_router,
    health_router,
    invoices_router,
    issuer_router,
    quotes_router,
)
from facturier.config import configure_logging, get_logger, get_settings
from facturier.infrastructure.storage import create_storage

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Opens the configured storage backend on startup and closes it on shutdown.
    """
    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        backend=settings.storage.backend,
    )

    storage = create_storage(settings)
    try:
        await storage.initialize()
    except Exception as e:
        logger.error("storage_init_failed", error=str(e))
        raise
    app.state.storage = storage

    logger.info("application_started")

    try:
        yield
    finally:
        logger.info("application_stopping")
        await storage.close()
        logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Facturier API",
        description="Invoices and quotes for French sole proprietors",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS for the local web UI
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(issuer_router)
    app.include_router(clients_router)
    app.include_router(invoices_router)
    app.include_router(quotes_router)
    app.include_router(backup_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "facturier.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
