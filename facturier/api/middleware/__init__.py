"""API middleware."""

from facturier.api.middleware.error_handler import ErrorHandlerMiddleware
from facturier.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
