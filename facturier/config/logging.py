"""
Structured logging configuration using structlog.

Events go to stderr so that CLI commands keep stdout for their own output.
Standard-library records (uvicorn, aiosqlite) are rendered by the same
processor chain as structlog events.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from facturier.config.settings import get_settings

# Event keys whose values are bank identifiers
MASKED_KEYS = frozenset({"iban", "bic"})

_configured = False


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the application name and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def mask_bank_details(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Keep only the last four characters of IBAN/BIC values."""
    for key in MASKED_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and value:
            event_dict[key] = "*" * max(len(value) - 4, 0) + value[-4:]
    return event_dict


def _renderer(environment: str) -> Processor:
    if environment == "development":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer(ensure_ascii=False)


def configure_logging(level: str | None = None, force: bool = False) -> None:
    """
    Configure structlog and the root stdlib logger.

    Safe to call from both the API lifespan and each CLI command; only the
    first call (or one with ``force=True``) takes effect.
    """
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    log_level = getattr(logging, level or settings.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
        mask_bank_details,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    final_processors: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if settings.environment != "development":
        final_processors.append(structlog.processors.format_exc_info)
    final_processors.append(_renderer(settings.environment))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=final_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    # Per-query debug output from the driver
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("fpdf").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
