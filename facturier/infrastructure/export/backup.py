"""
JSON backup of all business data.

A backup holds the issuer profile, the active clients and every invoice and
quote with their lines. Restoring upserts records under their original ids
inside one transaction: either the whole file is applied or nothing is.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import pydantic
from pydantic import BaseModel, Field

from facturier.config import get_logger
from facturier.core.entities.client import Client
from facturier.core.entities.invoice import Invoice
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.quote import Quote
from facturier.core.exceptions import BackupFormatError
from facturier.core.interfaces.storage import IStorage

logger = get_logger(__name__)

BACKUP_VERSION = 1


class BackupData(BaseModel):
    """Backup file layout."""

    version: int = Field(default=BACKUP_VERSION, ge=1)
    exported_at: datetime
    settings: IssuerProfile | None = None
    clients: list[Client] = Field(default_factory=list)
    invoices: list[Invoice] = Field(default_factory=list)
    quotes: list[Quote] = Field(default_factory=list)


@dataclass
class RestoreSummary:
    """Counts of restored records."""

    settings: bool
    clients: int
    invoices: int
    quotes: int


async def export_backup(storage: IStorage) -> BackupData:
    """Collect everything a restore needs."""
    invoices = []
    for header in await storage.invoices.list_invoices():
        invoice = await storage.invoices.get_invoice(header.id)
        if invoice is not None:
            invoices.append(invoice)

    quotes = []
    for header in await storage.quotes.list_quotes():
        quote = await storage.quotes.get_quote(header.id)
        if quote is not None:
            quotes.append(quote)

    backup = BackupData(
        exported_at=datetime.now(UTC),
        settings=await storage.issuer.get_profile(),
        clients=await storage.clients.list_clients(),
        invoices=sorted(invoices, key=lambda i: i.id),
        quotes=sorted(quotes, key=lambda q: q.id),
    )
    logger.info(
        "backup_exported",
        clients=len(backup.clients),
        invoices=len(backup.invoices),
        quotes=len(backup.quotes),
    )
    return backup


def parse_backup(payload: dict[str, Any]) -> BackupData:
    """
    Validate a decoded backup file.

    Raises:
        BackupFormatError: Wrong layout, missing ids, or a newer version.
    """
    try:
        backup = BackupData.model_validate(payload)
    except pydantic.ValidationError as e:
        raise BackupFormatError(f"{e.error_count()} invalid field(s)") from e

    if backup.version > BACKUP_VERSION:
        raise BackupFormatError(f"unsupported version {backup.version}")

    records = [*backup.clients, *backup.invoices, *backup.quotes]
    if any(record.id is None for record in records):
        raise BackupFormatError("every record needs an id")
    return backup


async def restore_backup(storage: IStorage, payload: dict[str, Any]) -> RestoreSummary:
    """Apply a backup on top of the current data."""
    backup = parse_backup(payload)

    async with storage.atomic():
        if backup.settings is not None:
            await storage.issuer.save_profile(backup.settings)
        for client in backup.clients:
            await storage.clients.restore_client(client)
        # Invoices first: quotes may point at them
        for invoice in backup.invoices:
            await storage.invoices.restore_invoice(invoice)
        for quote in backup.quotes:
            await storage.quotes.restore_quote(quote)

    summary = RestoreSummary(
        settings=backup.settings is not None,
        clients=len(backup.clients),
        invoices=len(backup.invoices),
        quotes=len(backup.quotes),
    )
    logger.info(
        "backup_restored",
        exported_at=backup.exported_at.isoformat(),
        clients=summary.clients,
        invoices=summary.invoices,
        quotes=summary.quotes,
    )
    return summary
