"""SQLite implementation of invoice storage."""

from datetime import UTC, datetime

import aiosqlite

from facturier.config import get_logger
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.exceptions import FinalizedDocumentError, InvoiceNotFoundError
from facturier.core.interfaces.storage import IInvoiceStore
from facturier.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    sqlite_errors,
)
from facturier.infrastructure.storage.sqlite.document_lines import (
    fetch_lines,
    insert_lines,
    raise_if_duplicate_number,
    replace_lines,
)
from facturier.infrastructure.storage.sqlite.mappers import (
    INVOICE_COLUMNS,
    assignments,
    invoice_values,
    iso,
    placeholders,
    row_to_invoice,
    upsert_sql,
)

logger = get_logger(__name__)

LINES_TABLE = "invoice_lines"
PARENT_COLUMN = "invoice_id"


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage (header + lines)."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def create_invoice(self, data: InvoiceData) -> Invoice:
        """Insert header then lines in one transaction."""
        now = datetime.now(UTC).isoformat()
        columns = (*INVOICE_COLUMNS, "status", "created_at", "updated_at")
        with sqlite_errors("create_invoice"):
            async with self._pool.transaction() as conn:
                try:
                    cursor = await conn.execute(
                        f"INSERT INTO invoices ({', '.join(columns)}) "
                        f"VALUES ({placeholders(columns)})",
                        (*invoice_values(data), InvoiceStatus.DRAFT.value, now, now),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "invoice_number", data.invoice_number)
                    raise
                invoice_id = cursor.lastrowid
                await insert_lines(conn, LINES_TABLE, PARENT_COLUMN, invoice_id, data.lines)

            logger.debug(
                "invoice_stored",
                invoice_id=invoice_id,
                lines=len(data.lines),
            )
            return await self.get_invoice(invoice_id)

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        with sqlite_errors("get_invoice"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM invoices WHERE id = ?", (invoice_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    return None
                lines = await fetch_lines(conn, LINES_TABLE, PARENT_COLUMN, invoice_id)
        return row_to_invoice(row, lines)

    async def list_invoices(self) -> list[Invoice]:
        with sqlite_errors("list_invoices"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM invoices ORDER BY issue_date DESC, id DESC"
                )
                rows = await cursor.fetchall()
        return [row_to_invoice(r, []) for r in rows]

    async def update_invoice(self, invoice_id: int, data: InvoiceData) -> Invoice:
        """
        Overwrite header content and replace lines.

        The finalization check, header write and line replacement share one
        transaction, so a failure never leaves the invoice without lines.
        """
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("update_invoice"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "SELECT finalized_at FROM invoices WHERE id = ?", (invoice_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise InvoiceNotFoundError(invoice_id)
                if row["finalized_at"] is not None:
                    raise FinalizedDocumentError("invoice", invoice_id)

                try:
                    await conn.execute(
                        f"UPDATE invoices SET {assignments(INVOICE_COLUMNS)}, updated_at = ? "
                        "WHERE id = ? AND finalized_at IS NULL",
                        (*invoice_values(data), now, invoice_id),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "invoice_number", data.invoice_number)
                    raise
                await replace_lines(conn, LINES_TABLE, PARENT_COLUMN, invoice_id, data.lines)

            return await self.get_invoice(invoice_id)

    async def update_invoice_status(
        self, invoice_id: int, status: InvoiceStatus
    ) -> None:
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("update_invoice_status"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "UPDATE invoices SET status = ?, updated_at = ? WHERE id = ?",
                    (status.value, now, invoice_id),
                )
                if cursor.rowcount == 0:
                    raise InvoiceNotFoundError(invoice_id)

    async def finalize_invoice(self, invoice_id: int) -> None:
        """Stamp ``finalized_at`` once; later calls leave the stamp alone."""
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("finalize_invoice"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE invoices SET status = ?, finalized_at = ?, updated_at = ?
                    WHERE id = ? AND finalized_at IS NULL
                    """,
                    (InvoiceStatus.SENT.value, now, now, invoice_id),
                )
                if cursor.rowcount == 0:
                    cursor = await conn.execute(
                        "SELECT 1 FROM invoices WHERE id = ?", (invoice_id,)
                    )
                    if await cursor.fetchone() is None:
                        raise InvoiceNotFoundError(invoice_id)

    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        head = f"{prefix}-{year}-"
        with sqlite_errors("list_invoice_numbers"):
            async with self._pool.acquire() as conn:
                # substr() keeps the match case-sensitive, unlike LIKE
                cursor = await conn.execute(
                    "SELECT invoice_number FROM invoices WHERE substr(invoice_number, 1, ?) = ?",
                    (len(head), head),
                )
                rows = await cursor.fetchall()
        return [r[0] for r in rows]

    async def restore_invoice(self, invoice: Invoice) -> Invoice:
        columns = (
            "id",
            *INVOICE_COLUMNS,
            "status",
            "created_at",
            "updated_at",
            "finalized_at",
        )
        with sqlite_errors("restore_invoice"):
            async with self._pool.transaction() as conn:
                try:
                    await conn.execute(
                        upsert_sql("invoices", columns),
                        (
                            invoice.id,
                            *invoice_values(invoice),
                            invoice.status.value,
                            iso(invoice.created_at),
                            iso(invoice.updated_at),
                            iso(invoice.finalized_at),
                        ),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "invoice_number", invoice.invoice_number)
                    raise
                await replace_lines(conn, LINES_TABLE, PARENT_COLUMN, invoice.id, invoice.lines)
        return invoice
