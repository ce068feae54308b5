"""SQLite implementation of quote storage."""

from datetime import UTC, datetime

import aiosqlite

from facturier.config import get_logger
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus
from facturier.core.exceptions import (
    ConversionIneligibleError,
    FinalizedDocumentError,
    QuoteNotFoundError,
)
from facturier.core.interfaces.storage import IQuoteStore
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
    QUOTE_COLUMNS,
    assignments,
    iso,
    placeholders,
    quote_values,
    row_to_quote,
    upsert_sql,
)

logger = get_logger(__name__)

LINES_TABLE = "quote_lines"
PARENT_COLUMN = "quote_id"


class SQLiteQuoteStore(IQuoteStore):
    """SQLite implementation of quote storage (header + lines)."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def create_quote(self, data: QuoteData) -> Quote:
        now = datetime.now(UTC).isoformat()
        columns = (*QUOTE_COLUMNS, "status", "created_at", "updated_at")
        with sqlite_errors("create_quote"):
            async with self._pool.transaction() as conn:
                try:
                    cursor = await conn.execute(
                        f"INSERT INTO quotes ({', '.join(columns)}) "
                        f"VALUES ({placeholders(columns)})",
                        (*quote_values(data), QuoteStatus.DRAFT.value, now, now),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "quote_number", data.quote_number)
                    raise
                quote_id = cursor.lastrowid
                await insert_lines(conn, LINES_TABLE, PARENT_COLUMN, quote_id, data.lines)

            logger.debug("quote_stored", quote_id=quote_id, lines=len(data.lines))
            return await self.get_quote(quote_id)

    async def get_quote(self, quote_id: int) -> Quote | None:
        with sqlite_errors("get_quote"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM quotes WHERE id = ?", (quote_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    return None
                lines = await fetch_lines(conn, LINES_TABLE, PARENT_COLUMN, quote_id)
        return row_to_quote(row, lines)

    async def list_quotes(self) -> list[Quote]:
        with sqlite_errors("list_quotes"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM quotes ORDER BY issue_date DESC, id DESC"
                )
                rows = await cursor.fetchall()
        return [row_to_quote(r, []) for r in rows]

    async def update_quote(self, quote_id: int, data: QuoteData) -> Quote:
        """Overwrite header content and replace lines unless already converted."""
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("update_quote"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "SELECT converted_invoice_id FROM quotes WHERE id = ?", (quote_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise QuoteNotFoundError(quote_id)
                if row["converted_invoice_id"] is not None:
                    raise FinalizedDocumentError("quote", quote_id)

                try:
                    await conn.execute(
                        f"UPDATE quotes SET {assignments(QUOTE_COLUMNS)}, updated_at = ? "
                        "WHERE id = ?",
                        (*quote_values(data), now, quote_id),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "quote_number", data.quote_number)
                    raise
                await replace_lines(conn, LINES_TABLE, PARENT_COLUMN, quote_id, data.lines)

            return await self.get_quote(quote_id)

    async def update_quote_status(self, quote_id: int, status: QuoteStatus) -> None:
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("update_quote_status"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "UPDATE quotes SET status = ?, updated_at = ? WHERE id = ?",
                    (status.value, now, quote_id),
                )
                if cursor.rowcount == 0:
                    raise QuoteNotFoundError(quote_id)

    async def mark_quote_converted(self, quote_id: int, invoice_id: int) -> None:
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("mark_quote_converted"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE quotes SET converted_invoice_id = ?, updated_at = ?
                    WHERE id = ? AND converted_invoice_id IS NULL
                    """,
                    (invoice_id, now, quote_id),
                )
                if cursor.rowcount == 0:
                    cursor = await conn.execute(
                        "SELECT 1 FROM quotes WHERE id = ?", (quote_id,)
                    )
                    if await cursor.fetchone() is None:
                        raise QuoteNotFoundError(quote_id)
                    raise ConversionIneligibleError(quote_id, "already converted")

    async def list_numbers(self, prefix: str, year: int) -> list[str]:
        head = f"{prefix}-{year}-"
        with sqlite_errors("list_quote_numbers"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT quote_number FROM quotes WHERE substr(quote_number, 1, ?) = ?",
                    (len(head), head),
                )
                rows = await cursor.fetchall()
        return [r[0] for r in rows]

    async def restore_quote(self, quote: Quote) -> Quote:
        columns = (
            "id",
            *QUOTE_COLUMNS,
            "status",
            "converted_invoice_id",
            "created_at",
            "updated_at",
        )
        with sqlite_errors("restore_quote"):
            async with self._pool.transaction() as conn:
                try:
                    await conn.execute(
                        upsert_sql("quotes", columns),
                        (
                            quote.id,
                            *quote_values(quote),
                            quote.status.value,
                            quote.converted_invoice_id,
                            iso(quote.created_at),
                            iso(quote.updated_at),
                        ),
                    )
                except aiosqlite.IntegrityError as e:
                    raise_if_duplicate_number(e, "quote_number", quote.quote_number)
                    raise
                await replace_lines(conn, LINES_TABLE, PARENT_COLUMN, quote.id, quote.lines)
        return quote
