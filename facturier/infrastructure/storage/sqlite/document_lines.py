"""Line-table helpers shared by the invoice and quote stores."""

import aiosqlite

from facturier.core.entities.line_item import LineItem
from facturier.core.exceptions import DuplicateNumberError
from facturier.infrastructure.storage.sqlite.mappers import (
    LINE_COLUMNS,
    line_values,
    placeholders,
    row_to_line,
)


async def insert_lines(
    conn: aiosqlite.Connection,
    table: str,
    parent_column: str,
    parent_id: int,
    lines: list[LineItem],
) -> None:
    """Insert lines with sort_order set to their position."""
    columns = (parent_column, *LINE_COLUMNS)
    await conn.executemany(
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders(columns)})",
        [
            (parent_id, *line_values(line, position))
            for position, line in enumerate(lines)
        ],
    )


async def replace_lines(
    conn: aiosqlite.Connection,
    table: str,
    parent_column: str,
    parent_id: int,
    lines: list[LineItem],
) -> None:
    await conn.execute(f"DELETE FROM {table} WHERE {parent_column} = ?", (parent_id,))
    await insert_lines(conn, table, parent_column, parent_id, lines)


async def fetch_lines(
    conn: aiosqlite.Connection,
    table: str,
    parent_column: str,
    parent_id: int,
) -> list[LineItem]:
    cursor = await conn.execute(
        f"SELECT * FROM {table} WHERE {parent_column} = ? ORDER BY sort_order, id",
        (parent_id,),
    )
    return [row_to_line(r) for r in await cursor.fetchall()]


def raise_if_duplicate_number(
    error: aiosqlite.IntegrityError, number_column: str, number: str
) -> None:
    """Turn a UNIQUE violation on the number column into DuplicateNumberError."""
    if "UNIQUE" in str(error) and number_column in str(error):
        raise DuplicateNumberError(number) from error
