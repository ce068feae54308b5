"""SQLite implementation of client storage."""

from datetime import UTC, datetime

from facturier.config import get_logger
from facturier.core.entities.client import Client, ClientData
from facturier.core.exceptions import ClientNotFoundError
from facturier.core.interfaces.storage import IClientStore
from facturier.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    sqlite_errors,
)
from facturier.infrastructure.storage.sqlite.mappers import (
    CLIENT_COLUMNS,
    assignments,
    client_values,
    placeholders,
    row_to_client,
)

logger = get_logger(__name__)


class SQLiteClientStore(IClientStore):
    """SQLite implementation of client storage."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def list_clients(self, include_deleted: bool = False) -> list[Client]:
        sql = "SELECT * FROM clients"
        if not include_deleted:
            sql += " WHERE deleted_at IS NULL"
        with sqlite_errors("list_clients"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(sql + " ORDER BY id")
                rows = await cursor.fetchall()
        return [row_to_client(r) for r in rows]

    async def get_client(self, client_id: int) -> Client | None:
        with sqlite_errors("get_client"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM clients WHERE id = ?", (client_id,)
                )
                row = await cursor.fetchone()
        return row_to_client(row) if row else None

    async def create_client(self, data: ClientData) -> Client:
        now = datetime.now(UTC).isoformat()
        columns = (*CLIENT_COLUMNS, "created_at", "updated_at")
        with sqlite_errors("create_client"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    f"INSERT INTO clients ({', '.join(columns)}) "
                    f"VALUES ({placeholders(columns)})",
                    (*client_values(data), now, now),
                )
                client_id = cursor.lastrowid

        logger.debug("client_stored", client_id=client_id)
        return await self.get_client(client_id)

    async def update_client(self, client_id: int, data: ClientData) -> Client:
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("update_client"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    f"UPDATE clients SET {assignments(CLIENT_COLUMNS)}, updated_at = ? "
                    "WHERE id = ?",
                    (*client_values(data), now, client_id),
                )
                if cursor.rowcount == 0:
                    raise ClientNotFoundError(client_id)
        return await self.get_client(client_id)

    async def soft_delete_client(self, client_id: int) -> None:
        now = datetime.now(UTC).isoformat()
        with sqlite_errors("soft_delete_client"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "UPDATE clients SET deleted_at = ?, updated_at = ? WHERE id = ?",
                    (now, now, client_id),
                )
                if cursor.rowcount == 0:
                    raise ClientNotFoundError(client_id)

    async def hard_delete_client(self, client_id: int) -> None:
        with sqlite_errors("hard_delete_client"):
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM clients WHERE id = ?", (client_id,)
                )
                if cursor.rowcount == 0:
                    raise ClientNotFoundError(client_id)

    async def restore_client(self, client: Client) -> Client:
        columns = ("id", *CLIENT_COLUMNS, "created_at", "updated_at", "deleted_at")
        with sqlite_errors("restore_client"):
            async with self._pool.transaction() as conn:
                await conn.execute(
                    f"INSERT OR REPLACE INTO clients ({', '.join(columns)}) "
                    f"VALUES ({placeholders(columns)})",
                    (
                        client.id,
                        *client_values(client),
                        client.created_at.isoformat(),
                        client.updated_at.isoformat(),
                        client.deleted_at.isoformat() if client.deleted_at else None,
                    ),
                )
        return client
