"""Client registry: CRUD over client records."""

from facturier.config import get_logger
from facturier.core.entities.client import Client, ClientData
from facturier.core.exceptions import ClientNotFoundError
from facturier.core.interfaces.storage import IStorage

logger = get_logger(__name__)


class ClientRegistry:
    """
    Client management.

    Persists what it is given: SIRET format is checked by the request layer,
    and hard deletion does not verify that no document references the client.
    """

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def list_clients(self) -> list[Client]:
        """Active clients ordered by display name, case-insensitively."""
        clients = await self._storage.clients.list_clients()
        return sorted(clients, key=lambda c: c.display_name.casefold())

    async def get_client(self, client_id: int) -> Client:
        client = await self._storage.clients.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    async def create_client(self, data: ClientData) -> Client:
        client = await self._storage.clients.create_client(data)
        logger.info("client_created", client_id=client.id, name=client.display_name)
        return client

    async def update_client(self, client_id: int, data: ClientData) -> Client:
        await self.get_client(client_id)
        client = await self._storage.clients.update_client(client_id, data)
        logger.info("client_updated", client_id=client_id)
        return client

    async def soft_delete_client(self, client_id: int) -> None:
        """Hide the client from listings; documents keep their reference."""
        await self.get_client(client_id)
        await self._storage.clients.soft_delete_client(client_id)
        logger.info("client_soft_deleted", client_id=client_id)

    async def hard_delete_client(self, client_id: int) -> None:
        """Remove the client row. Callers ensure nothing references it."""
        await self.get_client(client_id)
        await self._storage.clients.hard_delete_client(client_id)
        logger.info("client_hard_deleted", client_id=client_id)
