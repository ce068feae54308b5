"""Client endpoints."""

from fastapi import APIRouter, Depends, Response, status

from facturier.api.dependencies import get_client_registry
from facturier.application.dto.requests import ClientRequest
from facturier.application.dto.responses import (
    ClientListResponse,
    ClientResponse,
    ErrorResponse,
)
from facturier.core.services import ClientRegistry

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=ClientListResponse)
async def list_clients(
    registry: ClientRegistry = Depends(get_client_registry),
) -> ClientListResponse:
    """List active clients by display name."""
    clients = await registry.list_clients()
    return ClientListResponse(
        clients=[ClientResponse.from_entity(c) for c in clients],
        total=len(clients),
    )


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_client(
    request: ClientRequest,
    registry: ClientRegistry = Depends(get_client_registry),
) -> ClientResponse:
    client = await registry.create_client(request.to_data())
    return ClientResponse.from_entity(client)


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_client(
    client_id: int,
    registry: ClientRegistry = Depends(get_client_registry),
) -> ClientResponse:
    return ClientResponse.from_entity(await registry.get_client(client_id))


@router.put(
    "/{client_id}",
    response_model=ClientResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_client(
    client_id: int,
    request: ClientRequest,
    registry: ClientRegistry = Depends(get_client_registry),
) -> ClientResponse:
    client = await registry.update_client(client_id, request.to_data())
    return ClientResponse.from_entity(client)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_client(
    client_id: int,
    hard: bool = False,
    registry: ClientRegistry = Depends(get_client_registry),
) -> Response:
    """
    Delete a client.

    Soft delete by default: documents keep pointing at the record. ``hard=true``
    removes the row; the caller must know no document references it.
    """
    if hard:
        await registry.hard_delete_client(client_id)
    else:
        await registry.soft_delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
