"""API test fixtures."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from facturier.api.main import create_app
from facturier.core.interfaces import IStorage


@pytest.fixture
def app(storage: IStorage) -> FastAPI:
    """Application wired to the per-test storage; the lifespan is not run."""
    application = create_app()
    application.state.storage = storage
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def issuer_payload() -> dict[str, Any]:
    return {
        "business_name": "Atelier Martin",
        "first_name": "Claire",
        "last_name": "Martin",
        "siret": "732 829 320 00074",
        "address": "4 quai des Chartrons",
        "postal_code": "33000",
        "city": "Bordeaux",
        "vat_number": "FR44732829320",
        "is_vat_exempt": False,
        "iban": "FR76 3000 6000 0112 3456 7890 189",
    }


@pytest.fixture
def client_payload() -> dict[str, Any]:
    return {
        "company_name": "Boulangerie Dupont",
        "address": "12 rue des Lilas",
        "postal_code": "75011",
        "city": "Paris",
        "siret": "73282932000074",
    }


@pytest.fixture
def lines_payload() -> list[dict[str, Any]]:
    return [
        {
            "description": "Développement site vitrine",
            "quantity": 3,
            "unit": "day",
            "unit_price_ht": 450.0,
            "vat_rate": 20.0,
        },
        {
            "description": "Livre technique",
            "quantity": 2,
            "unit_price_ht": 19.99,
            "vat_rate": 5.5,
        },
    ]


@pytest.fixture
async def api_client_id(
    async_client: AsyncClient,
    issuer_payload: dict[str, Any],
    client_payload: dict[str, Any],
) -> int:
    """Save the issuer profile and one client through the API."""
    response = await async_client.put("/api/settings/issuer", json=issuer_payload)
    assert response.status_code == 200
    response = await async_client.post("/api/clients", json=client_payload)
    assert response.status_code == 201
    return response.json()["id"]
