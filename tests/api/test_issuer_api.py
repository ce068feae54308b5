"""Tests for issuer profile endpoints."""

from httpx import AsyncClient


class TestGetIssuer:
    async def test_missing_profile_is_conflict(self, async_client: AsyncClient):
        response = await async_client.get("/api/settings/issuer")

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "ISSUER_NOT_CONFIGURED"
        assert "PUT /api/settings/issuer" in data["hint"]

    async def test_returns_saved_profile(self, async_client: AsyncClient, issuer_payload):
        await async_client.put("/api/settings/issuer", json=issuer_payload)

        response = await async_client.get("/api/settings/issuer")
        assert response.status_code == 200
        assert response.json()["business_name"] == "Atelier Martin"


class TestSaveIssuer:
    async def test_normalizes_identifiers(self, async_client: AsyncClient, issuer_payload):
        response = await async_client.put("/api/settings/issuer", json=issuer_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["siret"] == "73282932000074"
        assert data["iban"] == "FR7630006000011234567890189"
        assert data["invoice_prefix"] == "F"

    async def test_invalid_siret_rejected(self, async_client: AsyncClient, issuer_payload):
        issuer_payload["siret"] = "73282932000075"

        response = await async_client.put("/api/settings/issuer", json=issuer_payload)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        # Nothing was saved
        assert (await async_client.get("/api/settings/issuer")).status_code == 409

    async def test_invalid_vat_number_rejected(self, async_client: AsyncClient, issuer_payload):
        issuer_payload["vat_number"] = "FR44123"

        response = await async_client.put("/api/settings/issuer", json=issuer_payload)
        assert response.status_code == 400

    async def test_name_required(self, async_client: AsyncClient, issuer_payload):
        for key in ("business_name", "first_name", "last_name"):
            issuer_payload[key] = ""

        response = await async_client.put("/api/settings/issuer", json=issuer_payload)
        assert response.status_code == 400

    async def test_bad_prefix_fails_schema(self, async_client: AsyncClient, issuer_payload):
        issuer_payload["invoice_prefix"] = "F-"

        response = await async_client.put("/api/settings/issuer", json=issuer_payload)

        assert response.status_code == 422
        assert "invoice_prefix" in response.json()["detail"]
