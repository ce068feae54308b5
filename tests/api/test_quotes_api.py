"""Tests for quote endpoints."""

from datetime import date
from typing import Any

import pytest
from httpx import AsyncClient

YEAR = date.today().year


@pytest.fixture
def quote_payload(api_client_id: int, lines_payload) -> dict[str, Any]:
    return {"client_id": api_client_id, "issue_date": "2026-03-01", "lines": lines_payload}


async def _create(client: AsyncClient, payload: dict[str, Any]) -> dict[str, Any]:
    response = await client.post("/api/quotes", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _accepted(client: AsyncClient, payload: dict[str, Any]) -> dict[str, Any]:
    quote = await _create(client, payload)
    await client.post(f"/api/quotes/{quote['id']}/send")
    response = await client.post(f"/api/quotes/{quote['id']}/accept")
    assert response.status_code == 200
    return response.json()


class TestCreateQuote:
    async def test_create_draft(self, async_client: AsyncClient, quote_payload):
        data = await _create(async_client, quote_payload)

        assert data["quote_number"] == f"D-{YEAR}-0001"
        assert data["status"] == "draft"
        assert data["validity_date"] == "2026-03-31"
        assert data["total_ttc"] == pytest.approx(1662.18)
        assert data["converted_invoice_id"] is None

    async def test_explicit_validity_date(self, async_client: AsyncClient, quote_payload):
        quote_payload["validity_date"] = "2026-06-30"

        data = await _create(async_client, quote_payload)
        assert data["validity_date"] == "2026-06-30"

    async def test_status_filter(self, async_client: AsyncClient, quote_payload):
        await _create(async_client, quote_payload)
        await _accepted(async_client, quote_payload)

        response = await async_client.get("/api/quotes", params={"status": "accepted"})

        assert response.json()["total"] == 1
        assert response.json()["quotes"][0]["status_label"] == "Accepté"


class TestQuoteTransitions:
    async def test_send_and_reject(self, async_client: AsyncClient, quote_payload):
        quote = await _create(async_client, quote_payload)

        sent = await async_client.post(f"/api/quotes/{quote['id']}/send")
        rejected = await async_client.post(f"/api/quotes/{quote['id']}/reject")

        assert sent.json()["status"] == "sent"
        assert rejected.json()["status"] == "rejected"

    async def test_expire_requires_sent(self, async_client: AsyncClient, quote_payload):
        quote = await _create(async_client, quote_payload)

        response = await async_client.post(f"/api/quotes/{quote['id']}/expire")

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    async def test_sent_quote_not_editable(self, async_client: AsyncClient, quote_payload):
        quote = await _create(async_client, quote_payload)
        await async_client.post(f"/api/quotes/{quote['id']}/send")

        response = await async_client.put(f"/api/quotes/{quote['id']}", json=quote_payload)
        assert response.status_code == 409

    async def test_unknown_quote(self, async_client: AsyncClient):
        response = await async_client.post("/api/quotes/77/accept")

        assert response.status_code == 404
        assert response.json()["error_code"] == "QUOTE_NOT_FOUND"


class TestConvertQuote:
    async def test_convert_accepted(self, async_client: AsyncClient, quote_payload):
        quote = await _accepted(async_client, quote_payload)

        response = await async_client.post(f"/api/quotes/{quote['id']}/convert")

        assert response.status_code == 201
        data = response.json()
        invoice = data["invoice"]
        assert data["quote"]["converted_invoice_id"] == invoice["id"]
        assert invoice["status"] == "draft"
        assert invoice["invoice_number"] == f"F-{YEAR}-0001"
        assert invoice["issue_date"] == date.today().isoformat()
        assert invoice["total_ttc"] == quote["total_ttc"]
        assert invoice["buyer_name"] == quote["buyer_name"]
        assert [line["description"] for line in invoice["lines"]] == [
            line["description"] for line in quote["lines"]
        ]

    async def test_second_conversion_rejected(self, async_client: AsyncClient, quote_payload):
        quote = await _accepted(async_client, quote_payload)
        await async_client.post(f"/api/quotes/{quote['id']}/convert")

        response = await async_client.post(f"/api/quotes/{quote['id']}/convert")

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONVERSION_INELIGIBLE"
        assert (await async_client.get("/api/invoices")).json()["total"] == 1

    async def test_draft_quote_not_convertible(self, async_client: AsyncClient, quote_payload):
        quote = await _create(async_client, quote_payload)

        response = await async_client.post(f"/api/quotes/{quote['id']}/convert")

        assert response.status_code == 409
        assert (await async_client.get("/api/invoices")).json()["total"] == 0

    async def test_converted_quote_locked(self, async_client: AsyncClient, quote_payload):
        quote = await _accepted(async_client, quote_payload)
        await async_client.post(f"/api/quotes/{quote['id']}/convert")

        response = await async_client.put(f"/api/quotes/{quote['id']}", json=quote_payload)

        assert response.status_code == 409
        assert response.json()["error_code"] == "DOCUMENT_FINALIZED"


class TestQuotePdf:
    async def test_pdf(self, async_client: AsyncClient, quote_payload):
        quote = await _create(async_client, quote_payload)

        response = await async_client.get(f"/api/quotes/{quote['id']}/pdf")

        assert response.status_code == 200
        assert f"devis_D-{YEAR}-0001.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")
