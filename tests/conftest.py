"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path

import pytest

from facturier.core.entities import (
    ClientData,
    InvoiceDraft,
    IssuerProfile,
    LineDraft,
    LineUnit,
    QuoteDraft,
)
from facturier.core.interfaces import IStorage
from facturier.infrastructure.storage.json_store import JsonStorage
from facturier.infrastructure.storage.sqlite import SQLiteStorage

VALID_SIRET = "73282932000074"


def make_storage(backend: str, tmp_path: Path) -> IStorage:
    if backend == "sqlite":
        return SQLiteStorage(tmp_path / "facturier.db", pool_size=2, busy_timeout=1000)
    return JsonStorage(tmp_path / "store")


@pytest.fixture(params=["sqlite", "json"])
async def storage(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[IStorage, None]:
    """Initialized storage, once per backend."""
    store = make_storage(request.param, tmp_path)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
async def sqlite_storage(tmp_path: Path) -> AsyncGenerator[SQLiteStorage, None]:
    store = SQLiteStorage(tmp_path / "facturier.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def issuer() -> IssuerProfile:
    """VAT-registered issuer."""
    return IssuerProfile(
        business_name="Atelier Martin",
        first_name="Claire",
        last_name="Martin",
        siret=VALID_SIRET,
        address="4 quai des Chartrons",
        postal_code="33000",
        city="Bordeaux",
        vat_number="FR44732829320",
        is_vat_exempt=False,
        default_payment_terms_days=30,
        default_late_penalty_rate=3.0,
        invoice_prefix="F",
        quote_prefix="D",
        iban="FR7630006000011234567890189",
        bic="AGRIFRPP",
    )


@pytest.fixture
def exempt_issuer(issuer: IssuerProfile) -> IssuerProfile:
    """Micro-entrepreneur issuer under the VAT franchise."""
    return issuer.model_copy(update={"is_vat_exempt": True, "vat_number": None})


@pytest.fixture
def client_data() -> ClientData:
    return ClientData(
        company_name="Boulangerie Dupont",
        address="12 rue des Lilas",
        postal_code="75011",
        city="Paris",
        siret=VALID_SIRET,
        is_professional=True,
    )


@pytest.fixture
def lines() -> list[LineDraft]:
    return [
        LineDraft(
            description="Développement site vitrine",
            quantity=3,
            unit=LineUnit.DAY,
            unit_price_ht=450.0,
            vat_rate=20.0,
        ),
        LineDraft(
            description="Livre technique",
            quantity=2,
            unit=LineUnit.UNIT,
            unit_price_ht=19.99,
            vat_rate=5.5,
        ),
    ]


@pytest.fixture
async def seeded(storage: IStorage, issuer: IssuerProfile, client_data: ClientData):
    """Storage with an issuer profile and one client; yields the client id."""
    await storage.issuer.save_profile(issuer)
    client = await storage.clients.create_client(client_data)
    return client.id


@pytest.fixture
def invoice_draft_factory(lines: list[LineDraft]):
    def factory(client_id: int, issue_date: date = date(2026, 3, 15), **kwargs) -> InvoiceDraft:
        kwargs.setdefault("lines", lines)
        return InvoiceDraft(client_id=client_id, issue_date=issue_date, **kwargs)

    return factory


@pytest.fixture
def quote_draft_factory(lines: list[LineDraft]):
    def factory(client_id: int, issue_date: date = date(2026, 3, 1), **kwargs) -> QuoteDraft:
        kwargs.setdefault("lines", lines)
        return QuoteDraft(client_id=client_id, issue_date=issue_date, **kwargs)

    return factory


@pytest.fixture
def storage_factory(tmp_path: Path):
    """Build extra, uninitialized backends under the test's tmp dir."""

    def factory(backend: str, name: str) -> IStorage:
        return make_storage(backend, tmp_path / name)

    return factory


@pytest.fixture
def clock():
    """Fixed "today" for lifecycles, so numbers fall in the 2026 series."""
    return lambda: date(2026, 3, 20)
