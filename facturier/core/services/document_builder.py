"""
Turns draft input into storable document content.

Shared by the invoice and quote lifecycles: validates lines against the
issuer's VAT regime, prices them, and takes the seller/buyer snapshot.
"""

from dataclasses import dataclass

from facturier.core.entities.client import Client
from facturier.core.entities.document import PartySnapshot
from facturier.core.entities.drafts import LineDraft
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.line_item import VAT_RATES, LineItem
from facturier.core.exceptions import (
    ClientNotFoundError,
    IssuerNotConfiguredError,
    ValidationError,
)
from facturier.core.interfaces.storage import IStorage
from facturier.core.services.calculator import Totals, document_totals, line_total


@dataclass
class PricedContent:
    """Lines with their totals, plus the party snapshot and VAT regime."""

    snapshot: PartySnapshot
    lines: list[LineItem]
    totals: Totals
    vat_exempt: bool
    vat_exemption_text: str | None


def validate_lines(lines: list[LineDraft], issuer: IssuerProfile) -> None:
    """
    Reject lines the issuer's VAT regime does not allow.

    Raises:
        ValidationError: A VAT-exempt issuer used a non-zero rate, or a rate
            is outside the French rate set.
    """
    for index, line in enumerate(lines):
        field = f"lines[{index}].vat_rate"
        if line.vat_rate not in VAT_RATES:
            raise ValidationError(field, "unsupported VAT rate", line.vat_rate)
        if issuer.is_vat_exempt and line.vat_rate != 0:
            raise ValidationError(
                field,
                "VAT-exempt issuers must use a 0% rate",
                line.vat_rate,
            )


def price_lines(lines: list[LineDraft]) -> list[LineItem]:
    """Compute each line's totals; sort_order follows input position."""
    priced = []
    for position, line in enumerate(lines):
        totals = line_total(line.quantity, line.unit_price_ht, line.vat_rate)
        priced.append(
            LineItem(
                description=line.description,
                quantity=line.quantity,
                unit=line.unit,
                unit_price_ht=line.unit_price_ht,
                vat_rate=line.vat_rate,
                total_ht=totals.total_ht,
                total_vat=totals.total_vat,
                total_ttc=totals.total_ttc,
                sort_order=position,
            )
        )
    return priced


def take_snapshot(issuer: IssuerProfile, client: Client) -> PartySnapshot:
    """Copy the current seller and buyer identity."""
    return PartySnapshot(
        seller_name=issuer.seller_name,
        seller_siret=issuer.siret,
        seller_address=issuer.seller_address,
        seller_vat_number=issuer.vat_number,
        buyer_name=client.display_name,
        buyer_address=client.full_address,
        buyer_siret=client.siret,
        buyer_is_professional=client.is_professional,
    )


def build_content(
    lines: list[LineDraft],
    issuer: IssuerProfile,
    client: Client,
) -> PricedContent:
    """Validate and price draft lines, and snapshot both parties."""
    validate_lines(lines, issuer)
    priced = price_lines(lines)
    return PricedContent(
        snapshot=take_snapshot(issuer, client),
        lines=priced,
        totals=document_totals(priced),
        vat_exempt=issuer.is_vat_exempt,
        vat_exemption_text=issuer.vat_exemption_text if issuer.is_vat_exempt else None,
    )


async def require_issuer(storage: IStorage) -> IssuerProfile:
    issuer = await storage.issuer.get_profile()
    if issuer is None:
        raise IssuerNotConfiguredError()
    return issuer


async def load_parties(storage: IStorage, client_id: int) -> tuple[IssuerProfile, Client]:
    """Load the issuer profile and an active client for a new document."""
    issuer = await require_issuer(storage)
    client = await storage.clients.get_client(client_id)
    if client is None or client.is_deleted:
        raise ClientNotFoundError(client_id)
    return issuer, client
