"""Fields shared by invoices and quotes."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from facturier.core.entities.line_item import LineItem


class PartySnapshot(BaseModel):
    """
    Point-in-time copy of seller and buyer legal identity.

    Copied into every document at creation so that historical documents stay
    legally accurate when the client record or the issuer profile changes.
    """

    seller_name: str
    seller_siret: str
    seller_address: str
    seller_vat_number: str | None = None
    buyer_name: str
    buyer_address: str
    buyer_siret: str | None = None
    buyer_is_professional: bool = True


class DocumentContent(PartySnapshot):
    """Content common to invoices and quotes: parties, totals, lines."""

    model_config = ConfigDict(allow_inf_nan=False)

    client_id: int
    issue_date: date
    total_ht: float = 0.0
    total_vat: float = 0.0
    total_ttc: float = 0.0
    vat_exempt: bool = True
    vat_exemption_text: str | None = None
    notes: str | None = None
    lines: list[LineItem] = Field(default_factory=list)

    def snapshot(self) -> PartySnapshot:
        return PartySnapshot.model_validate(
            self.model_dump(include=set(PartySnapshot.model_fields))
        )
