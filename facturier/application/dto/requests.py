"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
Identifier checks (SIRET, VAT number) run here, before any store call.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from facturier.core.entities.client import ClientData
from facturier.core.entities.drafts import InvoiceDraft, LineDraft, QuoteDraft
from facturier.core.entities.issuer import DEFAULT_VAT_EXEMPTION_TEXT, IssuerProfile
from facturier.core.exceptions import InvalidSiretError, ValidationError
from facturier.core.validation import is_valid_siren, is_valid_siret, normalize_siret


def _checked_siret(value: str | None, field: str, required: bool = False) -> str | None:
    if not value:
        if required:
            raise ValidationError(field, "SIRET is required")
        return None
    siret = normalize_siret(value)
    if not is_valid_siret(siret):
        raise InvalidSiretError(value, field=field)
    return siret


def _checked_vat_number(value: str | None, field: str = "vat_number") -> str | None:
    """French intra-community numbers embed the SIREN after a 2-char key."""
    if not value:
        return None
    vat_number = value.replace(" ", "").upper()
    if vat_number.startswith("FR"):
        siren = vat_number[4:]
        if len(vat_number) != 13 or not is_valid_siren(siren):
            raise ValidationError(field, "invalid French VAT number", value)
    return vat_number


class ClientRequest(BaseModel):
    """Client form payload."""

    company_name: str | None = Field(default=None, examples=["Atelier Dupont"])
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str = Field(..., min_length=1, examples=["12 rue des Lilas"])
    postal_code: str = Field(..., min_length=1, examples=["75011"])
    city: str = Field(..., min_length=1, examples=["Paris"])
    country: str = "France"
    siret: str | None = Field(default=None, examples=["73282932000074"])
    vat_number: str | None = None
    notes: str | None = None
    is_professional: bool = True

    def to_data(self) -> ClientData:
        """
        Validate identifiers and build the registry input.

        Raises:
            InvalidSiretError: SIRET fails the format or checksum test.
            ValidationError: Malformed French VAT number.
        """
        values: dict[str, Any] = self.model_dump()
        values["siret"] = _checked_siret(self.siret, "siret")
        values["vat_number"] = _checked_vat_number(self.vat_number)
        return ClientData.model_validate(values)


class IssuerProfileRequest(BaseModel):
    """Issuer settings form payload."""

    model_config = ConfigDict(allow_inf_nan=False)

    business_name: str = ""
    first_name: str = ""
    last_name: str = ""
    siret: str = Field(..., examples=["73282932000074"])
    address: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    email: str | None = None
    phone: str | None = None
    vat_number: str | None = None

    is_vat_exempt: bool = True
    vat_exemption_text: str = DEFAULT_VAT_EXEMPTION_TEXT

    default_payment_terms_days: int = Field(default=30, ge=0)
    default_late_penalty_rate: float = Field(default=3.0, ge=0)
    default_quote_validity_days: int = Field(default=30, ge=0)
    invoice_prefix: str = Field(default="F", pattern=r"^[A-Za-z0-9]+$")
    quote_prefix: str = Field(default="D", pattern=r"^[A-Za-z0-9]+$")

    legal_form: str | None = None
    rcs_number: str | None = None
    share_capital: float | None = Field(default=None, ge=0)
    payment_methods: str = "Virement bancaire"
    iban: str | None = None
    bic: str | None = None

    def to_profile(self) -> IssuerProfile:
        """Validate identifiers and build the stored profile."""
        if not (self.business_name or self.first_name or self.last_name):
            raise ValidationError("business_name", "a business or owner name is required")
        values: dict[str, Any] = self.model_dump()
        values["siret"] = _checked_siret(self.siret, "siret", required=True)
        values["vat_number"] = _checked_vat_number(self.vat_number)
        if values["iban"]:
            values["iban"] = values["iban"].replace(" ", "").upper()
        return IssuerProfile.model_validate(values)


# Document forms are the core drafts themselves
InvoiceRequest = InvoiceDraft
QuoteRequest = QuoteDraft
LineRequest = LineDraft
