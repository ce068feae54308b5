"""Issuer (seller) profile: the business that emits invoices and quotes."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_VAT_EXEMPTION_TEXT = "TVA non applicable, article 293 B du CGI"


class IssuerProfile(BaseModel):
    """
    Seller identity and document defaults.

    Read when a document is created or a quote is converted, then copied into
    the document; later edits never reach documents already issued.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    business_name: str = ""
    first_name: str = ""
    last_name: str = ""
    siret: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""
    email: str | None = None
    phone: str | None = None
    vat_number: str | None = None

    # VAT regime: micro-entrepreneurs are exempt by default
    is_vat_exempt: bool = True
    vat_exemption_text: str = DEFAULT_VAT_EXEMPTION_TEXT

    default_payment_terms_days: int = Field(default=30, ge=0)
    default_late_penalty_rate: float = Field(default=3.0, ge=0)
    default_quote_validity_days: int = Field(default=30, ge=0)
    invoice_prefix: str = Field(default="F", pattern=r"^[A-Za-z0-9]+$")
    quote_prefix: str = Field(default="D", pattern=r"^[A-Za-z0-9]+$")

    # Additional legal mentions
    legal_form: str | None = None  # EI, EIRL, SARL, SAS...
    rcs_number: str | None = None
    share_capital: float | None = None
    payment_methods: str = "Virement bancaire"

    # Bank details
    iban: str | None = None
    bic: str | None = None

    @property
    def seller_name(self) -> str:
        owner = " ".join(p for p in (self.first_name, self.last_name) if p)
        if self.business_name and owner:
            return f"{self.business_name} - {owner}"
        return self.business_name or owner

    @property
    def seller_address(self) -> str:
        return f"{self.address}, {self.postal_code} {self.city}"

    def late_penalty_text(self, template: str) -> str:
        """Render the late-penalty mention with the default rate."""
        return template.format(rate=f"{self.default_late_penalty_rate:g}")
