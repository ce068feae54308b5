"""Client domain entities."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

UNNAMED_CLIENT = "Client sans nom"


class ClientData(BaseModel):
    """Editable client fields, as captured by the client form."""

    company_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str
    postal_code: str
    city: str
    country: str = "France"
    siret: str | None = None
    vat_number: str | None = None
    notes: str | None = None
    is_professional: bool = True

    @property
    def display_name(self) -> str:
        """Company name, else "first last", else a placeholder."""
        if self.company_name:
            return self.company_name
        full_name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full_name or UNNAMED_CLIENT

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.postal_code} {self.city}"


class Client(ClientData):
    """A stored client record.

    Clients referenced by documents are soft-deleted (``deleted_at`` set)
    so that the documents' ``client_id`` keeps pointing at a real row.
    """

    id: int | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_data(self) -> ClientData:
        """Return the editable part of the record."""
        return ClientData.model_validate(
            self.model_dump(include=set(ClientData.model_fields))
        )
