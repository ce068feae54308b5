"""
Row <-> entity mapping for the SQLite backend.

Every column is listed once here, in the order used by the INSERT/UPDATE
statements of the stores. Dates are stored as ISO strings, booleans as 0/1.
"""

from datetime import date, datetime

import aiosqlite

from facturier.core.entities.client import Client, ClientData
from facturier.core.entities.invoice import Invoice, InvoiceData, InvoiceStatus
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.entities.line_item import LineItem, LineUnit
from facturier.core.entities.quote import Quote, QuoteData, QuoteStatus

CLIENT_COLUMNS = (
    "company_name",
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "postal_code",
    "city",
    "country",
    "siret",
    "vat_number",
    "notes",
    "is_professional",
)

LINE_COLUMNS = (
    "description",
    "quantity",
    "unit",
    "unit_price_ht",
    "vat_rate",
    "total_ht",
    "total_vat",
    "total_ttc",
    "sort_order",
)

# Content shared by invoice and quote headers
DOCUMENT_COLUMNS = (
    "client_id",
    "issue_date",
    "seller_name",
    "seller_siret",
    "seller_address",
    "seller_vat_number",
    "buyer_name",
    "buyer_address",
    "buyer_siret",
    "buyer_is_professional",
    "total_ht",
    "total_vat",
    "total_ttc",
    "vat_exempt",
    "vat_exemption_text",
    "notes",
)

INVOICE_COLUMNS = (
    "invoice_number",
    *DOCUMENT_COLUMNS,
    "due_date",
    "service_date",
    "payment_terms_days",
    "late_penalty_rate",
    "late_penalty_text",
    "recovery_costs_text",
)

QUOTE_COLUMNS = (
    "quote_number",
    *DOCUMENT_COLUMNS,
    "validity_date",
)

ISSUER_COLUMNS = (
    "business_name",
    "first_name",
    "last_name",
    "siret",
    "address",
    "postal_code",
    "city",
    "email",
    "phone",
    "vat_number",
    "is_vat_exempt",
    "vat_exemption_text",
    "default_payment_terms_days",
    "default_late_penalty_rate",
    "default_quote_validity_days",
    "invoice_prefix",
    "quote_prefix",
    "legal_form",
    "rcs_number",
    "share_capital",
    "payment_methods",
    "iban",
    "bic",
)


def placeholders(columns: tuple[str, ...]) -> str:
    return ", ".join("?" for _ in columns)


def assignments(columns: tuple[str, ...]) -> str:
    return ", ".join(f"{c} = ?" for c in columns)


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


# Clients


def client_values(data: ClientData) -> tuple:
    return (
        data.company_name,
        data.first_name,
        data.last_name,
        data.email,
        data.phone,
        data.address,
        data.postal_code,
        data.city,
        data.country,
        data.siret,
        data.vat_number,
        data.notes,
        int(data.is_professional),
    )


def row_to_client(row: aiosqlite.Row) -> Client:
    return Client(
        id=row["id"],
        company_name=row["company_name"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        postal_code=row["postal_code"],
        city=row["city"],
        country=row["country"],
        siret=row["siret"],
        vat_number=row["vat_number"],
        notes=row["notes"],
        is_professional=bool(row["is_professional"]),
        created_at=parse_datetime(row["created_at"]),
        updated_at=parse_datetime(row["updated_at"]),
        deleted_at=parse_datetime(row["deleted_at"]),
    )


# Lines


def line_values(line: LineItem, sort_order: int) -> tuple:
    return (
        line.description,
        line.quantity,
        line.unit.value,
        line.unit_price_ht,
        line.vat_rate,
        line.total_ht,
        line.total_vat,
        line.total_ttc,
        sort_order,
    )


def row_to_line(row: aiosqlite.Row) -> LineItem:
    return LineItem(
        id=row["id"],
        description=row["description"],
        quantity=row["quantity"],
        unit=LineUnit(row["unit"]),
        unit_price_ht=row["unit_price_ht"],
        vat_rate=row["vat_rate"],
        total_ht=row["total_ht"],
        total_vat=row["total_vat"],
        total_ttc=row["total_ttc"],
        sort_order=row["sort_order"],
    )


# Documents


def _document_values(data: InvoiceData | QuoteData) -> tuple:
    return (
        data.client_id,
        iso(data.issue_date),
        data.seller_name,
        data.seller_siret,
        data.seller_address,
        data.seller_vat_number,
        data.buyer_name,
        data.buyer_address,
        data.buyer_siret,
        int(data.buyer_is_professional),
        data.total_ht,
        data.total_vat,
        data.total_ttc,
        int(data.vat_exempt),
        data.vat_exemption_text,
        data.notes,
    )


def _document_fields(row: aiosqlite.Row) -> dict:
    return {
        "client_id": row["client_id"],
        "issue_date": parse_date(row["issue_date"]),
        "seller_name": row["seller_name"],
        "seller_siret": row["seller_siret"],
        "seller_address": row["seller_address"],
        "seller_vat_number": row["seller_vat_number"],
        "buyer_name": row["buyer_name"],
        "buyer_address": row["buyer_address"],
        "buyer_siret": row["buyer_siret"],
        "buyer_is_professional": bool(row["buyer_is_professional"]),
        "total_ht": row["total_ht"],
        "total_vat": row["total_vat"],
        "total_ttc": row["total_ttc"],
        "vat_exempt": bool(row["vat_exempt"]),
        "vat_exemption_text": row["vat_exemption_text"],
        "notes": row["notes"],
    }


def invoice_values(data: InvoiceData) -> tuple:
    return (
        data.invoice_number,
        *_document_values(data),
        iso(data.due_date),
        iso(data.service_date),
        data.payment_terms_days,
        data.late_penalty_rate,
        data.late_penalty_text,
        data.recovery_costs_text,
    )


def row_to_invoice(row: aiosqlite.Row, lines: list[LineItem]) -> Invoice:
    return Invoice(
        id=row["id"],
        invoice_number=row["invoice_number"],
        status=InvoiceStatus(row["status"]),
        **_document_fields(row),
        due_date=parse_date(row["due_date"]),
        service_date=parse_date(row["service_date"]),
        payment_terms_days=row["payment_terms_days"],
        late_penalty_rate=row["late_penalty_rate"],
        late_penalty_text=row["late_penalty_text"],
        recovery_costs_text=row["recovery_costs_text"],
        created_at=parse_datetime(row["created_at"]),
        updated_at=parse_datetime(row["updated_at"]),
        finalized_at=parse_datetime(row["finalized_at"]),
        lines=lines,
    )


def quote_values(data: QuoteData) -> tuple:
    return (
        data.quote_number,
        *_document_values(data),
        iso(data.validity_date),
    )


def row_to_quote(row: aiosqlite.Row, lines: list[LineItem]) -> Quote:
    return Quote(
        id=row["id"],
        quote_number=row["quote_number"],
        status=QuoteStatus(row["status"]),
        **_document_fields(row),
        validity_date=parse_date(row["validity_date"]),
        converted_invoice_id=row["converted_invoice_id"],
        created_at=parse_datetime(row["created_at"]),
        updated_at=parse_datetime(row["updated_at"]),
        lines=lines,
    )


# Issuer


def issuer_values(profile: IssuerProfile) -> tuple:
    return (
        profile.business_name,
        profile.first_name,
        profile.last_name,
        profile.siret,
        profile.address,
        profile.postal_code,
        profile.city,
        profile.email,
        profile.phone,
        profile.vat_number,
        int(profile.is_vat_exempt),
        profile.vat_exemption_text,
        profile.default_payment_terms_days,
        profile.default_late_penalty_rate,
        profile.default_quote_validity_days,
        profile.invoice_prefix,
        profile.quote_prefix,
        profile.legal_form,
        profile.rcs_number,
        profile.share_capital,
        profile.payment_methods,
        profile.iban,
        profile.bic,
    )


def row_to_issuer(row: aiosqlite.Row) -> IssuerProfile:
    return IssuerProfile(
        business_name=row["business_name"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        siret=row["siret"],
        address=row["address"],
        postal_code=row["postal_code"],
        city=row["city"],
        email=row["email"],
        phone=row["phone"],
        vat_number=row["vat_number"],
        is_vat_exempt=bool(row["is_vat_exempt"]),
        vat_exemption_text=row["vat_exemption_text"],
        default_payment_terms_days=row["default_payment_terms_days"],
        default_late_penalty_rate=row["default_late_penalty_rate"],
        default_quote_validity_days=row["default_quote_validity_days"],
        invoice_prefix=row["invoice_prefix"],
        quote_prefix=row["quote_prefix"],
        legal_form=row["legal_form"],
        rcs_number=row["rcs_number"],
        share_capital=row["share_capital"],
        payment_methods=row["payment_methods"],
        iban=row["iban"],
        bic=row["bic"],
    )


def upsert_sql(table: str, columns: tuple[str, ...]) -> str:
    """INSERT keyed on ``id`` that updates the existing row in place."""
    updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders(columns)}) "
        f"ON CONFLICT(id) DO UPDATE SET {updates}"
    )
