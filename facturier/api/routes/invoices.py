"""Invoice endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from facturier.api.dependencies import (
    get_export_csv_use_case,
    get_invoice_lifecycle,
    get_invoice_pdf_use_case,
)
from facturier.application.dto.requests import InvoiceRequest
from facturier.application.dto.responses import (
    ErrorResponse,
    InvoiceListResponse,
    InvoiceResponse,
)
from facturier.application.use_cases import ExportInvoicesCsvUseCase, GenerateInvoicePdfUseCase
from facturier.core.entities.invoice import InvoiceStatus
from facturier.core.services import InvoiceLifecycle

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

LIFECYCLE_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse, "description": "Action not allowed in the current status"},
}


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceListResponse:
    """List invoices, newest first."""
    invoices = await lifecycle.list_invoices()
    if status_filter is not None:
        invoices = [inv for inv in invoices if inv.status == status_filter]
    return InvoiceListResponse(
        invoices=[InvoiceResponse.from_entity(inv) for inv in invoices],
        total=len(invoices),
    )


@router.get("/export.csv", response_class=Response)
async def export_invoices_csv(
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    use_case: ExportInvoicesCsvUseCase = Depends(get_export_csv_use_case),
) -> Response:
    """Download invoices as a semicolon-separated CSV file."""
    result = await use_case.execute(status_filter)
    return Response(
        content=result.content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_invoice(
    request: InvoiceRequest,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    """Create a draft invoice with the next number of the issue year."""
    invoice = await lifecycle.create_invoice(request)
    return InvoiceResponse.from_entity(invoice)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_invoice(
    invoice_id: int,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    return InvoiceResponse.from_entity(await lifecycle.get_invoice(invoice_id))


@router.put(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={400: {"model": ErrorResponse}, **LIFECYCLE_ERRORS},
)
async def update_invoice(
    invoice_id: int,
    request: InvoiceRequest,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    """Replace the content of a draft invoice."""
    invoice = await lifecycle.update_invoice(invoice_id, request)
    return InvoiceResponse.from_entity(invoice)


@router.post("/{invoice_id}/finalize", response_model=InvoiceResponse, responses=LIFECYCLE_ERRORS)
async def finalize_invoice(
    invoice_id: int,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    """Lock the invoice content and mark it sent."""
    return InvoiceResponse.from_entity(await lifecycle.finalize(invoice_id))


@router.post("/{invoice_id}/pay", response_model=InvoiceResponse, responses=LIFECYCLE_ERRORS)
async def pay_invoice(
    invoice_id: int,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    return InvoiceResponse.from_entity(await lifecycle.mark_paid(invoice_id))


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse, responses=LIFECYCLE_ERRORS)
async def cancel_invoice(
    invoice_id: int,
    lifecycle: InvoiceLifecycle = Depends(get_invoice_lifecycle),
) -> InvoiceResponse:
    return InvoiceResponse.from_entity(await lifecycle.cancel(invoice_id))


@router.get(
    "/{invoice_id}/pdf",
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        409: {"model": ErrorResponse, "description": "Issuer profile not configured"},
    },
)
async def get_invoice_pdf(
    invoice_id: int,
    use_case: GenerateInvoicePdfUseCase = Depends(get_invoice_pdf_use_case),
) -> Response:
    """Generate and download the invoice PDF."""
    result = await use_case.execute(invoice_id)
    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
