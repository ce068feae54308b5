"""Quote endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from facturier.api.dependencies import get_quote_lifecycle, get_quote_pdf_use_case
from facturier.application.dto.requests import QuoteRequest
from facturier.application.dto.responses import (
    ConversionResponse,
    ErrorResponse,
    InvoiceResponse,
    QuoteListResponse,
    QuoteResponse,
)
from facturier.application.use_cases import GenerateQuotePdfUseCase
from facturier.core.entities.quote import QuoteStatus
from facturier.core.services import QuoteLifecycle

router = APIRouter(prefix="/api/quotes", tags=["quotes"])

LIFECYCLE_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse, "description": "Action not allowed in the current status"},
}


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    status_filter: QuoteStatus | None = Query(default=None, alias="status"),
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteListResponse:
    quotes = await lifecycle.list_quotes()
    if status_filter is not None:
        quotes = [q for q in quotes if q.status == status_filter]
    return QuoteListResponse(
        quotes=[QuoteResponse.from_entity(q) for q in quotes],
        total=len(quotes),
    )


@router.post(
    "",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_quote(
    request: QuoteRequest,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.create_quote(request))


@router.get(
    "/{quote_id}",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.get_quote(quote_id))


@router.put(
    "/{quote_id}",
    response_model=QuoteResponse,
    responses={400: {"model": ErrorResponse}, **LIFECYCLE_ERRORS},
)
async def update_quote(
    quote_id: int,
    request: QuoteRequest,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.update_quote(quote_id, request))


@router.post("/{quote_id}/send", response_model=QuoteResponse, responses=LIFECYCLE_ERRORS)
async def send_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.mark_sent(quote_id))


@router.post("/{quote_id}/accept", response_model=QuoteResponse, responses=LIFECYCLE_ERRORS)
async def accept_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.accept(quote_id))


@router.post("/{quote_id}/reject", response_model=QuoteResponse, responses=LIFECYCLE_ERRORS)
async def reject_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.reject(quote_id))


@router.post("/{quote_id}/expire", response_model=QuoteResponse, responses=LIFECYCLE_ERRORS)
async def expire_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> QuoteResponse:
    return QuoteResponse.from_entity(await lifecycle.expire(quote_id))


@router.post(
    "/{quote_id}/convert",
    response_model=ConversionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=LIFECYCLE_ERRORS,
)
async def convert_quote(
    quote_id: int,
    lifecycle: QuoteLifecycle = Depends(get_quote_lifecycle),
) -> ConversionResponse:
    """Create a draft invoice from an accepted quote."""
    result = await lifecycle.convert_to_invoice(quote_id)
    return ConversionResponse(
        quote=QuoteResponse.from_entity(result.quote),
        invoice=InvoiceResponse.from_entity(result.invoice),
    )


@router.get(
    "/{quote_id}/pdf",
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Quote not found"},
        409: {"model": ErrorResponse, "description": "Issuer profile not configured"},
    },
)
async def get_quote_pdf(
    quote_id: int,
    use_case: GenerateQuotePdfUseCase = Depends(get_quote_pdf_use_case),
) -> Response:
    result = await use_case.execute(quote_id)
    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
