"""Backup and restore endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from facturier.api.dependencies import get_export_backup_use_case, get_restore_backup_use_case
from facturier.application.dto.responses import ErrorResponse, RestoreResponse
from facturier.application.use_cases import ExportBackupUseCase, RestoreBackupUseCase

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("", response_class=Response)
async def download_backup(
    use_case: ExportBackupUseCase = Depends(get_export_backup_use_case),
) -> Response:
    """Download settings, clients, invoices and quotes as one JSON file."""
    backup = await use_case.execute()
    filename = f"facturier_backup_{date.today().isoformat()}.json"
    return Response(
        content=use_case.to_json(backup),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/restore",
    response_model=RestoreResponse,
    responses={400: {"model": ErrorResponse, "description": "Not a backup file"}},
)
async def restore_backup(
    request: Request,
    use_case: RestoreBackupUseCase = Depends(get_restore_backup_use_case),
) -> RestoreResponse:
    """
    Restore a backup posted as the raw JSON body.

    Records are upserted under their original ids; nothing is written if any
    record fails.
    """
    summary = await use_case.execute_json(await request.body())
    return RestoreResponse(
        settings=summary.settings,
        clients=summary.clients,
        invoices=summary.invoices,
        quotes=summary.quotes,
    )
