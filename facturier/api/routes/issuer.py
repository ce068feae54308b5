"""Issuer profile endpoints."""

from fastapi import APIRouter, Depends

from facturier.api.dependencies import get_storage
from facturier.application.dto.requests import IssuerProfileRequest
from facturier.application.dto.responses import ErrorResponse
from facturier.config import get_logger
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.interfaces import IStorage
from facturier.core.services.document_builder import require_issuer

logger = get_logger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get(
    "/issuer",
    response_model=IssuerProfile,
    responses={409: {"model": ErrorResponse, "description": "Profile not configured"}},
)
async def get_issuer_profile(storage: IStorage = Depends(get_storage)) -> IssuerProfile:
    """Get the seller identity printed on documents."""
    return await require_issuer(storage)


@router.put(
    "/issuer",
    response_model=IssuerProfile,
    responses={400: {"model": ErrorResponse}},
)
async def save_issuer_profile(
    request: IssuerProfileRequest,
    storage: IStorage = Depends(get_storage),
) -> IssuerProfile:
    """
    Save the issuer profile.

    Only documents created afterwards pick up the new identity.
    """
    profile = request.to_profile()
    await storage.issuer.save_profile(profile)
    logger.info("issuer_profile_saved", vat_exempt=profile.is_vat_exempt)
    return profile
