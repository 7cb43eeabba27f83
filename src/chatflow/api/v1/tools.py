"""Tool endpoints: licence plate recognition and vehicle registry lookup."""

from fastapi import APIRouter, Depends, Request, Response

from chatflow.api.dependencies import get_alpr_client, get_registry_client, verify_bearer_token
from chatflow.api.limiter import limiter
from chatflow.models.api import (
    ProcessImageBody,
    RegistrationResult,
    VehicleLookupRequest,
    VehicleLookupResponse,
)
from chatflow.tools.alpr import AlprClient
from chatflow.tools.registry import RegistryClient
from chatflow.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tools"])


@router.post("/process-base64-image", response_model=RegistrationResult)
@limiter.limit("30/minute")
async def process_base64_image(
    request: Request,
    response: Response,
    body: ProcessImageBody,
    alpr: AlprClient = Depends(get_alpr_client),
    token: dict = Depends(verify_bearer_token),
) -> RegistrationResult:
    """Read the registration ID from a base64-encoded image."""
    registration_id = await alpr.process_base64_image(body.image_base64)
    return RegistrationResult(registration_id=registration_id)


@router.post("/vehicle-lookup", response_model=VehicleLookupResponse)
@limiter.limit("30/minute")
async def vehicle_lookup(
    request: Request,
    response: Response,
    body: VehicleLookupRequest,
    registry: RegistryClient = Depends(get_registry_client),
    token: dict = Depends(verify_bearer_token),
) -> VehicleLookupResponse:
    """Resolve a registration ID to its owner ID through the vehicle registry."""
    logger.info("Vehicle lookup request", extra={"registration_id": body.registration_id})
    owner_id = await registry.get_owner_id(body.registration_id)
    return VehicleLookupResponse(owner_id=owner_id)
