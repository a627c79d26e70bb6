# app/modules/tracking/router.py
from fastapi import APIRouter, Depends

from app.core.auth.dependencies import require_permission
from app.shared.services.usps_client import TrackingInfo, USPSTrackingClient, get_tracking_client
from .service import TrackingService
from .schemas import TrackingValidateRequest, TrackingFormatResponse, TrackingStatusResponse

router = APIRouter()

@router.post("/validate", response_model=TrackingInfo)
async def validate_tracking_number(
    request: TrackingValidateRequest,
    current_user = Depends(require_permission("tracking", "validate")),
    client: USPSTrackingClient = Depends(get_tracking_client)
):
    """
    Look up a USPS tracking number

    **Errors:**
    - 400 not a USPS format
    - 404 unknown to USPS
    - 502 USPS error or timeout
    - 503 USPS API not configured
    """
    return await TrackingService(client).validate(request.tracking_number)

@router.get("/check-format/{tracking_number}", response_model=TrackingFormatResponse)
async def check_tracking_format(
    tracking_number: str,
    client: USPSTrackingClient = Depends(get_tracking_client)
):
    """Public format check used by the check-in form"""
    return TrackingService(client).check_format(tracking_number)

@router.get("/status", response_model=TrackingStatusResponse)
async def get_tracking_status(
    current_user = Depends(require_permission("tracking", "status")),
    client: USPSTrackingClient = Depends(get_tracking_client)
):
    return TrackingService(client).get_status()
