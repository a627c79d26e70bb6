# app/modules/tracking/service.py
import logging

from app.core.exceptions import UnavailableError, ValidationError
from app.shared.services.usps_client import TrackingInfo, USPSTrackingClient
from .classifier import classify
from .schemas import TrackingFormatResponse, TrackingStatusResponse

logger = logging.getLogger(__name__)


class TrackingService:
    def __init__(self, client: USPSTrackingClient):
        self.client = client

    def check_format(self, tracking_number: str) -> TrackingFormatResponse:
        result = classify(tracking_number)
        return TrackingFormatResponse(
            is_usps=result.is_usps,
            tracking_number=tracking_number,
            carrier=result.carrier.value
        )

    def get_status(self) -> TrackingStatusResponse:
        configured = self.client.is_configured()
        return TrackingStatusResponse(
            configured=configured,
            message="USPS API is configured and ready" if configured
            else "USPS API credentials not configured"
        )

    async def validate(self, tracking_number: str) -> TrackingInfo:
        """Look a USPS number up; unlike check-in, failures are reported to the caller"""
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number is required")

        if not self.client.is_configured():
            raise UnavailableError(
                "USPS API not configured. Set USPS_CONSUMER_KEY and USPS_CONSUMER_SECRET"
            )

        result = classify(tracking_number)
        if not result.is_usps:
            raise ValidationError(f"Invalid USPS tracking number format: {tracking_number}")

        info = await self.client.track(result.normalized)
        logger.info(f"🔎 USPS tracking validated for {result.normalized}: {info.status}")
        return info
