# app/shared/services/usps_client.py
import httpx
import logging
import time
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.config.settings import settings
from app.core.exceptions import TrackingNotFoundError, UpstreamError
from app.modules.tracking.classifier import normalize

logger = logging.getLogger(__name__)


class TrackingInfo(BaseModel):
    """Subset of a USPS tracking response the mailroom cares about"""
    tracking_number: str
    carrier: str = "USPS"
    status: str = "Unknown"
    delivery_date: Optional[str] = None
    service: str = "Unknown"
    events: List[Dict[str, Any]] = Field(default_factory=list)
    last_update: Optional[str] = None
    last_location: Optional[str] = None
    raw_data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_usps(cls, tracking_number: str, data: Dict[str, Any]) -> "TrackingInfo":
        events = data.get("trackingEvents") or []
        latest = events[0] if events else {}
        return cls(
            tracking_number=tracking_number,
            status=data.get("status") or "Unknown",
            delivery_date=data.get("expectedDeliveryDate"),
            service=data.get("mailClass") or "Unknown",
            events=events,
            last_update=latest.get("eventTimestamp"),
            last_location=latest.get("eventLocation"),
            raw_data=data,
        )


class USPSTrackingClient:
    """Client for the USPS OAuth and Tracking v3 APIs"""

    def __init__(
        self,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.base_url = (base_url or settings.usps_base_url).rstrip("/")
        self.timeout = timeout or settings.usps_timeout_seconds
        self.safety_margin = settings.usps_token_safety_margin_seconds
        self._transport = transport
        self._access_token: Optional[str] = None
        self._token_expiry: float = 0.0

    def is_configured(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    def _token_valid(self) -> bool:
        return self._access_token is not None and time.monotonic() < self._token_expiry

    async def get_access_token(self, client: httpx.AsyncClient) -> str:
        """Return the cached OAuth token, fetching a new one once it is close to expiry.

        Concurrent callers may both refresh; the last token written wins and
        both are valid.
        """
        if self._token_valid():
            return self._access_token

        response = await client.post(
            "/oauth2/v3/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self.consumer_key,
                "client_secret": self.consumer_secret,
                "scope": "tracking",
            },
        )
        if response.status_code != 200:
            logger.error(f"USPS OAuth failed: {response.status_code} - {response.text}")
            raise UpstreamError("USPS authentication failed")

        try:
            data = response.json()
            token = data["access_token"]
            expires_in = int(data.get("expires_in", 0))
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.error(f"USPS OAuth returned an unreadable body: {response.text[:200]}")
            raise UpstreamError("Invalid response from USPS")

        self._access_token = token
        self._token_expiry = time.monotonic() + max(expires_in - self.safety_margin, 0)
        logger.info("🔐 USPS access token refreshed")
        return self._access_token

    async def track(self, tracking_code: str) -> TrackingInfo:
        """Look up a tracking number.

        Raises TrackingNotFoundError when USPS does not know the number and
        UpstreamError for every other failure, timeouts included.
        """
        cleaned = normalize(tracking_code)
        if not cleaned:
            raise TrackingNotFoundError(tracking_code or "")
        if not self.is_configured():
            raise UpstreamError("USPS API credentials not configured")

        try:
            async with self._client() as client:
                token = await self.get_access_token(client)
                response = await client.get(
                    f"/tracking/v3/tracking/{cleaned}",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.TimeoutException:
            logger.error(f"Timeout tracking USPS package {cleaned}")
            raise UpstreamError("Timeout contacting USPS")
        except httpx.HTTPError as e:
            logger.error(f"Error contacting USPS for {cleaned}: {e}")
            raise UpstreamError(f"Error contacting USPS: {e}")

        if response.status_code == 404:
            raise TrackingNotFoundError(cleaned)
        if response.status_code != 200:
            logger.error(f"USPS Tracking API error: {response.status_code} - {response.text}")
            raise UpstreamError(f"USPS Tracking API error: {response.status_code}")

        try:
            return TrackingInfo.from_usps(cleaned, response.json())
        except (ValueError, TypeError, AttributeError):
            logger.error(f"USPS Tracking API returned an unreadable body for {cleaned}: {response.text[:200]}")
            raise UpstreamError("Invalid response from USPS")


@lru_cache()
def get_tracking_client() -> USPSTrackingClient:
    """Shared client so the OAuth token is reused across requests"""
    return USPSTrackingClient(
        consumer_key=settings.usps_consumer_key,
        consumer_secret=settings.usps_consumer_secret,
    )
