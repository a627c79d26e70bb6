# app/modules/packages/schemas.py
from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.shared.database.models import Carrier, PackageStatus

class PackageCheckInRequest(BaseModel):
    tracking_code: str = Field(..., min_length=1, max_length=100, description="Carrier tracking code")
    recipient_id: int = Field(..., description="Recipient the package is for")

    @validator('tracking_code')
    def validate_tracking_code(cls, v):
        if not v.strip():
            raise ValueError('Tracking code cannot be empty')
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "tracking_code": "9400111899223197428490",
                "recipient_id": 1
            }
        }

class PackageUpdateRequest(BaseModel):
    """Worker corrections. Fields not listed here are ignored."""
    tracking_code: Optional[str] = Field(None, min_length=1, max_length=100)
    carrier: Optional[Carrier] = None
    status: Optional[PackageStatus] = None
    recipient_id: Optional[int] = None
    recipient_name: Optional[str] = None
    l_number: Optional[str] = None
    mailbox: Optional[str] = None
    carrier_status: Optional[str] = None
    service_type: Optional[str] = None
    expected_delivery: Optional[str] = None
    last_location: Optional[str] = None
    carrier_data: Optional[Dict[str, Any]] = None

    class Config:
        extra = 'ignore'

class PackageResponse(BaseModel):
    id: int
    tracking_code: str
    carrier: str
    status: str
    recipient_id: Optional[int] = None
    recipient_name: Optional[str] = None
    l_number: Optional[str] = None
    mailbox: Optional[str] = None
    carrier_status: Optional[str] = None
    service_type: Optional[str] = None
    expected_delivery: Optional[str] = None
    last_location: Optional[str] = None
    carrier_data: Optional[Dict[str, Any]] = None
    check_in_date: datetime
    checkout_date: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PackageListResponse(BaseModel):
    packages: List[PackageResponse]
    count: int

class PackageStatsResponse(BaseModel):
    total_packages: int
    checked_in: int
    picked_up: int
    unique_carriers: int
    unique_recipients: int
