# app/modules/tracking/schemas.py
from pydantic import BaseModel, Field

class TrackingValidateRequest(BaseModel):
    tracking_number: str = Field(..., description="Tracking number to look up with USPS")

    class Config:
        json_schema_extra = {
            "example": {"tracking_number": "9400111899223197428490"}
        }

class TrackingFormatResponse(BaseModel):
    is_usps: bool
    tracking_number: str
    carrier: str

class TrackingStatusResponse(BaseModel):
    configured: bool
    message: str
