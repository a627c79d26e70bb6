# app/shared/schemas/common.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class BaseResponse(BaseModel):
    success: bool = True
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)

class DeleteResponse(BaseResponse):
    id: int
    l_number: Optional[str] = None

class NotificationResponse(BaseResponse):
    sent: bool
