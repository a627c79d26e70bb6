# app/modules/recipients/schemas.py
from pydantic import BaseModel, Field, validator
from typing import List
from datetime import datetime

from app.shared.database.models import RecipientType

class RecipientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Full name or department")
    l_number: str = Field(..., min_length=1, max_length=50, description="Institution identifier")
    type: RecipientType = Field(..., description="Student, Faculty, Staff or Department")
    mailbox: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)

    @validator('name', 'l_number', 'mailbox', 'email')
    def strip_required(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "l_number": "L12345",
                "type": "Student",
                "mailbox": "1042",
                "email": "jdoe@mailroom.edu"
            }
        }

class RecipientUpdateRequest(RecipientCreateRequest):
    """Full replacement of a recipient's fields"""
    pass

class RecipientResponse(BaseModel):
    id: int
    name: str
    l_number: str
    type: str
    mailbox: str
    email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class RecipientListResponse(BaseModel):
    recipients: List[RecipientResponse]
    count: int
