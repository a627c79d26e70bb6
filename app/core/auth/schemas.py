from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

class UserLogin(BaseModel):
    """Login request"""
    email: str = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")
    user_type: str = Field(..., pattern="^(student|worker)$", description="Account type")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "worker@mailroom.edu",
                "password": "worker123",
                "user_type": "worker"
            }
        }

class UserRegisterRequest(BaseModel):
    """Self-service registration"""
    email: str = Field(..., min_length=3, description="User email")
    password: str = Field(..., min_length=6)
    user_type: str = Field(..., pattern="^(student|worker)$")
    full_name: Optional[str] = None
    l_number: Optional[str] = Field(None, description="Required for students")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jdoe@mailroom.edu",
                "password": "student123",
                "user_type": "student",
                "full_name": "Jane Doe",
                "l_number": "L12345"
            }
        }

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    full_name: Optional[str] = None
    l_number: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class TokenPayload(BaseModel):
    """Claims carried by the bearer token"""
    user_id: int
    username: str
    email: str
    role: str
    l_number: Optional[str] = None
    exp: Optional[datetime] = None

class PermissionsResponse(BaseModel):
    role: str
    permissions: Dict[str, List[str]]
